import pytest

from shortadmin.kv_store import MemoryKeyValueStore, SQLiteKeyValueStore, StorageQuotaError


@pytest.fixture(params=["memory", "sqlite"])
def backend(request, tmp_path):
    if request.param == "memory":
        return MemoryKeyValueStore(quota_bytes=16)
    return SQLiteKeyValueStore(str(tmp_path / "data" / "kv.db"), quota_bytes=16)


def test_set_get_remove(backend):
    assert backend.get_item("k") is None
    backend.set_item("k", "v1")
    backend.set_item("k", "v2")
    assert backend.get_item("k") == "v2"
    backend.remove_item("k")
    assert backend.get_item("k") is None
    backend.remove_item("k")


def test_quota_rejects_large_values(backend):
    backend.set_item("k", "small")
    with pytest.raises(StorageQuotaError) as exc:
        backend.set_item("k", "x" * 17)
    assert exc.value.size == 17
    assert exc.value.quota == 16
    assert backend.get_item("k") == "small"


def test_sqlite_values_survive_new_instance(tmp_path):
    path = str(tmp_path / "kv.db")
    SQLiteKeyValueStore(path).set_item("notifications", "[]")
    assert SQLiteKeyValueStore(path).get_item("notifications") == "[]"
