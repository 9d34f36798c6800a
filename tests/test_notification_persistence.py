import json

import pytest

from shortadmin.kv_store import MemoryKeyValueStore, SQLiteKeyValueStore, StorageQuotaError
from shortadmin.notifications import Notification, NotificationPersistence, storage_key_for


def _sample(n=3):
    return [Notification.create(f"T{i}", f"M{i}", 1_700_000_000_000 + i) for i in range(n)]


def test_load_absent_key_is_empty(kv):
    assert NotificationPersistence(kv).load() == []


def test_round_trip(kv):
    persistence = NotificationPersistence(kv)
    items = _sample()
    result = persistence.save(items)
    assert result.ok is True
    assert result.error is None
    assert persistence.load() == items


def test_save_empty_writes_array(kv):
    persistence = NotificationPersistence(kv)
    persistence.save(_sample())
    persistence.save([])
    assert kv.get_item("notifications") == "[]"


@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        json.dumps({"id": "x"}),
        json.dumps([{"id": "x", "title": "t"}]),
        json.dumps([{"id": 1, "title": "t", "message": "m", "time": "Just now", "timestamp": 1, "read": False}]),
        json.dumps([{"id": "x", "title": "t", "message": "m", "time": "Just now", "timestamp": True, "read": False}]),
        json.dumps(["plain string"]),
        '[{"id": "x", "title": "t", "message": "m", "time": "Just now", "timestamp": Infinity, "read": false}]',
        '[{"id": "x", "title": "t", "message": "m", "time": "Just now", "timestamp": NaN, "read": false}]',
        json.dumps([{"id": "x", "title": "t", "message": "m", "time": "Just now", "timestamp": -10**18, "read": False}]),
        json.dumps([{"id": "x", "title": "t", "message": "m", "time": "Just now", "timestamp": 10**400, "read": False}]),
    ],
)
def test_corrupt_payload_loads_empty(kv, raw):
    kv.set_item("notifications", raw)
    reports = []
    persistence = NotificationPersistence(kv, reporter=lambda err, ctx: reports.append((err, ctx)))
    assert persistence.load() == []
    assert len(reports) == 1
    assert reports[0][1] == {"operation": "load", "key": "notifications"}


def test_deeply_nested_payload_loads_empty(kv):
    kv.set_item("notifications", "[" * 100000 + "]" * 100000)
    reports = []
    persistence = NotificationPersistence(kv, reporter=lambda err, ctx: reports.append((err, ctx)))
    assert persistence.load() == []
    assert len(reports) == 1


def test_save_quota_error_is_reported_not_raised():
    kv = MemoryKeyValueStore(quota_bytes=5)
    reports = []
    persistence = NotificationPersistence(kv, reporter=lambda err, ctx: reports.append((err, ctx)))
    result = persistence.save(_sample())
    assert result.ok is False
    assert isinstance(result.error, StorageQuotaError)
    assert reports[0][1]["operation"] == "save"


def test_failing_reporter_does_not_escape(kv, caplog):
    def broken(err, ctx):
        raise RuntimeError("sink down")

    kv.set_item("notifications", "garbage")
    assert NotificationPersistence(kv, reporter=broken).load() == []
    assert "notification error reporter failed" in caplog.text


def test_backend_read_error_is_absorbed():
    class ExplodingStore:
        def get_item(self, key):
            raise OSError("disk gone")

    assert NotificationPersistence(ExplodingStore()).load() == []


def test_storage_key_for():
    assert storage_key_for(None) == "notifications"
    assert storage_key_for("") == "notifications"
    assert storage_key_for("42") == "notifications_42"
    assert storage_key_for(7, base="alerts") == "alerts_7"


def test_per_user_keys_are_isolated(kv):
    alice = NotificationPersistence(kv, key=storage_key_for("alice"))
    bob = NotificationPersistence(kv, key=storage_key_for("bob"))
    alice.save(_sample(2))
    assert bob.load() == []
    assert len(alice.load()) == 2


def test_sqlite_round_trip(tmp_path):
    db_path = str(tmp_path / "kv.db")
    items = _sample(4)
    NotificationPersistence(SQLiteKeyValueStore(db_path)).save(items)
    assert NotificationPersistence(SQLiteKeyValueStore(db_path)).load() == items
