import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# Silence request logging
os.environ.setdefault("SHORTADMIN_TEST_MODE", "1")


@pytest.fixture(autouse=True)
def reset_providers():
    """Reset provider state between tests to avoid leakage."""
    from shortadmin.notifications import provider

    provider.reset_for_tests()
    yield
    provider.reset_for_tests()


@pytest.fixture
def kv():
    from shortadmin.kv_store import MemoryKeyValueStore

    return MemoryKeyValueStore()


@pytest.fixture
def store(kv):
    from shortadmin.notifications import NotificationPersistence, NotificationStore

    s = NotificationStore(NotificationPersistence(kv))
    s.activate()
    return s
