import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import stores  # noqa: E402
from auth import UserCache  # noqa: E402
from file_store import FileStore  # noqa: E402
from models import User  # noqa: E402
from review_service import ReviewService  # noqa: E402

ALICE_KEY = "key-alice-123"
BOB_KEY = "key-bob-admin-456"
CAROL_KEY = "key-carol-789"


@pytest.fixture(autouse=True)
def file_store(tmp_path, monkeypatch) -> FileStore:
    """Point the shared stores at a fresh data directory for every test."""
    store = FileStore(tmp_path / "data")
    monkeypatch.setattr(stores, "FILE_STORE", store)
    monkeypatch.setattr(stores, "USERS_CACHE", UserCache(store))
    monkeypatch.setattr(stores, "REVIEW_SERVICE", ReviewService(store))
    return store


@pytest.fixture
def with_carol(file_store):
    """Add a third, non-admin user next to the sample ones."""
    users = file_store.load_users()
    users.append(User(id="user-3", username="carol", role="user", api_key=CAROL_KEY))
    file_store._write_json_atomic(file_store.users_file, [u.model_dump(by_alias=True) for u in users])
    stores.USERS_CACHE.invalidate()
    return users


@pytest.fixture
def alice() -> User:
    return User(id="user-1", username="alice", role="user", api_key=ALICE_KEY)


@pytest.fixture
def bob() -> User:
    return User(id="user-2", username="bob", role="admin", api_key=BOB_KEY)


@pytest.fixture
def carol() -> User:
    return User(id="user-3", username="carol", role="user", api_key=CAROL_KEY)
