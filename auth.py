"""User cache and the API-key gate used by mutating routes."""

from __future__ import annotations

import threading
from typing import List, Optional

import structlog
from fastapi import Header

from config import settings
from errors import AuthenticationError
from file_store import FileStore
from models import User

logger = structlog.get_logger("app")


class UserCache:
    """Process-wide snapshot of users.json.

    Loaded once (eagerly via ``warm`` at startup, or lazily on first lookup) and
    kept for the life of the process. Edits to the file on disk are only seen
    after ``invalidate``.
    """

    def __init__(self, store: FileStore):
        self.store = store
        self._users: Optional[List[User]] = None
        self._lock = threading.Lock()

    def get_users(self) -> List[User]:
        if self._users is None:
            with self._lock:
                if self._users is None:
                    self._users = self.store.load_users()
                    logger.info("Users cache loaded", count=len(self._users))
        return self._users

    def warm(self) -> None:
        self.get_users()

    def invalidate(self) -> None:
        with self._lock:
            self._users = None

    def find_by_api_key(self, api_key: str) -> Optional[User]:
        return next((u for u in self.get_users() if u.api_key == api_key), None)


def require_user(api_key: Optional[str] = Header(default=None, alias=settings.api_key_header)) -> User:
    """Resolve the API-key header (x-api-key) to a user or fail with 401."""
    import stores

    if not api_key:
        raise AuthenticationError(f"Missing API key in {settings.api_key_header} header")
    user = stores.USERS_CACHE.find_by_api_key(api_key)
    if user is None:
        raise AuthenticationError("Invalid API key")
    return user
