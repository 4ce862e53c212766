# stores.py
# Centralize process-wide stores to avoid circular imports.

from auth import UserCache
from config import DATA_DIR
from file_store import FileStore
from review_service import ReviewService

FILE_STORE = FileStore(DATA_DIR)
USERS_CACHE = UserCache(FILE_STORE)  # populated at startup or on first authenticated request
REVIEW_SERVICE = ReviewService(FILE_STORE)


def get_review_service() -> ReviewService:
    return REVIEW_SERVICE
