# /models.py
import uuid
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from utils import now_iso


class CamelModel(BaseModel):
    # Wire format is camelCase (bookTitle, apiKey, ...), Python side stays snake_case
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ----------------------------
# Stored records
# ----------------------------

class User(CamelModel):
    id: str
    username: str
    role: str = "user"  # "user" or "admin"
    api_key: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class Review(CamelModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    book_title: str
    author: str
    review_text: str
    rating: int
    tags: List[str] = []
    status: str = "pending"
    user_id: str
    username: str
    created_at: str = Field(default_factory=now_iso)
    updated_at: str = Field(default_factory=now_iso)


SAMPLE_USERS: List[User] = [
    User(id="user-1", username="alice", role="user", api_key="key-alice-123"),
    User(id="user-2", username="bob", role="admin", api_key="key-bob-admin-456"),
]


# ----------------------------
# Request bodies
# ----------------------------
# Validation lives in the review service; bodies accept any JSON value and
# invalid input is reported as 400 from there.

class ReviewCreateRequest(CamelModel):
    book_title: Any = None
    author: Any = None
    review_text: Any = None
    rating: Any = None
    tags: Any = None
    status: Any = None


class ReviewUpdateRequest(CamelModel):
    review_text: Any = None
    rating: Any = None
    tags: Any = None
