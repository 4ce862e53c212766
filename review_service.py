"""Business rules for book reviews on top of the file store.

Every call reads the whole reviews document. Mutations run their
read-modify-write under one lock per service, so writers in this process
are serialised; separate processes sharing a data directory are not.
"""

from __future__ import annotations

import re
import threading
from typing import Any, Dict, List, Optional

import structlog

from config import settings
from errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from file_store import FileStore
from models import Review, User
from utils import normalize_key, now_iso, parse_iso

logger = structlog.get_logger("app")

UNSET: Any = object()

INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

SORT_KEYS = {"rating": "rating", "date": "createdAt", "createdAt": "createdAt"}


def coerce_rating(value: Any) -> Optional[int]:
    """Return the rating as an int in range, or None when it is not a valid rating."""
    if isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if not isinstance(value, int):
        return None
    if settings.min_rating <= value <= settings.max_rating:
        return value
    return None


def coerce_tags(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    return [str(t) for t in value[: settings.max_tags]]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return not value


class ReviewService:
    def __init__(self, store: FileStore):
        self.store = store
        self._write_lock = threading.Lock()

    def _find_index(self, reviews: List[Dict[str, Any]], review_id: str) -> int:
        for i, r in enumerate(reviews):
            if r.get("id") == review_id:
                return i
        raise NotFoundError("Review not found")

    # ----------------------------
    # Create
    # ----------------------------

    def create(
        self,
        caller: User,
        book_title: Any,
        author: Any,
        review_text: Any,
        rating: Any,
        tags: Any = None,
        status: Any = None,
    ) -> Dict[str, Any]:
        if _is_blank(book_title) or _is_blank(author) or not review_text:
            raise ValidationError("bookTitle, author and reviewText are required")
        valid_rating = coerce_rating(rating)
        if valid_rating is None:
            raise ValidationError("rating must be an integer between 1 and 5")

        title_key, author_key = normalize_key(book_title), normalize_key(author)

        with self._write_lock:
            reviews = self.store.read_reviews()
            duplicate = any(
                r.get("userId") == caller.id
                and normalize_key(r.get("bookTitle")) == title_key
                and normalize_key(r.get("author")) == author_key
                for r in reviews
            )
            if duplicate:
                raise ConflictError("Duplicate review: you have already reviewed this book")

            stamp = now_iso()
            review = Review(
                book_title=str(book_title).strip(),
                author=str(author).strip(),
                review_text=str(review_text),
                rating=valid_rating,
                tags=coerce_tags(tags) or [],
                status=str(status) if status else settings.default_status,
                user_id=caller.id,
                username=caller.username,
                created_at=stamp,
                updated_at=stamp,
            ).model_dump(by_alias=True)

            reviews.append(review)
            self.store.write_reviews(reviews)

        logger.info("Review created", review_id=review["id"], user_id=caller.id)
        return review

    # ----------------------------
    # List
    # ----------------------------

    def list_reviews(
        self,
        author: Optional[str] = None,
        rating: Optional[str] = None,
        status: Optional[str] = None,
        sort: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Filter (AND) then sort the stored reviews. No sort keeps storage order."""
        rating_filter: Optional[int] = None
        if rating:
            text = str(rating).strip()
            if not INTEGER_PATTERN.fullmatch(text):
                raise ValidationError("rating query param must be an integer")
            rating_filter = int(text)

        sort_field: Optional[str] = None
        descending = False
        if sort:
            key, _, direction = str(sort).partition(":")
            sort_field = SORT_KEYS.get(key)
            if sort_field is None:
                raise ValidationError("Unsupported sort key. Use rating or date")
            descending = direction == "desc"

        out = list(self.store.read_reviews())

        if author:
            needle = normalize_key(author)
            out = [r for r in out if r.get("author") and needle in str(r["author"]).lower()]
        if rating_filter is not None:
            out = [r for r in out if r.get("rating") == rating_filter]
        if status:
            wanted = normalize_key(status)
            out = [r for r in out if r.get("status") and str(r["status"]).lower() == wanted]

        if sort_field == "rating":
            out.sort(key=lambda r: r.get("rating") or 0, reverse=descending)
        elif sort_field == "createdAt":
            out.sort(key=_created_sort_key, reverse=descending)
        return out

    # ----------------------------
    # Update
    # ----------------------------

    def update(
        self,
        caller: User,
        review_id: str,
        *,
        review_text: Any = UNSET,
        rating: Any = UNSET,
        tags: Any = UNSET,
    ) -> Dict[str, Any]:
        """Partial update by the review's owner. Admins get no override here."""
        valid_rating: Optional[int] = None
        if rating is not UNSET:
            valid_rating = coerce_rating(rating)
            if valid_rating is None:
                raise ValidationError("rating must be an integer between 1 and 5")

        with self._write_lock:
            reviews = self.store.read_reviews()
            idx = self._find_index(reviews, review_id)
            review = reviews[idx]
            if review.get("userId") != caller.id:
                raise AuthorizationError("You are not authorized to update this review")

            if review_text is not UNSET and review_text is not None:
                review["reviewText"] = str(review_text)
            if valid_rating is not None:
                review["rating"] = valid_rating
            if tags is not UNSET:
                new_tags = coerce_tags(tags)
                if new_tags is not None:
                    review["tags"] = new_tags
            review["updatedAt"] = now_iso()

            reviews[idx] = review
            self.store.write_reviews(reviews)

        logger.info("Review updated", review_id=review_id, user_id=caller.id)
        return review

    # ----------------------------
    # Delete
    # ----------------------------

    def delete(self, caller: User, review_id: str) -> Dict[str, str]:
        """Remove a review; its owner or any admin may do so."""
        with self._write_lock:
            reviews = self.store.read_reviews()
            idx = self._find_index(reviews, review_id)
            review = reviews[idx]
            if review.get("userId") != caller.id and not caller.is_admin:
                raise AuthorizationError("You are not authorized to delete this review")
            reviews.pop(idx)
            self.store.write_reviews(reviews)

        logger.info("Review deleted", review_id=review_id, user_id=caller.id, role=caller.role)
        return {"message": "Review deleted"}


def _created_sort_key(review: Dict[str, Any]) -> float:
    parsed = parse_iso(review.get("createdAt"))
    return parsed.timestamp() if parsed else float("-inf")
