from typing import Optional

from fastapi import APIRouter, Depends

from auth import require_user
from models import ReviewCreateRequest, ReviewUpdateRequest, User
from review_service import UNSET, ReviewService
from stores import get_review_service

router = APIRouter(prefix="/api/reviews", tags=["reviews"])


@router.post("", status_code=201)
def create_review(
    req: ReviewCreateRequest,
    user: User = Depends(require_user),
    service: ReviewService = Depends(get_review_service),
):
    review = service.create(
        user,
        book_title=req.book_title,
        author=req.author,
        review_text=req.review_text,
        rating=req.rating,
        tags=req.tags,
        status=req.status,
    )
    return {"review": review}


@router.get("")
def list_reviews(
    author: Optional[str] = None,
    rating: Optional[str] = None,
    status: Optional[str] = None,
    sort: Optional[str] = None,
    service: ReviewService = Depends(get_review_service),
):
    return service.list_reviews(author=author, rating=rating, status=status, sort=sort)


@router.put("/{review_id}")
def update_review(
    review_id: str,
    req: Optional[ReviewUpdateRequest] = None,
    user: User = Depends(require_user),
    service: ReviewService = Depends(get_review_service),
):
    # Only fields present in the JSON body are applied; no body means no fields
    if req is None:
        req = ReviewUpdateRequest()
    provided = req.model_fields_set
    review = service.update(
        user,
        review_id,
        review_text=req.review_text if "review_text" in provided else UNSET,
        rating=req.rating if "rating" in provided else UNSET,
        tags=req.tags if "tags" in provided else UNSET,
    )
    return {"review": review}


@router.delete("/{review_id}")
def delete_review(
    review_id: str,
    user: User = Depends(require_user),
    service: ReviewService = Depends(get_review_service),
):
    return service.delete(user, review_id)
