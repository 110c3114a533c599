# smartassist/routers/reviews.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from smartassist.deps import get_current_user_id, get_storage
from smartassist.schemas import ReviewIn, ReviewOut
from smartassist.storage import Storage, StorageError

router = APIRouter(prefix="/api/reviews", tags=["reviews"])
log = logging.getLogger(__name__)


@router.post("", response_model=ReviewOut, status_code=201)
def create_review(
    payload: ReviewIn,
    storage: Storage = Depends(get_storage),
    user_id: str = Depends(get_current_user_id),
):
    """
    Rate a technician (1-5). The technician's rating and totalReviews are
    recomputed in the same transaction.
    """
    try:
        review = storage.create_review({**payload.model_dump(), "user_id": user_id})
    except StorageError as e:
        raise HTTPException(status_code=400, detail=f"Error creating review: {e}")
    log.info("review created id=%s technician=%s rating=%s", review.id, review.technician_id, review.rating)
    return review


@router.get("/{review_id}", response_model=ReviewOut)
def get_review(review_id: str, storage: Storage = Depends(get_storage)):
    review = storage.get_review(review_id)
    if not review:
        raise HTTPException(status_code=404, detail="Review not found")
    return review
