# skillbarter/api/review.py
"""
Review & Rating API Router

Endpoints:
- POST /reviews/ - Rate the partner of a completed swap
- GET /reviews/user/{user_id} - Reviews a user received
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from skillbarter.database import get_db
from skillbarter.models.user import User
from skillbarter.schemas.review import Review, ReviewCreate, ReviewSubmitResponse
from skillbarter.services import review_service
from skillbarter.utils.security import get_current_user

router = APIRouter(prefix="/reviews", tags=["reviews"])


# ======================
# SUBMIT REVIEW
# ======================
@router.post("/", response_model=ReviewSubmitResponse, status_code=status.HTTP_201_CREATED)
def submit_review(
    review: ReviewCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Submit a review for a completed swap.

    Requirements:
    - Swap must be completed
    - User must be a participant of the swap
    - One review per participant per swap
    - Rating must be 1-5
    """
    try:
        result = review_service.submit_review(
            db=db,
            swap_id=review.swap_id,
            reviewer_id=current_user.id,
            rating=review.rating,
            comment=review.comment
        )
    except LookupError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except PermissionError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return ReviewSubmitResponse(**result)


# ======================
# GET REVIEWS FOR USER
# ======================
@router.get("/user/{user_id}", response_model=List[Review])
def get_user_reviews(
    user_id: int,
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db)
):
    """Reviews a user received, newest first."""
    reviews = review_service.get_reviews_for_user(db, user_id, limit=limit, offset=offset)
    return [
        Review(
            id=r.id,
            swap_id=r.swap_id,
            reviewer_id=r.reviewer_id,
            reviewer_name=r.reviewer.name if r.reviewer else None,
            reviewed_id=r.reviewed_id,
            rating=r.rating,
            comment=r.comment,
            created_at=r.created_at,
        )
        for r in reviews
    ]
