# skillbarter/services/review_service.py
"""
Review Service Layer
Business logic for rating completed swaps and keeping profile ratings current
"""

from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skillbarter.crud import user as user_crud
from skillbarter.models.review import Review
from skillbarter.models.swap import SWAP_COMPLETED
from skillbarter.services.swap_service import get_swap_for_participant


# ======================
# RATING AGGREGATE
# ======================

def update_user_rating(db: Session, user_id: int) -> Tuple[float, int]:
    """
    Recompute a user's average rating from the reviews they received.

    Args:
        db: Database session
        user_id: Reviewed user ID

    Returns:
        (average_rating, total_reviews); average is 0.0 with no reviews
    """
    average, total = db.query(
        func.avg(Review.rating),
        func.count(Review.id),
    ).filter(Review.reviewed_id == user_id).one()

    average_rating = round(float(average), 2) if average is not None else 0.0
    profile = user_crud.get_or_create_profile(db, user_id)
    profile.rating = average_rating
    db.flush()
    return average_rating, int(total or 0)


# ======================
# REVIEW SUBMISSION
# ======================

def submit_review(
    db: Session,
    swap_id: int,
    reviewer_id: int,
    rating: int,
    comment: Optional[str] = None
) -> Dict[str, Any]:
    """
    Rate the partner of a completed swap.

    Args:
        db: Database session
        swap_id: Swap identifier
        reviewer_id: Participant writing the review
        rating: Rating value (1-5)
        comment: Optional text comment

    Returns:
        Dictionary with review details and the reviewed user's new average

    Raises:
        LookupError: Swap not found
        PermissionError: Reviewer did not take part in the swap
        ValueError: Swap not completed, duplicate review or bad rating
    """
    swap = get_swap_for_participant(db, swap_id, reviewer_id)

    if swap.status != SWAP_COMPLETED:
        raise ValueError("Only completed swaps can be reviewed")

    if not (1 <= rating <= 5):
        raise ValueError("Rating must be between 1 and 5")

    if comment and len(comment) > 1000:
        raise ValueError("Comment must be 1000 characters or less")

    existing = db.query(Review).filter(
        Review.swap_id == swap_id,
        Review.reviewer_id == reviewer_id,
    ).first()
    if existing:
        raise ValueError("You have already reviewed this swap")

    reviewed_id = swap.partner_of(reviewer_id)

    try:
        review = Review(
            swap_id=swap_id,
            reviewer_id=reviewer_id,
            reviewed_id=reviewed_id,
            rating=rating,
            comment=comment,
        )
        db.add(review)
        db.flush()

        new_average, total_reviews = update_user_rating(db, reviewed_id)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    return {
        "review_id": review.id,
        "swap_id": review.swap_id,
        "rating": review.rating,
        "comment": review.comment,
        "reviewed_new_average": new_average,
        "reviewed_total_reviews": total_reviews,
        "message": "Review submitted successfully",
    }


def get_reviews_for_user(
    db: Session,
    user_id: int,
    limit: int = 50,
    offset: int = 0
) -> List[Review]:
    """Reviews a user received, newest first."""
    return (
        db.query(Review)
        .filter(Review.reviewed_id == user_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .limit(limit)
        .offset(offset)
        .all()
    )
