# skillbarter/schemas/review.py
"""
Review & Rating Pydantic Schemas
Request/response models with validation
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import datetime


class ReviewCreate(BaseModel):
    """Schema for rating a completed swap"""
    swap_id: int = Field(..., description="Completed swap identifier")
    rating: int = Field(..., ge=1, le=5, description="Rating from 1 to 5 stars")
    comment: Optional[str] = Field(None, max_length=1000, description="Review comment (max 1000 chars)")

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v):
        """Blank comments are stored as no comment"""
        if v is None:
            return None
        return v.strip() or None


class Review(BaseModel):
    """Review response for API"""
    id: int
    swap_id: int
    reviewer_id: int
    reviewer_name: Optional[str] = None
    reviewed_id: int
    rating: int
    comment: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ReviewSubmitResponse(BaseModel):
    """Response after submitting a review"""
    review_id: int
    swap_id: int
    rating: int
    comment: Optional[str] = None
    reviewed_new_average: float = Field(..., description="Reviewed user's updated average rating")
    reviewed_total_reviews: int = Field(..., description="Reviewed user's total review count")
    message: str
