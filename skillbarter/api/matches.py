# skillbarter/api/matches.py
"""
Match API Router

Endpoints:
- GET /matches/ - Ranked reciprocal skill matches for the current user
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from skillbarter import models
from skillbarter.config import settings
from skillbarter.database import get_db
from skillbarter.matching import LedgerUnavailable, NoDeclaredSkills, get_match_engine
from skillbarter.schemas.match import MatchProfile, MatchResponse
from skillbarter.utils.security import get_current_user

router = APIRouter(prefix="/matches", tags=["matches"])
logger = logging.getLogger(__name__)


@router.get("/", response_model=List[MatchResponse])
def get_matches(
    limit: Optional[int] = Query(None, ge=1, le=200, description="Maximum matches to return"),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Get users whose skills cross-satisfy the current user's.

    Each returned user offers a skill you want and wants a skill you offer.
    An empty list means nobody matches yet; a 400 with code
    ``no_declared_skills`` means the user must add skills first.
    """
    engine = get_match_engine(db)

    try:
        matches = engine.find_matches(
            current_user.id,
            limit=limit or settings.MATCH_RESULT_LIMIT,
        )
    except NoDeclaredSkills as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "no_declared_skills", "message": str(e)},
        )
    except LedgerUnavailable as e:
        logger.error("Match computation failed for user %s: %s", current_user.id, e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Matches are temporarily unavailable, please retry",
        )

    response = []
    for rank, match in enumerate(matches, start=1):
        profile = match.profile
        response.append(
            MatchResponse(
                id=f"{match.offering_user_id}-{match.offered_skill_id}",
                user_id=match.offering_user_id,
                user_name=profile.name if profile else "Unknown User",
                skill_offered_id=match.offered_skill_id,
                skill_offered=match.offered_skill_name,
                skill_wanted_id=match.wanted_skill_id,
                skill_wanted=match.wanted_skill_name,
                compatibility=match.compatibility_score,
                rank=rank,
                explanation=engine.explain_match(match),
                profile=MatchProfile(
                    user_id=match.offering_user_id,
                    name=profile.name if profile else "Unknown User",
                    bio=profile.bio if profile else "",
                    rating=profile.rating if profile else 0.0,
                    completed_swaps=profile.completed_swaps if profile else 0,
                ),
            )
        )
    return response
