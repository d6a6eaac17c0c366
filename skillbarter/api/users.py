from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from skillbarter import models, schemas
from skillbarter.crud import skill as skill_crud
from skillbarter.crud import user as user_crud
from skillbarter.database import get_db
from skillbarter.models.skill import OFFER, WANT
from skillbarter.utils.security import get_current_user

router = APIRouter(prefix="/users", tags=["Users"])


def _own_profile(user: models.User, profile: models.UserProfile) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "bio": profile.bio,
        "location": profile.location,
        "profile_picture": profile.profile_picture,
        "rating": profile.rating or 0.0,
        "completed_swaps": profile.completed_swaps or 0,
    }


# ======================
# GET: Current user profile
# ======================
@router.get("/me", response_model=schemas.OwnProfile)
def get_my_profile(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    profile = user_crud.get_or_create_profile(db, current_user.id)
    db.commit()
    return _own_profile(current_user, profile)


# ======================
# PUT: Update current user profile
# ======================
@router.put("/me", response_model=schemas.OwnProfile)
def update_my_profile(
    profile_update: schemas.ProfileUpdate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    profile = user_crud.update_user_profile(db, current_user, profile_update)
    return _own_profile(current_user, profile)


# ======================
# GET: Public profile (no email)
# ======================
@router.get("/{user_id}", response_model=schemas.PublicProfile)
def get_public_profile(
    user_id: int,
    db: Session = Depends(get_db)
):
    user = db.query(models.User).filter(
        models.User.id == user_id,
        models.User.is_active.is_(True)
    ).first()

    if not user:
        raise HTTPException(status_code=404, detail="User not found")

    profile = user.profile

    def skill_names(direction):
        return [
            row.skill.name
            for row in skill_crud.get_user_skills(db, user_id, direction)
            if row.skill
        ]

    return {
        "id": user.id,
        "name": user.name,
        "bio": profile.bio if profile else None,
        "location": profile.location if profile else None,
        "profile_picture": profile.profile_picture if profile else None,
        "rating": (profile.rating or 0.0) if profile else 0.0,
        "completed_swaps": (profile.completed_swaps or 0) if profile else 0,
        "skills_offered": skill_names(OFFER),
        "skills_wanted": skill_names(WANT),
    }
