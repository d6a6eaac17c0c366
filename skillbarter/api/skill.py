from typing import List, Optional

from fastapi import APIRouter, Depends, Form, HTTPException
from pydantic import ValidationError
from sqlalchemy.orm import Session

from skillbarter import models, schemas
from skillbarter.crud import skill as skill_crud
from skillbarter.database import get_db
from skillbarter.utils.security import get_current_user

router = APIRouter(prefix="/skills", tags=["Skills"])


def _serialize_declaration(user_skill: models.UserSkill) -> dict:
    return {
        "id": user_skill.id,
        "skill_id": user_skill.skill_id,
        "name": user_skill.skill.name if user_skill.skill else "N/A",
        "category": user_skill.skill.category if user_skill.skill else "General",
        "direction": user_skill.direction,
        "level": user_skill.level,
    }


# ======================
# GET: All skills with offerer count
# ======================
@router.get("/", response_model=List[schemas.SkillWithOffererCount])
def get_all_skills(db: Session = Depends(get_db)):
    return [
        {
            "id": row["skill"].id,
            "name": row["skill"].name,
            "category": row["skill"].category or "General",
            "description": row["skill"].description,
            "offerer_count": row["offerer_count"],
        }
        for row in skill_crud.get_skills_with_offerer_count(db)
    ]


# ======================
# POST: Declare a skill (offer / want)
# ======================
@router.post("/", response_model=schemas.DeclareSkillResponse)
def add_skill(
    name: str = Form(...),
    direction: str = Form(...),
    category: str = Form("General"),
    description: Optional[str] = Form(None),
    level: Optional[str] = Form(None),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    normalized_direction = skill_crud.normalize_direction(direction)
    if normalized_direction is None:
        raise HTTPException(400, "direction must be one of: offer, want")

    try:
        payload = schemas.SkillCreate(name=name, category=category, description=description)
    except ValidationError as e:
        raise HTTPException(422, e.errors(include_url=False, include_context=False))

    user_skill, action = skill_crud.declare_user_skill(
        db,
        user_id=current_user.id,
        name=payload.name,
        direction=normalized_direction,
        category=payload.category,
        description=payload.description,
        level=level,
    )

    skill_name = user_skill.skill.name
    if action == "exists":
        message = f"Skill '{skill_name}' is already in your {normalized_direction} list"
    else:
        message = f"Skill '{skill_name}' added successfully to your {normalized_direction} list"

    return {
        "message": message,
        "action": action,
        "direction": normalized_direction,
        "declaration": _serialize_declaration(user_skill),
    }


# ======================
# GET: My skills (offer / want)
# ======================
@router.get("/my/{direction}", response_model=List[schemas.UserSkill])
def get_my_skills(
    direction: str,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    normalized_direction = skill_crud.normalize_direction(direction)
    if normalized_direction is None:
        raise HTTPException(400, "direction must be one of: offer, want")

    return [
        _serialize_declaration(us)
        for us in skill_crud.get_user_skills(db, current_user.id, normalized_direction)
    ]


# ======================
# DELETE: Remove a declaration
# ======================
@router.delete("/{user_skill_id}")
def remove_skill(
    user_skill_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if not skill_crud.delete_user_skill(db, user_skill_id, current_user.id):
        raise HTTPException(404, "Skill not found in your list")
    return {"message": "Skill removed successfully"}
