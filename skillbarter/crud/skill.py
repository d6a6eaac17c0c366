from typing import Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from skillbarter import models
from skillbarter.models.skill import OFFER, WANT

DIRECTION_ALIASES = {
    "offer": OFFER,
    "offered": OFFER,
    "teach": OFFER,
    "want": WANT,
    "wanted": WANT,
    "learn": WANT,
    "need": WANT,
}


def normalize_direction(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    return DIRECTION_ALIASES.get((raw or "").strip().lower())


def normalize_skill_name(raw: Optional[str]) -> str:
    """Trim and collapse inner whitespace: '  python   programming ' -> 'python programming'."""
    return " ".join((raw or "").split())


# ============================
# SKILL TABLE
# ============================

def get_skill(db: Session, skill_id: int):
    return db.query(models.Skill).filter(models.Skill.id == skill_id).first()


def skill_name_key(raw: Optional[str]) -> str:
    """Case-insensitive lookup key: '  FRANÇAIS ' and 'français' share one key."""
    return normalize_skill_name(raw).casefold()


def get_skill_by_name(db: Session, name: str):
    return db.query(models.Skill).filter(
        models.Skill.name_key == skill_name_key(name)
    ).first()


def get_or_create_skill(
    db: Session,
    name: str,
    category: str = "General",
    description: Optional[str] = None,
):
    """
    Resolve a skill by name, creating the canonical row on first mention.
    The first user to mention a name decides its casing and category.
    """
    clean_name = normalize_skill_name(name)
    if not clean_name:
        raise ValueError("Skill name is required")

    existing = get_skill_by_name(db, clean_name)
    if existing:
        return existing, False

    skill = models.Skill(
        name=clean_name,
        name_key=skill_name_key(clean_name),
        description=(description or "").strip() or None,
        category=(category or "General").strip() or "General",
    )
    db.add(skill)
    db.flush()
    return skill, True


def get_skills_with_offerer_count(db: Session, skip: int = 0, limit: int = 100):
    result = (
        db.query(
            models.Skill,
            func.count(func.distinct(models.UserSkill.user_id)).label("offerer_count"),
        )
        .outerjoin(
            models.UserSkill,
            and_(
                models.UserSkill.skill_id == models.Skill.id,
                models.UserSkill.direction == OFFER,
            ),
        )
        .group_by(models.Skill.id)
        .order_by(models.Skill.name.asc())
        .offset(skip)
        .limit(limit)
        .all()
    )

    return [
        {"skill": skill, "offerer_count": count}
        for skill, count in result
    ]


# ============================
# USER SKILLS (OFFER / WANT)
# ============================

def get_user_skill(db: Session, user_id: int, skill_id: int, direction: str):
    return db.query(models.UserSkill).filter(
        models.UserSkill.user_id == user_id,
        models.UserSkill.skill_id == skill_id,
        models.UserSkill.direction == direction
    ).first()


def declare_user_skill(
    db: Session,
    user_id: int,
    name: str,
    direction: str,
    category: str = "General",
    description: Optional[str] = None,
    level: Optional[str] = None,
):
    """
    Add a skill to a user's offered or wanted list.

    Returns:
        (UserSkill, action) where action is "created" or "exists"
    """
    if direction not in (OFFER, WANT):
        raise ValueError("direction must be one of: offer, want")

    skill, _ = get_or_create_skill(db, name, category=category, description=description)

    existing = get_user_skill(db, user_id, skill.id, direction)
    if existing:
        db.commit()
        return existing, "exists"

    user_skill = models.UserSkill(
        user_id=user_id,
        skill_id=skill.id,
        direction=direction,
        level=level,
    )
    db.add(user_skill)
    db.commit()
    db.refresh(user_skill)
    return user_skill, "created"


def get_user_skills(db: Session, user_id: int, direction: str):
    return (
        db.query(models.UserSkill)
        .filter(
            models.UserSkill.user_id == user_id,
            models.UserSkill.direction == direction
        )
        .order_by(models.UserSkill.id.asc())
        .all()
    )


def user_declares(db: Session, user_id: int, skill_id: int, direction: str) -> bool:
    return get_user_skill(db, user_id, skill_id, direction) is not None


def delete_user_skill(db: Session, user_skill_id: int, user_id: int):
    user_skill = db.query(models.UserSkill).filter(
        models.UserSkill.id == user_skill_id,
        models.UserSkill.user_id == user_id
    ).first()

    if not user_skill:
        return False

    db.delete(user_skill)
    db.commit()
    return True
