from sqlalchemy.orm import Session
from skillbarter import models
from skillbarter.utils.security import get_password_hash


def create_user(db: Session, name: str, email: str, password: str):
    """Create an account plus its empty profile. Caller commits."""
    db_user = models.User(
        name=name,
        email=email,
        password_hash=get_password_hash(password),
        is_active=True,
    )
    db.add(db_user)
    db.flush()

    db.add(models.UserProfile(user_id=db_user.id))
    db.flush()
    return db_user


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == email.strip().lower()).first()


def get_user(db: Session, user_id: int):
    return db.query(models.User).filter(models.User.id == user_id).first()


def get_user_profile(db: Session, user_id: int):
    return db.query(models.UserProfile).filter(models.UserProfile.user_id == user_id).first()


def get_or_create_profile(db: Session, user_id: int):
    profile = get_user_profile(db, user_id)
    if profile is None:
        profile = models.UserProfile(user_id=user_id)
        db.add(profile)
        db.flush()
    return profile


def update_user_profile(db: Session, user: models.User, profile_update):
    profile = get_or_create_profile(db, user.id)
    update_data = profile_update.model_dump(exclude_unset=True)

    if "name" in update_data:
        user.name = update_data.pop("name")
    for key, value in update_data.items():
        setattr(profile, key, value)

    db.commit()
    db.refresh(profile)
    return profile
