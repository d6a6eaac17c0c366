import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skillbarter import schemas
from skillbarter.crud import user as user_crud
from skillbarter.database import get_db
from skillbarter.utils.security import authenticate_user, create_access_token

router = APIRouter(prefix="/auth", tags=["Authentication"])
logger = logging.getLogger(__name__)


# ===== REGISTER ENDPOINT =====

@router.post("/register", response_model=schemas.User, status_code=status.HTTP_201_CREATED)
def register(user_data: schemas.RegisterRequest, db: Session = Depends(get_db)):
    """Register new user and create the associated empty profile"""
    normalized_email = user_data.email.strip().lower()

    if user_crud.get_user_by_email(db, normalized_email):
        raise HTTPException(status_code=400, detail="Email already registered")

    try:
        new_user = user_crud.create_user(
            db,
            name=user_data.name,
            email=normalized_email,
            password=user_data.password,
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Registration failed for %s: %r", normalized_email, e)
        raise HTTPException(status_code=500, detail="Internal server error")

    db.refresh(new_user)
    return new_user


# ===== LOGIN ENDPOINT =====

@router.post("/login", response_model=schemas.Token)
def login(credentials: schemas.LoginRequest, db: Session = Depends(get_db)):
    """Verify credentials and return access token"""
    user = authenticate_user(db, credentials.email, credentials.password)

    if not user or not user.is_active:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    access_token = create_access_token(data={"sub": user.email})

    return {
        "access_token": access_token,
        "token_type": "bearer",
    }
