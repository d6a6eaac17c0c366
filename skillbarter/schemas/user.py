from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


# ======================
# USER SCHEMAS
# ======================

class User(BaseModel):
    id: int
    name: str
    email: EmailStr
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ======================
# PROFILE SCHEMAS
# ======================

class ProfileUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    bio: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=100)
    profile_picture: Optional[str] = Field(None, max_length=255)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("profile_picture")
    @classmethod
    def validate_picture_url(cls, v):
        """Empty string clears the picture; anything else must be an http(s) URL."""
        if v is None or v == "":
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("Profile picture must be a valid URL")
        return v


class OwnProfile(BaseModel):
    """Profile as seen by its owner (includes email)."""
    id: int
    name: str
    email: EmailStr
    bio: Optional[str] = None
    location: Optional[str] = None
    profile_picture: Optional[str] = None
    rating: float = 0.0
    completed_swaps: int = 0


class PublicProfile(BaseModel):
    """Profile as seen by other users. Never carries the email address."""
    id: int
    name: str
    bio: Optional[str] = None
    location: Optional[str] = None
    profile_picture: Optional[str] = None
    rating: float = 0.0
    completed_swaps: int = 0
    skills_offered: List[str] = Field(default_factory=list)
    skills_wanted: List[str] = Field(default_factory=list)
