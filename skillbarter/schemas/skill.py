from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional

# ======================
# SKILL SCHEMAS
# ======================

# skillbarter/schemas/skill.py
class SkillBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    category: str = Field("General", min_length=2, max_length=50)
    description: Optional[str] = Field(None, max_length=500)

    @field_validator("name", "category", mode="before")
    @classmethod
    def collapse_whitespace(cls, v):
        return " ".join(v.split()) if isinstance(v, str) else v


class SkillCreate(SkillBase):
    pass


class Skill(SkillBase):
    id: int

    model_config = ConfigDict(from_attributes=True)


class SkillWithOffererCount(Skill):
    offerer_count: int


# ======================
# USER_SKILL SCHEMAS
# ======================

class UserSkill(BaseModel):
    id: int
    skill_id: int
    name: str
    category: str
    direction: str  # "offer" or "want"
    level: Optional[str] = None


class DeclareSkillResponse(BaseModel):
    message: str
    action: str  # "created" or "exists"
    direction: str
    declaration: UserSkill
