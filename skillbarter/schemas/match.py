# skillbarter/schemas/match.py
"""
Match Pydantic Schemas
Response models for reciprocal skill matches
"""

from pydantic import BaseModel, Field


class MatchProfile(BaseModel):
    """Public summary of the matched user"""
    user_id: int = Field(..., description="Matched user ID")
    name: str = Field(..., description="Display name")
    bio: str = Field("", description="Short bio")
    rating: float = Field(0.0, ge=0, le=5, description="Average rating (0-5)")
    completed_swaps: int = Field(0, ge=0, description="Completed swaps count")


class MatchResponse(BaseModel):
    """One ranked reciprocal match"""
    id: str = Field(..., description="Stable match key: '<user_id>-<offered_skill_id>'")
    user_id: int = Field(..., description="User offering the skill you want")
    user_name: str = Field(..., description="Name of the matched user")
    skill_offered_id: int = Field(..., description="Skill they offer (you want it)")
    skill_offered: str = Field(..., description="Name of the skill they offer")
    skill_wanted_id: int = Field(..., description="Skill they want (you offer it)")
    skill_wanted: str = Field(..., description="Name of the skill they want")
    compatibility: int = Field(..., ge=0, le=100, description="Compatibility score (0-100)")
    rank: int = Field(..., ge=1, description="Rank (1 = best match)")
    explanation: str = Field(..., description="Human-readable explanation")
    profile: MatchProfile
