from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ======================
# SWAP REQUEST SCHEMAS
# ======================

class SwapRequestCreate(BaseModel):
    receiver_id: int = Field(..., description="User being asked to swap")
    offered_skill_id: int = Field(..., description="Skill the requester teaches")
    requested_skill_id: int = Field(..., description="Skill the requester wants to learn")


class SwapRequest(BaseModel):
    id: int
    requester_id: int
    receiver_id: int
    offered_skill_id: int
    requested_skill_id: int
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SwapRequestDetail(SwapRequest):
    requester_name: str
    receiver_name: str
    offered_skill: str
    requested_skill: str


# ======================
# SWAP SCHEMAS
# ======================

class Swap(BaseModel):
    id: int
    request_id: int
    status: str
    partner_id: int
    partner_name: str
    skill_given: str
    skill_received: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
