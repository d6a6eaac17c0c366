from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class MessageCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=1000)

    @field_validator("text", mode="before")
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v


class Message(BaseModel):
    id: int
    swap_id: int
    sender_id: int
    text: str
    is_read: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class Conversation(BaseModel):
    swap_id: int
    partner_id: int
    partner_name: str
    last_message: Optional[Message] = None
    unread_count: int = 0
