# skillbarter/schemas/__init__.py

from .auth import Token, TokenData, RegisterRequest, LoginRequest
from .user import User, ProfileUpdate, OwnProfile, PublicProfile
from .skill import Skill, SkillCreate, SkillWithOffererCount, UserSkill, DeclareSkillResponse
from .match import MatchProfile, MatchResponse
from .swap import SwapRequestCreate, SwapRequest, SwapRequestDetail, Swap
from .message import MessageCreate, Message, Conversation
from .review import ReviewCreate, Review, ReviewSubmitResponse

__all__ = [
    "Token",
    "TokenData",
    "RegisterRequest",
    "LoginRequest",
    "User",
    "ProfileUpdate",
    "OwnProfile",
    "PublicProfile",
    "Skill",
    "SkillCreate",
    "SkillWithOffererCount",
    "UserSkill",
    "DeclareSkillResponse",
    "MatchProfile",
    "MatchResponse",
    "SwapRequestCreate",
    "SwapRequest",
    "SwapRequestDetail",
    "Swap",
    "MessageCreate",
    "Message",
    "Conversation",
    "ReviewCreate",
    "Review",
    "ReviewSubmitResponse",
]
