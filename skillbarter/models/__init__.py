# skillbarter/models/__init__.py
# Import models in dependency order
from .user import User, UserProfile
from .skill import Skill, UserSkill
from .swap import SwapRequest, Swap
from .message import Message
from .review import Review
from .notification import Notification

__all__ = [
    "User",
    "UserProfile",
    "Skill",
    "UserSkill",
    "SwapRequest",
    "Swap",
    "Message",
    "Review",
    "Notification",
]
