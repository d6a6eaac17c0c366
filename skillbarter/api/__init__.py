# skillbarter/api/__init__.py
# This file makes the api directory a Python package.

from . import auth
from . import matches
from . import message
from . import notification
from . import review
from . import skill
from . import swap
from . import swap_request
from . import users

__all__ = [
    "auth",
    "users",
    "skill",
    "matches",
    "swap_request",
    "swap",
    "message",
    "review",
    "notification",
]
