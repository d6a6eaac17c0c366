"""
Exception hierarchy for match discovery.

Zero matches is a normal empty result. These types exist so callers can
tell that case apart from a computation that could not run.
"""

from typing import Optional


class MatchingError(Exception):
    """Base exception for match discovery failures."""


class NoDeclaredSkills(MatchingError):
    """The user has neither offered nor wanted skills on record."""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User {user_id} has not declared any skills yet")


class LedgerUnavailable(MatchingError):
    """A read against the skill ledger failed. Safe to retry."""

    def __init__(self, operation: str, cause: Optional[Exception] = None):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Skill ledger unavailable during {operation}: {cause}")


class InconsistentSkillReference(MatchingError):
    """A declaration points at a skill id missing from the skills table."""

    def __init__(self, user_id: int, skill_id: int):
        self.user_id = user_id
        self.skill_id = skill_id
        super().__init__(
            f"Declaration of user {user_id} references unknown skill {skill_id}"
        )
