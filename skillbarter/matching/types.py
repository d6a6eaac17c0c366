"""
Typed records used by the match engine.

Rows coming out of the ledger are mapped into these frozen dataclasses
before any matching logic touches them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from skillbarter.matching.exceptions import InconsistentSkillReference


@dataclass(frozen=True)
class SkillRecord:
    skill_id: int
    name: str
    category: str


@dataclass(frozen=True)
class SkillDeclaration:
    """(user, skill, direction) as stored in the ledger."""

    user_id: int
    skill_id: int
    direction: str
    skill: Optional[SkillRecord] = None

    @classmethod
    def from_row(cls, user_id, skill_id, direction, name=None, category=None) -> "SkillDeclaration":
        """Map an outer-joined ledger row. Raises when the skill row is missing."""
        if name is None:
            raise InconsistentSkillReference(user_id, skill_id)
        return cls(
            user_id=user_id,
            skill_id=skill_id,
            direction=direction,
            skill=SkillRecord(skill_id=skill_id, name=name, category=category or "General"),
        )


@dataclass(frozen=True)
class ProfileSummary:
    """Public profile fields. Contact details are never part of this record."""

    user_id: int
    name: str
    bio: str = ""
    rating: float = 0.0
    completed_swaps: int = 0


@dataclass(frozen=True)
class ReciprocalCandidate:
    """Output of the reciprocity filter for one (candidate, offered skill) row."""

    candidate_id: int
    offered_skill_id: int
    wanted_skill_id: int
    # Full intersection of the candidate's wanted set with the user's offered set.
    reciprocal_skill_ids: frozenset = field(default_factory=frozenset)


@dataclass(frozen=True)
class MatchSignals:
    """Inputs the scorer used, kept for explanations."""

    shared_category: bool = False
    extra_overlap: int = 0
    rating: float = 0.0
    completed_swaps: int = 0


@dataclass(frozen=True)
class ScoredCandidate:
    candidate_id: int
    offered_skill_id: int
    wanted_skill_id: int
    score: int
    signals: MatchSignals = field(default_factory=MatchSignals)


@dataclass(frozen=True)
class MatchCandidate:
    """A ranked, fully reciprocal trade proposal. Derived, never persisted."""

    offering_user_id: int
    requesting_user_id: int
    offered_skill_id: int
    wanted_skill_id: int
    compatibility_score: int
    signals: MatchSignals = field(default_factory=MatchSignals)
    offered_skill_name: str = ""
    wanted_skill_name: str = ""
    # The summary the score was computed from
    profile: Optional[ProfileSummary] = None
