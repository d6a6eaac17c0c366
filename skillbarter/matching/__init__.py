"""Bidirectional skill matching."""

from .exceptions import (
    InconsistentSkillReference,
    LedgerUnavailable,
    MatchingError,
    NoDeclaredSkills,
)
from .types import MatchCandidate, MatchSignals, ProfileSummary, SkillDeclaration, SkillRecord
from .ledger import SkillLedger, SqlSkillLedger
from .engine import MatchEngine, get_match_engine

__all__ = [
    "MatchingError",
    "NoDeclaredSkills",
    "LedgerUnavailable",
    "InconsistentSkillReference",
    "MatchCandidate",
    "MatchSignals",
    "ProfileSummary",
    "SkillDeclaration",
    "SkillRecord",
    "SkillLedger",
    "SqlSkillLedger",
    "MatchEngine",
    "get_match_engine",
]
