"""
Skill ledger read access for the match engine.

The engine only talks to the ledger through the ``SkillLedger`` protocol.
``SqlSkillLedger`` implements it over a SQLAlchemy session; every read is a
single query, candidate lookups are batched with ``IN (...)``.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, List, Optional, Protocol, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skillbarter.matching.exceptions import InconsistentSkillReference, LedgerUnavailable
from skillbarter.matching.types import ProfileSummary, SkillDeclaration
from skillbarter.models.skill import OFFER, WANT, Skill, UserSkill
from skillbarter.models.user import User, UserProfile

logger = logging.getLogger(__name__)


class SkillLedger(Protocol):
    """Read operations the match engine needs from the skill ledger."""

    def get_skills_by_user_and_direction(self, user_id: int, direction: str) -> Set[int]:
        ...

    def get_declarations(self, user_id: int, direction: str) -> List[SkillDeclaration]:
        ...

    def get_offerers_of_skills(
        self, skill_ids: Iterable[int], excluding_user_id: int
    ) -> List[SkillDeclaration]:
        ...

    def get_wanted_skills_of_users(self, user_ids: Iterable[int]) -> Dict[int, Set[int]]:
        ...

    def get_public_profile_summary(self, user_id: int) -> Optional[ProfileSummary]:
        ...

    def get_public_profile_summaries(self, user_ids: Iterable[int]) -> Dict[int, ProfileSummary]:
        ...


def map_declarations(rows) -> List[SkillDeclaration]:
    """
    Convert raw ledger rows into declarations.

    Rows whose skill no longer exists are logged and skipped so one bad
    reference cannot abort a whole match computation.
    """
    declarations = []
    for row in rows:
        try:
            declarations.append(
                SkillDeclaration.from_row(
                    row.user_id,
                    row.skill_id,
                    row.direction,
                    name=row.name,
                    category=row.category,
                )
            )
        except InconsistentSkillReference as exc:
            logger.warning("Skipping declaration: %s", exc)
    return declarations


class SqlSkillLedger:
    """``SkillLedger`` backed by the relational store."""

    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _reading(self, operation: str):
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("Skill ledger read failed (operation=%s): %s", operation, exc)
            raise LedgerUnavailable(operation, exc) from exc

    def _declaration_query(self):
        return (
            self.db.query(
                UserSkill.user_id,
                UserSkill.skill_id,
                UserSkill.direction,
                Skill.name,
                Skill.category,
            )
            .outerjoin(Skill, Skill.id == UserSkill.skill_id)
        )

    def get_declarations(self, user_id: int, direction: str) -> List[SkillDeclaration]:
        with self._reading("get_declarations"):
            rows = (
                self._declaration_query()
                .filter(
                    UserSkill.user_id == user_id,
                    UserSkill.direction == direction,
                )
                .order_by(UserSkill.skill_id.asc())
                .all()
            )
        return map_declarations(rows)

    def get_skills_by_user_and_direction(self, user_id: int, direction: str) -> Set[int]:
        return {d.skill_id for d in self.get_declarations(user_id, direction)}

    def get_offerers_of_skills(
        self, skill_ids: Iterable[int], excluding_user_id: int
    ) -> List[SkillDeclaration]:
        skill_ids = sorted(set(skill_ids))
        if not skill_ids:
            return []

        with self._reading("get_offerers_of_skills"):
            rows = (
                self._declaration_query()
                .join(User, User.id == UserSkill.user_id)
                .filter(
                    UserSkill.skill_id.in_(skill_ids),
                    UserSkill.direction == OFFER,
                    UserSkill.user_id != excluding_user_id,
                    User.is_active.is_(True),
                )
                .order_by(UserSkill.user_id.asc(), UserSkill.skill_id.asc())
                .all()
            )
        return map_declarations(rows)

    def get_wanted_skills_of_users(self, user_ids: Iterable[int]) -> Dict[int, Set[int]]:
        user_ids = sorted(set(user_ids))
        wanted: Dict[int, Set[int]] = {user_id: set() for user_id in user_ids}
        if not user_ids:
            return wanted

        with self._reading("get_wanted_skills_of_users"):
            rows = (
                self._declaration_query()
                .filter(
                    UserSkill.user_id.in_(user_ids),
                    UserSkill.direction == WANT,
                )
                .all()
            )

        for declaration in map_declarations(rows):
            wanted[declaration.user_id].add(declaration.skill_id)
        return wanted

    def get_public_profile_summaries(self, user_ids: Iterable[int]) -> Dict[int, ProfileSummary]:
        user_ids = sorted(set(user_ids))
        if not user_ids:
            return {}

        with self._reading("get_public_profile_summaries"):
            rows = (
                self.db.query(
                    User.id,
                    User.name,
                    UserProfile.bio,
                    UserProfile.rating,
                    UserProfile.completed_swaps,
                )
                .outerjoin(UserProfile, UserProfile.user_id == User.id)
                .filter(User.id.in_(user_ids))
                .all()
            )

        return {
            row.id: ProfileSummary(
                user_id=row.id,
                name=row.name or "Unknown User",
                bio=row.bio or "",
                rating=float(row.rating or 0.0),
                completed_swaps=int(row.completed_swaps or 0),
            )
            for row in rows
        }

    def get_public_profile_summary(self, user_id: int) -> Optional[ProfileSummary]:
        return self.get_public_profile_summaries([user_id]).get(user_id)
