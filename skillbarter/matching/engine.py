# skillbarter/matching/engine.py
"""
Match Discovery Engine

Finds users whose offered and wanted skills cross-satisfy the current
user's, scores each reciprocal pair and returns one ranked entry per
candidate.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy.orm import Session

from skillbarter.matching.exceptions import NoDeclaredSkills
from skillbarter.matching.ledger import SkillLedger, SqlSkillLedger
from skillbarter.matching.types import (
    MatchCandidate,
    MatchSignals,
    ProfileSummary,
    ReciprocalCandidate,
    ScoredCandidate,
    SkillDeclaration,
    SkillRecord,
)
from skillbarter.models.skill import OFFER, WANT

logger = logging.getLogger(__name__)


@dataclass
class MatchContext:
    """Data fetched once per ``find_matches`` call and shared by the scorer."""

    skills: Dict[int, SkillRecord] = field(default_factory=dict)
    # candidate id -> skills the candidate offers that the user wants
    offered_to_user: Dict[int, Set[int]] = field(default_factory=dict)
    # candidate id -> skills the candidate wants that the user offers
    wanted_from_user: Dict[int, frozenset] = field(default_factory=dict)
    profiles: Dict[int, ProfileSummary] = field(default_factory=dict)


class MatchEngine:
    """
    Bidirectional skill matcher.

    Pipeline: collect candidates -> filter for reciprocity -> score -> rank.
    Holds no state between calls; every call reads the ledger fresh.
    """

    # Compatibility score policy (integer points, clamped to 0-100)
    BASE_SCORE = 80
    SHARED_CATEGORY_BONUS = 5
    EXTRA_OVERLAP_BONUS = 2
    MAX_EXTRA_OVERLAP_BONUS = 6
    MAX_RATING_BONUS = 5
    COMPLETED_SWAP_BONUS = 1
    MAX_COMPLETED_SWAP_BONUS = 4

    def __init__(self, ledger: SkillLedger):
        self.ledger = ledger

    # ======================
    # CANDIDATE COLLECTOR
    # ======================

    def collect_candidates(
        self,
        user_id: int,
        wanted_skill_ids: Set[int],
    ) -> List[SkillDeclaration]:
        """
        Find every other user offering at least one wanted skill.

        Args:
            user_id: Requesting user
            wanted_skill_ids: Skills the requesting user wants

        Returns:
            One "offer" declaration per (candidate, wanted skill they offer).
            A candidate offering several wanted skills appears several times.
        """
        if not wanted_skill_ids:
            return []

        offers = self.ledger.get_offerers_of_skills(wanted_skill_ids, excluding_user_id=user_id)
        return [
            offer for offer in offers
            if offer.user_id != user_id and offer.skill_id in wanted_skill_ids
        ]

    # ======================
    # RECIPROCITY FILTER
    # ======================

    def filter_reciprocal(
        self,
        user_id: int,
        offered_skill_ids: Set[int],
        candidates: List[SkillDeclaration],
    ) -> List[ReciprocalCandidate]:
        """
        Keep candidates who want at least one skill the user offers.

        The wanted sets of all distinct candidates are loaded in one batched
        read before any candidate is judged. The representative wanted skill
        is the smallest skill id in the intersection.

        Args:
            user_id: Requesting user
            offered_skill_ids: Skills the requesting user offers
            candidates: Output of ``collect_candidates``

        Returns:
            Reciprocal rows, in input order
        """
        if not offered_skill_ids or not candidates:
            return []

        candidate_ids = {candidate.user_id for candidate in candidates}
        wanted_by_candidate = self.ledger.get_wanted_skills_of_users(candidate_ids)

        reciprocal = []
        for candidate in candidates:
            mutual = frozenset(wanted_by_candidate.get(candidate.user_id, set()) & offered_skill_ids)
            if not mutual:
                continue
            reciprocal.append(
                ReciprocalCandidate(
                    candidate_id=candidate.user_id,
                    offered_skill_id=candidate.skill_id,
                    wanted_skill_id=min(mutual),
                    reciprocal_skill_ids=mutual,
                )
            )

        logger.debug(
            "Reciprocity filter kept %s of %s rows for user %s",
            len(reciprocal),
            len(candidates),
            user_id,
        )
        return reciprocal

    # ======================
    # COMPATIBILITY SCORER
    # ======================

    @classmethod
    def calculate_compatibility_score(cls, signals: MatchSignals) -> int:
        """
        Turn match signals into an integer score in [0, 100].

        Every component only adds points, so more overlap, a higher rating
        or more completed swaps can never lower the score.
        """
        score = cls.BASE_SCORE
        if signals.shared_category:
            score += cls.SHARED_CATEGORY_BONUS
        score += min(max(signals.extra_overlap, 0) * cls.EXTRA_OVERLAP_BONUS, cls.MAX_EXTRA_OVERLAP_BONUS)
        score += min(int(max(signals.rating, 0.0)), cls.MAX_RATING_BONUS)
        score += min(
            max(signals.completed_swaps, 0) * cls.COMPLETED_SWAP_BONUS,
            cls.MAX_COMPLETED_SWAP_BONUS,
        )
        return max(0, min(100, score))

    def build_signals(
        self,
        candidate_user_id: int,
        offered_skill_id: int,
        wanted_skill_id: int,
        context: MatchContext,
    ) -> MatchSignals:
        offered_skill = context.skills.get(offered_skill_id)
        wanted_skill = context.skills.get(wanted_skill_id)
        shared_category = (
            offered_skill is not None
            and wanted_skill is not None
            and offered_skill.category.strip().casefold() == wanted_skill.category.strip().casefold()
        )

        # The pair itself accounts for one skill in each direction.
        extra_overlap = (
            len(context.offered_to_user.get(candidate_user_id, ()))
            + len(context.wanted_from_user.get(candidate_user_id, ()))
            - 2
        )

        profile = context.profiles.get(candidate_user_id)
        return MatchSignals(
            shared_category=shared_category,
            extra_overlap=max(extra_overlap, 0),
            rating=profile.rating if profile else 0.0,
            completed_swaps=profile.completed_swaps if profile else 0,
        )

    def score(
        self,
        user_id: int,
        candidate_user_id: int,
        offered_skill_id: int,
        wanted_skill_id: int,
        context: MatchContext,
    ) -> int:
        """Score one reciprocal (user, candidate, offered, wanted) tuple."""
        signals = self.build_signals(candidate_user_id, offered_skill_id, wanted_skill_id, context)
        return self.calculate_compatibility_score(signals)

    # ======================
    # MATCH RANKER
    # ======================

    @staticmethod
    def rank(
        scored_candidates: Iterable[ScoredCandidate],
        requesting_user_id: int,
    ) -> List[MatchCandidate]:
        """
        Collapse to one entry per candidate and order the result.

        The best pair per candidate is the highest score; equal scores keep
        the smallest (offered, wanted) skill id pair. Output is sorted by
        score descending, then candidate id ascending.
        """
        best: Dict[int, ScoredCandidate] = {}
        for scored in scored_candidates:
            current = best.get(scored.candidate_id)
            key = (-scored.score, scored.offered_skill_id, scored.wanted_skill_id)
            if current is None or key < (-current.score, current.offered_skill_id, current.wanted_skill_id):
                best[scored.candidate_id] = scored

        ordered = sorted(best.values(), key=lambda s: (-s.score, s.candidate_id))
        return [
            MatchCandidate(
                offering_user_id=s.candidate_id,
                requesting_user_id=requesting_user_id,
                offered_skill_id=s.offered_skill_id,
                wanted_skill_id=s.wanted_skill_id,
                compatibility_score=s.score,
                signals=s.signals,
            )
            for s in ordered
        ]

    @staticmethod
    def _attach_details(match: MatchCandidate, context: MatchContext) -> MatchCandidate:
        """Copy skill names and the scored profile summary onto a ranked match."""
        offered = context.skills.get(match.offered_skill_id)
        wanted = context.skills.get(match.wanted_skill_id)
        return replace(
            match,
            offered_skill_name=offered.name if offered else "N/A",
            wanted_skill_name=wanted.name if wanted else "N/A",
            profile=context.profiles.get(match.offering_user_id),
        )

    # ======================
    # ENTRY POINT
    # ======================

    def find_matches(self, user_id: int, limit: Optional[int] = None) -> List[MatchCandidate]:
        """
        Compute ranked reciprocal matches for a user.

        Args:
            user_id: Requesting user
            limit: Optional cap on the number of matches returned

        Returns:
            Ranked matches; empty when the user lacks offered or wanted skills

        Raises:
            NoDeclaredSkills: The user has declared nothing at all
            LedgerUnavailable: A ledger read failed
        """
        offered = self.ledger.get_declarations(user_id, OFFER)
        wanted_skill_ids = self.ledger.get_skills_by_user_and_direction(user_id, WANT)

        if not offered and not wanted_skill_ids:
            raise NoDeclaredSkills(user_id)

        offered_skill_ids = {declaration.skill_id for declaration in offered}
        if not offered_skill_ids or not wanted_skill_ids:
            logger.info(
                "User %s has %s offered and %s wanted skills; no reciprocal match possible",
                user_id,
                len(offered_skill_ids),
                len(wanted_skill_ids),
            )
            return []

        candidates = self.collect_candidates(user_id, wanted_skill_ids)
        reciprocal = self.filter_reciprocal(user_id, offered_skill_ids, candidates)
        if not reciprocal:
            logger.info("No reciprocal matches for user %s (%s offer rows)", user_id, len(candidates))
            return []

        context = MatchContext()
        for declaration in list(offered) + list(candidates):
            if declaration.skill is not None:
                context.skills[declaration.skill_id] = declaration.skill
        for candidate in candidates:
            context.offered_to_user.setdefault(candidate.user_id, set()).add(candidate.skill_id)
        for row in reciprocal:
            context.wanted_from_user[row.candidate_id] = row.reciprocal_skill_ids
        context.profiles = self.ledger.get_public_profile_summaries(
            {row.candidate_id for row in reciprocal}
        )

        scored = []
        for row in reciprocal:
            signals = self.build_signals(row.candidate_id, row.offered_skill_id, row.wanted_skill_id, context)
            scored.append(
                ScoredCandidate(
                    candidate_id=row.candidate_id,
                    offered_skill_id=row.offered_skill_id,
                    wanted_skill_id=row.wanted_skill_id,
                    score=self.calculate_compatibility_score(signals),
                    signals=signals,
                )
            )

        matches = [self._attach_details(match, context) for match in self.rank(scored, user_id)]
        logger.info(
            "Found %s matches for user %s from %s candidate rows",
            len(matches),
            user_id,
            len(candidates),
        )
        if limit is not None:
            return matches[:limit]
        return matches

    def explain_match(self, match: MatchCandidate) -> str:
        """
        Generate human-readable explanation for a match.

        Args:
            match: A ranked match

        Returns:
            Explanation string
        """
        signals = match.signals
        reasons = ["you each want what the other offers"]

        if signals.shared_category:
            reasons.append("both skills are in the same category")
        if signals.extra_overlap > 0:
            reasons.append(f"{signals.extra_overlap} more shared interest(s)")
        if signals.rating >= 4.5:
            reasons.append("highly rated")
        elif signals.rating >= 4.0:
            reasons.append("well rated")
        if signals.completed_swaps > 0:
            reasons.append(f"{signals.completed_swaps} completed swap(s)")

        return f"Matched because: {', '.join(reasons)}"


def get_match_engine(db: Session) -> MatchEngine:
    """Build an engine reading from the given database session."""
    return MatchEngine(SqlSkillLedger(db))
