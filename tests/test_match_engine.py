# tests/test_match_engine.py
"""
Match engine tests: candidate collection, reciprocity, scoring and ranking
against an in-memory SQLite skill ledger.
"""

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from skillbarter.crud import skill as skill_crud
from skillbarter.database import Base
from skillbarter.matching import (
    LedgerUnavailable,
    MatchEngine,
    MatchSignals,
    NoDeclaredSkills,
    SqlSkillLedger,
    get_match_engine,
)
from skillbarter.models.skill import OFFER, WANT, UserSkill
from skillbarter.models.user import User, UserProfile


# ======================
# TEST DATABASE SETUP
# ======================

@pytest.fixture
def db_session():
    """Create test database session"""
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _create_user(db, name: str, rating: float = 0.0, completed_swaps: int = 0, is_active: bool = True) -> User:
    user = User(
        name=name,
        email=f"{name.lower()}@test.edu",
        password_hash="hash",
        is_active=is_active,
    )
    db.add(user)
    db.flush()
    db.add(UserProfile(user_id=user.id, bio=f"{name} bio", rating=rating, completed_swaps=completed_swaps))
    db.commit()
    db.refresh(user)
    return user


def _declare(db, user: User, name: str, direction: str, category: str = "General") -> int:
    user_skill, _ = skill_crud.declare_user_skill(
        db,
        user_id=user.id,
        name=name,
        direction=direction,
        category=category,
    )
    return user_skill.skill_id


@pytest.fixture
def spanish_guitar(db_session):
    """U wants Spanish and offers Guitar; A reciprocates, B does not."""
    u = _create_user(db_session, "Uma")
    a = _create_user(db_session, "Ana")
    b = _create_user(db_session, "Ben")

    guitar = _declare(db_session, u, "Guitar", OFFER, "Music")
    spanish = _declare(db_session, u, "Spanish", WANT, "Languages")

    _declare(db_session, a, "Spanish", OFFER)
    _declare(db_session, a, "Guitar", WANT)

    _declare(db_session, b, "Spanish", OFFER)
    piano = _declare(db_session, b, "Piano", WANT, "Music")

    return {
        "u": u, "a": a, "b": b,
        "guitar": guitar, "spanish": spanish, "piano": piano,
    }


# ======================
# EMPTY INPUTS
# ======================

def test_user_without_any_skills_raises_no_declared_skills(db_session):
    user = _create_user(db_session, "Nobody")
    engine = get_match_engine(db_session)

    with pytest.raises(NoDeclaredSkills) as exc_info:
        engine.find_matches(user.id)

    assert exc_info.value.user_id == user.id


def test_empty_wanted_set_returns_empty_list(db_session):
    user = _create_user(db_session, "Giver")
    other = _create_user(db_session, "Taker")
    _declare(db_session, user, "Guitar", OFFER)
    _declare(db_session, other, "Guitar", WANT)
    _declare(db_session, other, "Drums", OFFER)

    assert get_match_engine(db_session).find_matches(user.id) == []


def test_empty_offered_set_returns_empty_list(db_session):
    user = _create_user(db_session, "Learner")
    other = _create_user(db_session, "Teacher")
    _declare(db_session, user, "Spanish", WANT)
    _declare(db_session, other, "Spanish", OFFER)
    _declare(db_session, other, "Guitar", WANT)

    assert get_match_engine(db_session).find_matches(user.id) == []


# ======================
# RECIPROCITY
# ======================

def test_reciprocal_candidate_included_and_one_sided_excluded(db_session, spanish_guitar):
    data = spanish_guitar
    matches = get_match_engine(db_session).find_matches(data["u"].id)

    assert [m.offering_user_id for m in matches] == [data["a"].id]
    match = matches[0]
    assert match.requesting_user_id == data["u"].id
    assert match.offered_skill_id == data["spanish"]
    assert match.wanted_skill_id == data["guitar"]
    assert (match.offered_skill_name, match.wanted_skill_name) == ("Spanish", "Guitar")
    assert match.profile.name == "Ana"


def test_candidate_offering_two_wanted_skills_appears_once(db_session, spanish_guitar):
    data = spanish_guitar
    french = _declare(db_session, data["u"], "French", WANT, "Languages")

    c = _create_user(db_session, "Cleo")
    _declare(db_session, c, "French", OFFER)
    _declare(db_session, c, "Spanish", OFFER)
    _declare(db_session, c, "Guitar", WANT)

    matches = get_match_engine(db_session).find_matches(data["u"].id)
    candidate_ids = [m.offering_user_id for m in matches]

    assert candidate_ids.count(c.id) == 1
    assert len(candidate_ids) == len(set(candidate_ids))
    c_match = next(m for m in matches if m.offering_user_id == c.id)
    # Both pairs score the same; the smaller offered skill id wins.
    assert c_match.offered_skill_id == min(data["spanish"], french)
    assert c_match.signals.extra_overlap == 1


def test_every_match_satisfies_full_reciprocity(db_session, spanish_guitar):
    data = spanish_guitar
    _declare(db_session, data["u"], "Cooking", OFFER, "Lifestyle")
    _declare(db_session, data["u"], "Chess", WANT, "Games")

    d = _create_user(db_session, "Dev")
    _declare(db_session, d, "Chess", OFFER)
    _declare(db_session, d, "Cooking", WANT)
    _declare(db_session, d, "Spanish", OFFER)

    ledger = SqlSkillLedger(db_session)
    offered = ledger.get_skills_by_user_and_direction(data["u"].id, OFFER)
    wanted = ledger.get_skills_by_user_and_direction(data["u"].id, WANT)

    matches = MatchEngine(ledger).find_matches(data["u"].id)

    assert {m.offering_user_id for m in matches} == {data["a"].id, d.id}
    for match in matches:
        assert match.offering_user_id != data["u"].id
        assert match.offered_skill_id in wanted
        assert match.wanted_skill_id in offered
        assert match.wanted_skill_id in ledger.get_skills_by_user_and_direction(match.offering_user_id, WANT)
        assert match.offered_skill_id in ledger.get_skills_by_user_and_direction(match.offering_user_id, OFFER)


def test_user_never_matches_themselves(db_session):
    user = _create_user(db_session, "Solo")
    _declare(db_session, user, "Guitar", OFFER)
    _declare(db_session, user, "Guitar", WANT)

    assert get_match_engine(db_session).find_matches(user.id) == []


def test_inactive_candidates_are_excluded(db_session, spanish_guitar):
    data = spanish_guitar
    data["a"].is_active = False
    db_session.commit()

    assert get_match_engine(db_session).find_matches(data["u"].id) == []


def test_smallest_reciprocal_skill_is_the_representative(db_session, spanish_guitar):
    data = spanish_guitar
    drums = _declare(db_session, data["u"], "Drums", OFFER, "Music")
    _declare(db_session, data["a"], "Drums", WANT)

    match = get_match_engine(db_session).find_matches(data["u"].id)[0]

    assert match.wanted_skill_id == min(data["guitar"], drums)
    assert match.signals.extra_overlap == 1


# ======================
# SCORING & RANKING
# ======================

def test_find_matches_is_deterministic(db_session, spanish_guitar):
    data = spanish_guitar
    for name in ("Eve", "Fay", "Gus"):
        user = _create_user(db_session, name)
        _declare(db_session, user, "Spanish", OFFER)
        _declare(db_session, user, "Guitar", WANT)

    engine = get_match_engine(db_session)
    first = engine.find_matches(data["u"].id)
    second = engine.find_matches(data["u"].id)

    assert first == second
    # Equal scores fall back to candidate id ascending.
    assert [m.offering_user_id for m in first] == sorted(m.offering_user_id for m in first)


def test_reputation_never_lowers_score(db_session, spanish_guitar):
    data = spanish_guitar
    x = _create_user(db_session, "Xena", rating=4.6, completed_swaps=3)
    y = _create_user(db_session, "Yuri", rating=2.0, completed_swaps=0)
    for user in (x, y):
        _declare(db_session, user, "Spanish", OFFER)
        _declare(db_session, user, "Guitar", WANT)

    matches = get_match_engine(db_session).find_matches(data["u"].id)
    scores = {m.offering_user_id: m.compatibility_score for m in matches}

    assert scores[x.id] >= scores[y.id]
    assert matches[0].offering_user_id == x.id


def test_compatibility_score_components():
    assert MatchEngine.calculate_compatibility_score(MatchSignals()) == 80
    assert MatchEngine.calculate_compatibility_score(MatchSignals(shared_category=True)) == 85
    assert MatchEngine.calculate_compatibility_score(MatchSignals(extra_overlap=10)) == 86
    assert MatchEngine.calculate_compatibility_score(MatchSignals(rating=4.9)) == 84
    assert MatchEngine.calculate_compatibility_score(MatchSignals(completed_swaps=12)) == 84
    best = MatchSignals(shared_category=True, extra_overlap=5, rating=5.0, completed_swaps=9)
    assert MatchEngine.calculate_compatibility_score(best) == 100


def test_compatibility_score_is_monotonic():
    base = MatchSignals(rating=3.0, completed_swaps=1)
    better = MatchSignals(rating=4.0, completed_swaps=2)
    assert MatchEngine.calculate_compatibility_score(better) >= MatchEngine.calculate_compatibility_score(base)


def test_shared_category_bonus_is_case_insensitive(db_session):
    user = _create_user(db_session, "Mia")
    other = _create_user(db_session, "Noa")
    _declare(db_session, user, "Guitar", OFFER, "Music")
    _declare(db_session, user, "Piano", WANT, "music ")
    _declare(db_session, other, "Piano", OFFER)
    _declare(db_session, other, "Guitar", WANT)

    match = get_match_engine(db_session).find_matches(user.id)[0]

    assert match.signals.shared_category is True
    assert match.compatibility_score == 85


def test_limit_truncates_ranked_output(db_session, spanish_guitar):
    data = spanish_guitar
    extra = _create_user(db_session, "Zed", completed_swaps=4)
    _declare(db_session, extra, "Spanish", OFFER)
    _declare(db_session, extra, "Guitar", WANT)

    matches = get_match_engine(db_session).find_matches(data["u"].id, limit=1)

    assert [m.offering_user_id for m in matches] == [extra.id]


def test_explain_match_mentions_reciprocity(db_session, spanish_guitar):
    engine = get_match_engine(db_session)
    match = engine.find_matches(spanish_guitar["u"].id)[0]

    explanation = engine.explain_match(match)

    assert explanation.startswith("Matched because:")
    assert "each want what the other offers" in explanation


# ======================
# FAILURES
# ======================

def test_inconsistent_skill_reference_is_skipped(db_session, spanish_guitar):
    data = spanish_guitar
    # Points at a skill id that was never created
    db_session.add(UserSkill(user_id=data["a"].id, skill_id=9999, direction=WANT))
    db_session.commit()

    matches = get_match_engine(db_session).find_matches(data["u"].id)

    assert [m.offering_user_id for m in matches] == [data["a"].id]


def test_ledger_failure_raises_ledger_unavailable(db_session, spanish_guitar, monkeypatch):
    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("database is down"))

    monkeypatch.setattr(db_session, "query", broken_query)

    with pytest.raises(LedgerUnavailable) as exc_info:
        get_match_engine(db_session).find_matches(spanish_guitar["u"].id)

    assert exc_info.value.operation == "get_declarations"
    assert isinstance(exc_info.value.cause, OperationalError)


class _FakeLedger:
    """Dict-backed ledger that records which users had their wanted sets read."""

    def __init__(self, offers, wants):
        self.offers = offers
        self.wants = wants
        self.wanted_reads = []

    def get_declarations(self, user_id, direction):
        from skillbarter.matching import SkillDeclaration

        source = self.offers if direction == OFFER else self.wants
        return [
            SkillDeclaration.from_row(user_id, skill_id, direction, name=f"skill-{skill_id}")
            for skill_id in sorted(source.get(user_id, ()))
        ]

    def get_skills_by_user_and_direction(self, user_id, direction):
        return {d.skill_id for d in self.get_declarations(user_id, direction)}

    def get_offerers_of_skills(self, skill_ids, excluding_user_id):
        rows = []
        for user_id in sorted(self.offers):
            if user_id == excluding_user_id:
                continue
            for declaration in self.get_declarations(user_id, OFFER):
                if declaration.skill_id in skill_ids:
                    rows.append(declaration)
        return rows

    def get_wanted_skills_of_users(self, user_ids):
        self.wanted_reads.append(sorted(user_ids))
        return {user_id: set(self.wants.get(user_id, ())) for user_id in user_ids}

    def get_public_profile_summaries(self, user_ids):
        return {}

    def get_public_profile_summary(self, user_id):
        return None


def test_candidate_wanted_sets_are_read_in_one_batch():
    ledger = _FakeLedger(
        offers={1: {10}, 2: {20, 21}, 3: {20}, 4: {21}},
        wants={1: {20, 21}, 2: {10}, 3: {10}, 4: {99}},
    )

    matches = MatchEngine(ledger).find_matches(1)

    assert ledger.wanted_reads == [[2, 3, 4]]
    assert [(m.offering_user_id, m.offered_skill_id, m.wanted_skill_id) for m in matches] == [
        (2, 20, 10),
        (3, 20, 10),
    ]
