from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

# API modules depend on FastAPI; skip this suite when dependency is unavailable.
pytest.importorskip("fastapi")

from fastapi import HTTPException
from skillbarter.api.matches import get_matches
from skillbarter.crud import skill as skill_crud
from skillbarter.database import Base
from skillbarter.models.user import User, UserProfile


@pytest.fixture
def db_session():
    engine = create_engine("sqlite:///:memory:")
    Base.metadata.create_all(engine)
    SessionLocal = sessionmaker(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def _create_user(db, *, name: str, email: str, rating: float = 0.0) -> User:
    user = User(
        name=name,
        email=email,
        password_hash="hash",
        is_active=True,
    )
    db.add(user)
    db.flush()
    db.add(UserProfile(user_id=user.id, bio=f"Hi, I'm {name}", rating=rating))
    db.commit()
    db.refresh(user)
    return user


def test_get_matches_returns_ranked_enriched_results(db_session):
    learner = _create_user(db_session, name="Learner", email="learner@test.edu")
    tutor = _create_user(db_session, name="Tutor", email="tutor@test.edu", rating=4.8)

    skill_crud.declare_user_skill(db_session, user_id=learner.id, name="Guitar", direction="offer")
    skill_crud.declare_user_skill(db_session, user_id=learner.id, name="Spanish", direction="want")
    skill_crud.declare_user_skill(db_session, user_id=tutor.id, name="spanish", direction="offer")
    skill_crud.declare_user_skill(db_session, user_id=tutor.id, name="guitar", direction="want")

    results = get_matches(limit=None, current_user=learner, db=db_session)

    assert len(results) == 1
    match = results[0]
    assert match.user_id == tutor.id
    assert match.user_name == "Tutor"
    assert match.skill_offered == "Spanish"
    assert match.skill_wanted == "Guitar"
    assert match.rank == 1
    assert 0 <= match.compatibility <= 100
    assert match.profile.rating == 4.8
    assert match.profile.bio == "Hi, I'm Tutor"
    assert match.explanation.startswith("Matched because:")
    # Contact details never leave the ledger
    assert "tutor@test.edu" not in match.model_dump_json()


def test_get_matches_without_declared_skills_returns_onboarding_error(db_session):
    user = _create_user(db_session, name="Fresh", email="fresh@test.edu")

    with pytest.raises(HTTPException) as exc_info:
        get_matches(limit=None, current_user=user, db=db_session)

    assert exc_info.value.status_code == 400
    assert exc_info.value.detail["code"] == "no_declared_skills"


def test_get_matches_with_no_candidates_returns_empty_list(db_session):
    user = _create_user(db_session, name="Lonely", email="lonely@test.edu")
    skill_crud.declare_user_skill(db_session, user_id=user.id, name="Chess", direction="want")

    assert get_matches(limit=None, current_user=user, db=db_session) == []


def test_get_matches_maps_ledger_failure_to_503(db_session, monkeypatch):
    user = _create_user(db_session, name="Unlucky", email="unlucky@test.edu")

    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT 1", {}, Exception("connection reset"))

    monkeypatch.setattr(db_session, "query", broken_query)

    with pytest.raises(HTTPException) as exc_info:
        get_matches(limit=None, current_user=user, db=db_session)

    assert exc_info.value.status_code == 503


def test_get_matches_maps_profile_read_failure_to_503(db_session, monkeypatch):
    learner = _create_user(db_session, name="Learner", email="learner@test.edu")
    tutor = _create_user(db_session, name="Tutor", email="tutor@test.edu")
    skill_crud.declare_user_skill(db_session, user_id=learner.id, name="Guitar", direction="offer")
    skill_crud.declare_user_skill(db_session, user_id=learner.id, name="Spanish", direction="want")
    skill_crud.declare_user_skill(db_session, user_id=tutor.id, name="Spanish", direction="offer")
    skill_crud.declare_user_skill(db_session, user_id=tutor.id, name="Guitar", direction="want")

    original_query = db_session.query

    def query_failing_on_profiles(*entities, **kwargs):
        # The profile summary read is the last one of a match computation
        if entities and entities[0] is User.id:
            raise OperationalError("SELECT users.id", {}, Exception("connection reset"))
        return original_query(*entities, **kwargs)

    monkeypatch.setattr(db_session, "query", query_failing_on_profiles)

    with pytest.raises(HTTPException) as exc_info:
        get_matches(limit=None, current_user=learner, db=db_session)

    assert exc_info.value.status_code == 503


def test_get_matches_shows_scored_profile_and_non_ascii_skill(db_session):
    learner = _create_user(db_session, name="Learner", email="learner@test.edu")
    tutor = _create_user(db_session, name="Tutor", email="tutor@test.edu", rating=3.0)

    skill_crud.declare_user_skill(db_session, user_id=learner.id, name="Guitar", direction="offer")
    skill_crud.declare_user_skill(db_session, user_id=learner.id, name="français", direction="want")
    skill_crud.declare_user_skill(db_session, user_id=tutor.id, name="FRANÇAIS", direction="offer")
    skill_crud.declare_user_skill(db_session, user_id=tutor.id, name="guitar", direction="want")

    results = get_matches(limit=None, current_user=learner, db=db_session)

    assert [m.user_id for m in results] == [tutor.id]
    match = results[0]
    assert match.skill_offered == "français"
    assert match.skill_wanted == "Guitar"
    # 80 base + 5 shared "General" category + 3 rating points
    assert match.profile.rating == 3.0
    assert match.compatibility == 88
