from __future__ import annotations

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# API modules depend on FastAPI; skip this suite when dependency is unavailable.
pytest.importorskip("fastapi")

from fastapi import HTTPException
from skillbarter.api.skill import add_skill, get_all_skills, get_my_skills, remove_skill
from skillbarter.crud import skill as skill_crud
from skillbarter.database import Base
from skillbarter.models.skill import Skill, UserSkill
from skillbarter.models.user import User


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


def _create_user(db, *, name: str, email: str) -> User:
    user = User(
        name=name,
        email=email,
        password_hash="hash",
        is_active=True,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def _add(db, user, name, direction, category="General"):
    return add_skill(
        name=name,
        direction=direction,
        category=category,
        description=None,
        level=None,
        current_user=user,
        db=db,
    )


def test_direction_aliases_normalize():
    assert skill_crud.normalize_direction("Teach") == "offer"
    assert skill_crud.normalize_direction(" offered ") == "offer"
    assert skill_crud.normalize_direction("learn") == "want"
    assert skill_crud.normalize_direction("NEED") == "want"
    assert skill_crud.normalize_direction("mentor") is None
    assert skill_crud.normalize_direction(None) is None


def test_add_skill_reuses_canonical_skill_row_case_insensitively(db_session):
    alice = _create_user(db_session, name="Alice", email="alice@test.edu")
    bob = _create_user(db_session, name="Bob", email="bob@test.edu")

    first = _add(db_session, alice, "  Python   Programming ", "teach", "Programming")
    second = _add(db_session, bob, "python programming", "learn")

    assert first["action"] == "created"
    assert first["direction"] == "offer"
    assert first["declaration"]["name"] == "Python Programming"
    assert second["direction"] == "want"
    assert second["declaration"]["skill_id"] == first["declaration"]["skill_id"]
    assert db_session.query(Skill).count() == 1
    # First mention decides the category
    assert second["declaration"]["category"] == "Programming"


def test_add_skill_twice_is_idempotent(db_session):
    user = _create_user(db_session, name="Repeat", email="repeat@test.edu")

    _add(db_session, user, "Guitar", "offer")
    again = _add(db_session, user, "GUITAR", "offer")

    assert again["action"] == "exists"
    assert "already" in again["message"]
    assert db_session.query(UserSkill).count() == 1


def test_same_skill_can_be_offered_and_wanted(db_session):
    user = _create_user(db_session, name="Both", email="both@test.edu")

    _add(db_session, user, "Chess", "offer")
    _add(db_session, user, "Chess", "want")

    offered = get_my_skills(direction="offer", current_user=user, db=db_session)
    wanted = get_my_skills(direction="wanted", current_user=user, db=db_session)
    assert [s["name"] for s in offered] == ["Chess"]
    assert [s["name"] for s in wanted] == ["Chess"]


def test_add_skill_rejects_unknown_direction(db_session):
    user = _create_user(db_session, name="Odd", email="odd@test.edu")

    with pytest.raises(HTTPException) as exc_info:
        _add(db_session, user, "Guitar", "sideways")

    assert exc_info.value.status_code == 400


def test_add_skill_rejects_too_short_name(db_session):
    user = _create_user(db_session, name="Short", email="short@test.edu")

    with pytest.raises(HTTPException) as exc_info:
        _add(db_session, user, "a", "offer")

    assert exc_info.value.status_code == 422


def test_offerer_count_and_removal(db_session):
    alice = _create_user(db_session, name="Alice", email="alice@test.edu")
    bob = _create_user(db_session, name="Bob", email="bob@test.edu")

    declared = _add(db_session, alice, "Piano", "offer")
    _add(db_session, bob, "Piano", "offer")
    _add(db_session, bob, "Drums", "want")

    counts = {row["name"]: row["offerer_count"] for row in get_all_skills(db=db_session)}
    assert counts == {"Drums": 0, "Piano": 2}

    remove_skill(user_skill_id=declared["declaration"]["id"], current_user=alice, db=db_session)
    counts = {row["name"]: row["offerer_count"] for row in get_all_skills(db=db_session)}
    assert counts["Piano"] == 1

    with pytest.raises(HTTPException) as exc_info:
        remove_skill(user_skill_id=declared["declaration"]["id"], current_user=alice, db=db_session)
    assert exc_info.value.status_code == 404


def test_non_ascii_names_share_one_skill_row(db_session):
    alice = _create_user(db_session, name="Alice", email="alice@test.edu")
    bob = _create_user(db_session, name="Bob", email="bob@test.edu")

    offered, _ = skill_crud.declare_user_skill(db_session, user_id=alice.id, name="FRANÇAIS", direction="offer")
    wanted, _ = skill_crud.declare_user_skill(db_session, user_id=bob.id, name=" français ", direction="want")
    street, _ = skill_crud.declare_user_skill(db_session, user_id=alice.id, name="Straße", direction="offer")
    street_upper, _ = skill_crud.declare_user_skill(db_session, user_id=bob.id, name="STRASSE", direction="want")

    assert offered.skill_id == wanted.skill_id
    assert street.skill_id == street_upper.skill_id
    assert [s.name for s in db_session.query(Skill).order_by(Skill.id)] == ["FRANÇAIS", "Straße"]
