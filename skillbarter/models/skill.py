from sqlalchemy import Column, Integer, String, Text, ForeignKey, TIMESTAMP, UniqueConstraint, func
from sqlalchemy.orm import relationship
from skillbarter.database import Base

OFFER = "offer"
WANT = "want"
DIRECTIONS = (OFFER, WANT)


# skillbarter/models/skill.py
class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    # casefolded, whitespace-collapsed name; the dedupe key for the catalogue
    name_key = Column(String(200), unique=True, nullable=False, index=True)
    description = Column(Text)
    category = Column(String(50), default="General", nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())

    user_skills = relationship("UserSkill", back_populates="skill", cascade="all, delete-orphan")


class UserSkill(Base):
    """One skill declaration: a user offers or wants a skill."""

    __tablename__ = "user_skills"
    __table_args__ = (
        UniqueConstraint("user_id", "skill_id", "direction", name="uq_user_skill_direction"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    skill_id = Column(
        Integer,
        ForeignKey("skills.id", ondelete="CASCADE"),
        index=True,
        nullable=False
    )
    direction = Column(String(10), nullable=False, index=True)  # 'offer' or 'want'
    level = Column(String(20))
    created_at = Column(TIMESTAMP, server_default=func.now())

    skill = relationship("Skill", back_populates="user_skills")
    user = relationship("User", back_populates="user_skills")
