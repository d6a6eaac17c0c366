# skillbarter/models/swap.py
from sqlalchemy import Column, Integer, String, ForeignKey, TIMESTAMP, func
from sqlalchemy.orm import relationship
from skillbarter.database import Base

REQUEST_PENDING = "pending"
REQUEST_ACCEPTED = "accepted"
REQUEST_REJECTED = "rejected"

SWAP_ACTIVE = "active"
SWAP_COMPLETED = "completed"
SWAP_CANCELLED = "cancelled"


class SwapRequest(Base):
    __tablename__ = "skill_swap_requests"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    receiver_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    offered_skill_id = Column(Integer, ForeignKey("skills.id", ondelete="CASCADE"), nullable=False)
    requested_skill_id = Column(Integer, ForeignKey("skills.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), default=REQUEST_PENDING, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    requester = relationship("User", foreign_keys=[requester_id])
    receiver = relationship("User", foreign_keys=[receiver_id])
    offered_skill = relationship("Skill", foreign_keys=[offered_skill_id])
    requested_skill = relationship("Skill", foreign_keys=[requested_skill_id])
    swap = relationship("Swap", back_populates="request", uselist=False)


class Swap(Base):
    __tablename__ = "swaps"

    id = Column(Integer, primary_key=True, index=True)
    request_id = Column(
        Integer,
        ForeignKey("skill_swap_requests.id", ondelete="CASCADE"),
        unique=True,
        nullable=False
    )
    status = Column(String(20), default=SWAP_ACTIVE, nullable=False)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())

    request = relationship("SwapRequest", back_populates="swap")
    messages = relationship("Message", back_populates="swap", cascade="all, delete-orphan")
    reviews = relationship("Review", back_populates="swap", cascade="all, delete-orphan")

    @property
    def participant_ids(self) -> tuple:
        return (self.request.requester_id, self.request.receiver_id)

    def partner_of(self, user_id: int) -> int:
        requester_id, receiver_id = self.participant_ids
        return receiver_id if user_id == requester_id else requester_id
