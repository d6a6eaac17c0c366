from __future__ import annotations

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skillbarter import models
from skillbarter.models.swap import SWAP_ACTIVE
from skillbarter.services import notification_service
from skillbarter.services.swap_service import get_swap_for_participant, list_user_swaps

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 1000


def list_messages(db: Session, *, swap_id: int, user_id: int) -> List[models.Message]:
    get_swap_for_participant(db, swap_id, user_id)
    return (
        db.query(models.Message)
        .filter(models.Message.swap_id == swap_id)
        .order_by(models.Message.created_at.asc(), models.Message.id.asc())
        .all()
    )


def send_message(db: Session, *, swap_id: int, sender_id: int, text: str) -> models.Message:
    swap = get_swap_for_participant(db, swap_id, sender_id)
    if swap.status != SWAP_ACTIVE:
        raise ValueError("Messages can only be sent in active swaps")

    clean_text = (text or "").strip()
    if not clean_text:
        raise ValueError("Message cannot be empty")
    if len(clean_text) > MAX_MESSAGE_LENGTH:
        raise ValueError(f"Message must be less than {MAX_MESSAGE_LENGTH} characters")

    try:
        message = models.Message(swap_id=swap.id, sender_id=sender_id, text=clean_text)
        db.add(message)
        db.flush()

        sender = db.query(models.User).filter(models.User.id == sender_id).first()
        notification_service.create_notification(
            db,
            recipient_id=swap.partner_of(sender_id),
            actor_id=sender_id,
            swap_id=swap.id,
            event_type=notification_service.EVENT_MESSAGE,
            message=f"New message from {sender.name if sender else 'your partner'}",
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(message)
    return message


def mark_messages_read(db: Session, *, swap_id: int, user_id: int) -> int:
    """Mark the partner's messages in a swap as read. Returns rows updated."""
    get_swap_for_participant(db, swap_id, user_id)
    updated = db.query(models.Message).filter(
        models.Message.swap_id == swap_id,
        models.Message.sender_id != user_id,
        models.Message.is_read.is_(False),
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return int(updated)


def list_conversations(db: Session, *, user_id: int) -> List[dict]:
    """One conversation per active swap, most recent activity first."""
    conversations = []
    for swap in list_user_swaps(db, user_id, status=SWAP_ACTIVE):
        request = swap.request
        partner_id = swap.partner_of(user_id)
        partner = request.receiver if partner_id == request.receiver_id else request.requester

        last_message = (
            db.query(models.Message)
            .filter(models.Message.swap_id == swap.id)
            .order_by(models.Message.created_at.desc(), models.Message.id.desc())
            .first()
        )
        unread_count = db.query(models.Message).filter(
            models.Message.swap_id == swap.id,
            models.Message.sender_id != user_id,
            models.Message.is_read.is_(False),
        ).count()

        conversations.append({
            "swap_id": swap.id,
            "partner_id": partner_id,
            "partner_name": partner.name if partner else "Unknown User",
            "last_message": last_message,
            "unread_count": unread_count,
            "_activity": (
                last_message.created_at if last_message else swap.created_at,
                last_message.id if last_message else 0,
                swap.id,
            ),
        })

    conversations.sort(key=lambda c: c["_activity"], reverse=True)
    for conversation in conversations:
        conversation.pop("_activity")
    return conversations
