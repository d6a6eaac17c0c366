from __future__ import annotations

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from skillbarter.models.notification import Notification

logger = logging.getLogger(__name__)

EVENT_SWAP_REQUEST = "swap_request"
EVENT_SWAP_ACCEPTED = "swap_accepted"
EVENT_SWAP_REJECTED = "swap_rejected"
EVENT_SWAP_COMPLETED = "swap_completed"
EVENT_SWAP_CANCELLED = "swap_cancelled"
EVENT_MESSAGE = "message"

EVENT_TYPES = (
    EVENT_SWAP_REQUEST,
    EVENT_SWAP_ACCEPTED,
    EVENT_SWAP_REJECTED,
    EVENT_SWAP_COMPLETED,
    EVENT_SWAP_CANCELLED,
    EVENT_MESSAGE,
)


def list_user_notifications(
    db: Session,
    *,
    user_id: int,
    unread_only: bool = False,
    limit: int = 50,
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    return (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )


def mark_notification_read(
    db: Session,
    *,
    user_id: int,
    notification_id: int,
) -> Optional[Notification]:
    notification = db.query(Notification).filter(
        Notification.id == notification_id,
        Notification.recipient_id == user_id,
    ).first()
    if not notification:
        return None
    notification.is_read = True
    db.commit()
    return notification


def mark_all_notifications_read(db: Session, *, user_id: int) -> int:
    updated = db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).update({"is_read": True}, synchronize_session=False)
    db.commit()
    return int(updated)


def get_unread_count(db: Session, *, user_id: int) -> int:
    return db.query(Notification).filter(
        Notification.recipient_id == user_id,
        Notification.is_read.is_(False),
    ).count()


def create_notification(
    db: Session,
    *,
    recipient_id: int,
    actor_id: Optional[int],
    event_type: str,
    message: str,
    swap_request_id: Optional[int] = None,
    swap_id: Optional[int] = None,
) -> Notification:
    """Stage a notification row. The caller's transaction commits it."""
    if event_type not in EVENT_TYPES:
        raise ValueError(f"Unknown notification event type: {event_type}")

    notification = Notification(
        recipient_id=recipient_id,
        actor_id=actor_id,
        swap_request_id=swap_request_id,
        swap_id=swap_id,
        event_type=event_type,
        message=message[:500],
    )
    db.add(notification)
    db.flush()
    logger.debug(
        "Notification staged (recipient_id=%s, event_type=%s)",
        recipient_id,
        event_type,
    )
    return notification


def serialize_notification(notification: Notification) -> dict:
    return {
        "id": notification.id,
        "recipient_id": notification.recipient_id,
        "actor_id": notification.actor_id,
        "swap_request_id": notification.swap_request_id,
        "swap_id": notification.swap_id,
        "event_type": notification.event_type,
        "message": notification.message,
        "is_read": notification.is_read,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
    }
