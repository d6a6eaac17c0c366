# skillbarter/services/swap_service.py
"""
Swap Service Layer
Business logic for swap requests and the swaps they turn into.

Request lifecycle: pending -> accepted | rejected.
Swap lifecycle: active -> completed | cancelled.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from skillbarter import models
from skillbarter.crud import skill as skill_crud
from skillbarter.crud import user as user_crud
from skillbarter.models.skill import OFFER
from skillbarter.models.swap import (
    REQUEST_ACCEPTED,
    REQUEST_PENDING,
    REQUEST_REJECTED,
    SWAP_ACTIVE,
    SWAP_CANCELLED,
    SWAP_COMPLETED,
)
from skillbarter.services import notification_service

logger = logging.getLogger(__name__)


# ======================
# SWAP REQUESTS
# ======================

def create_swap_request(
    db: Session,
    requester_id: int,
    receiver_id: int,
    offered_skill_id: int,
    requested_skill_id: int,
) -> Tuple[models.SwapRequest, bool]:
    """
    Propose a swap to a matched user.

    Args:
        db: Database session
        requester_id: User sending the request
        receiver_id: User being asked
        offered_skill_id: Skill the requester will teach
        requested_skill_id: Skill the requester wants from the receiver

    Returns:
        (request, created). An identical pending request is returned as-is
        with created=False.

    Raises:
        ValueError: Self request, or a skill not declared by the right user
        LookupError: Receiver or skill does not exist
    """
    if requester_id == receiver_id:
        raise ValueError("You cannot request a swap with yourself")

    receiver = user_crud.get_user(db, receiver_id)
    if not receiver or not receiver.is_active:
        raise LookupError("User not found")

    for skill_id in (offered_skill_id, requested_skill_id):
        if not skill_crud.get_skill(db, skill_id):
            raise LookupError(f"Skill {skill_id} not found")

    if not skill_crud.user_declares(db, requester_id, offered_skill_id, OFFER):
        raise ValueError("You can only offer skills from your offered list")
    if not skill_crud.user_declares(db, receiver_id, requested_skill_id, OFFER):
        raise ValueError("That user does not offer the requested skill")

    existing = db.query(models.SwapRequest).filter(
        models.SwapRequest.requester_id == requester_id,
        models.SwapRequest.receiver_id == receiver_id,
        models.SwapRequest.offered_skill_id == offered_skill_id,
        models.SwapRequest.requested_skill_id == requested_skill_id,
        models.SwapRequest.status == REQUEST_PENDING,
    ).first()
    if existing:
        return existing, False

    try:
        request = models.SwapRequest(
            requester_id=requester_id,
            receiver_id=receiver_id,
            offered_skill_id=offered_skill_id,
            requested_skill_id=requested_skill_id,
            status=REQUEST_PENDING,
        )
        db.add(request)
        db.flush()

        requester = user_crud.get_user(db, requester_id)
        notification_service.create_notification(
            db,
            recipient_id=receiver_id,
            actor_id=requester_id,
            swap_request_id=request.id,
            event_type=notification_service.EVENT_SWAP_REQUEST,
            message=f"{requester.name if requester else 'Someone'} wants to swap skills with you",
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(request)
    logger.info(
        "Swap request %s created (requester_id=%s, receiver_id=%s)",
        request.id,
        requester_id,
        receiver_id,
    )
    return request, True


def list_incoming_requests(
    db: Session,
    user_id: int,
    status: Optional[str] = None,
) -> List[models.SwapRequest]:
    query = db.query(models.SwapRequest).filter(models.SwapRequest.receiver_id == user_id)
    if status:
        query = query.filter(models.SwapRequest.status == status)
    return query.order_by(models.SwapRequest.created_at.desc(), models.SwapRequest.id.desc()).all()


def list_outgoing_requests(
    db: Session,
    user_id: int,
    status: Optional[str] = None,
) -> List[models.SwapRequest]:
    query = db.query(models.SwapRequest).filter(models.SwapRequest.requester_id == user_id)
    if status:
        query = query.filter(models.SwapRequest.status == status)
    return query.order_by(models.SwapRequest.created_at.desc(), models.SwapRequest.id.desc()).all()


def _get_pending_request_for_receiver(
    db: Session,
    request_id: int,
    user_id: int,
) -> models.SwapRequest:
    request = db.query(models.SwapRequest).filter(models.SwapRequest.id == request_id).first()
    if not request:
        raise LookupError("Swap request not found")
    if request.receiver_id != user_id:
        raise PermissionError("Only the receiver can respond to this request")
    if request.status != REQUEST_PENDING:
        raise ValueError(f"Swap request is already {request.status}")
    return request


def accept_swap_request(db: Session, request_id: int, user_id: int) -> models.Swap:
    """Accept a pending request and open the swap it describes."""
    request = _get_pending_request_for_receiver(db, request_id, user_id)

    try:
        request.status = REQUEST_ACCEPTED
        swap = models.Swap(request_id=request.id, status=SWAP_ACTIVE)
        db.add(swap)
        db.flush()

        notification_service.create_notification(
            db,
            recipient_id=request.requester_id,
            actor_id=user_id,
            swap_request_id=request.id,
            swap_id=swap.id,
            event_type=notification_service.EVENT_SWAP_ACCEPTED,
            message=f"{request.receiver.name} accepted your swap request",
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(swap)
    logger.info("Swap request %s accepted; swap %s is active", request.id, swap.id)
    return swap


def reject_swap_request(db: Session, request_id: int, user_id: int) -> models.SwapRequest:
    request = _get_pending_request_for_receiver(db, request_id, user_id)

    try:
        request.status = REQUEST_REJECTED
        notification_service.create_notification(
            db,
            recipient_id=request.requester_id,
            actor_id=user_id,
            swap_request_id=request.id,
            event_type=notification_service.EVENT_SWAP_REJECTED,
            message=f"{request.receiver.name} declined your swap request",
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(request)
    return request


def serialize_request(request: models.SwapRequest) -> dict:
    return {
        "id": request.id,
        "requester_id": request.requester_id,
        "receiver_id": request.receiver_id,
        "offered_skill_id": request.offered_skill_id,
        "requested_skill_id": request.requested_skill_id,
        "status": request.status,
        "created_at": request.created_at,
        "updated_at": request.updated_at,
        "requester_name": request.requester.name if request.requester else "Unknown User",
        "receiver_name": request.receiver.name if request.receiver else "Unknown User",
        "offered_skill": request.offered_skill.name if request.offered_skill else "N/A",
        "requested_skill": request.requested_skill.name if request.requested_skill else "N/A",
    }


# ======================
# SWAPS
# ======================

def list_user_swaps(
    db: Session,
    user_id: int,
    status: Optional[str] = None,
) -> List[models.Swap]:
    query = (
        db.query(models.Swap)
        .join(models.SwapRequest, models.SwapRequest.id == models.Swap.request_id)
        .filter(
            or_(
                models.SwapRequest.requester_id == user_id,
                models.SwapRequest.receiver_id == user_id,
            )
        )
    )
    if status:
        query = query.filter(models.Swap.status == status)
    return query.order_by(models.Swap.updated_at.desc(), models.Swap.id.desc()).all()


def get_swap_for_participant(db: Session, swap_id: int, user_id: int) -> models.Swap:
    swap = db.query(models.Swap).filter(models.Swap.id == swap_id).first()
    if not swap:
        raise LookupError("Swap not found")
    if user_id not in swap.participant_ids:
        raise PermissionError("Not a participant of this swap")
    return swap


def complete_swap(db: Session, swap_id: int, user_id: int) -> models.Swap:
    """
    Mark an active swap completed.
    Both participants' completed-swap counters go up by one.
    """
    swap = get_swap_for_participant(db, swap_id, user_id)
    if swap.status != SWAP_ACTIVE:
        raise ValueError(f"Only active swaps can be completed (status: {swap.status})")

    try:
        swap.status = SWAP_COMPLETED
        for participant_id in swap.participant_ids:
            profile = user_crud.get_or_create_profile(db, participant_id)
            profile.completed_swaps = (profile.completed_swaps or 0) + 1

        actor = user_crud.get_user(db, user_id)
        notification_service.create_notification(
            db,
            recipient_id=swap.partner_of(user_id),
            actor_id=user_id,
            swap_id=swap.id,
            event_type=notification_service.EVENT_SWAP_COMPLETED,
            message=f"{actor.name if actor else 'Your partner'} marked your swap as completed",
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(swap)
    logger.info("Swap %s completed by user %s", swap.id, user_id)
    return swap


def cancel_swap(db: Session, swap_id: int, user_id: int) -> models.Swap:
    swap = get_swap_for_participant(db, swap_id, user_id)
    if swap.status != SWAP_ACTIVE:
        raise ValueError(f"Only active swaps can be cancelled (status: {swap.status})")

    try:
        swap.status = SWAP_CANCELLED

        actor = user_crud.get_user(db, user_id)
        notification_service.create_notification(
            db,
            recipient_id=swap.partner_of(user_id),
            actor_id=user_id,
            swap_id=swap.id,
            event_type=notification_service.EVENT_SWAP_CANCELLED,
            message=f"{actor.name if actor else 'Your partner'} cancelled your swap",
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    db.refresh(swap)
    logger.info("Swap %s cancelled by user %s", swap.id, user_id)
    return swap


def serialize_swap(swap: models.Swap, user_id: int) -> dict:
    request = swap.request
    partner_id = swap.partner_of(user_id)
    partner = request.receiver if partner_id == request.receiver_id else request.requester

    # From the requester's side they give the offered skill and receive the requested one.
    if user_id == request.requester_id:
        given, received = request.offered_skill, request.requested_skill
    else:
        given, received = request.requested_skill, request.offered_skill

    return {
        "id": swap.id,
        "request_id": swap.request_id,
        "status": swap.status,
        "partner_id": partner_id,
        "partner_name": partner.name if partner else "Unknown User",
        "skill_given": given.name if given else "N/A",
        "skill_received": received.name if received else "N/A",
        "created_at": swap.created_at,
        "updated_at": swap.updated_at,
    }
