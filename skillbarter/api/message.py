from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from skillbarter import models, schemas
from skillbarter.api.swap_request import _raise_http
from skillbarter.database import get_db
from skillbarter.services import message_service
from skillbarter.utils.security import get_current_user

router = APIRouter(tags=["Messages"])


@router.get("/conversations/", response_model=List[schemas.Conversation])
def get_conversations(
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return message_service.list_conversations(db, user_id=current_user.id)


@router.get("/swaps/{swap_id}/messages", response_model=List[schemas.Message])
def get_messages(
    swap_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return message_service.list_messages(db, swap_id=swap_id, user_id=current_user.id)
    except (LookupError, PermissionError) as e:
        _raise_http(e)


@router.post(
    "/swaps/{swap_id}/messages",
    response_model=schemas.Message,
    status_code=status.HTTP_201_CREATED,
)
def send_message(
    swap_id: int,
    payload: schemas.MessageCreate,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        return message_service.send_message(
            db,
            swap_id=swap_id,
            sender_id=current_user.id,
            text=payload.text,
        )
    except (LookupError, PermissionError, ValueError) as e:
        _raise_http(e)


@router.post("/swaps/{swap_id}/messages/read")
def mark_messages_read(
    swap_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        updated = message_service.mark_messages_read(db, swap_id=swap_id, user_id=current_user.id)
    except (LookupError, PermissionError) as e:
        _raise_http(e)
    return {"message": "Messages marked as read", "updated_count": updated}
