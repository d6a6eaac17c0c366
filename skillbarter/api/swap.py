from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from skillbarter import models, schemas
from skillbarter.api.swap_request import _raise_http
from skillbarter.database import get_db
from skillbarter.services import swap_service
from skillbarter.utils.security import get_current_user

router = APIRouter(prefix="/swaps", tags=["Swaps"])


@router.get("/", response_model=List[schemas.Swap])
def get_my_swaps(
    status: Optional[str] = Query(None, description="active, completed or cancelled"),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [
        swap_service.serialize_swap(swap, current_user.id)
        for swap in swap_service.list_user_swaps(db, current_user.id, status=status)
    ]


@router.post("/{swap_id}/complete", response_model=schemas.Swap)
def complete_swap(
    swap_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        swap = swap_service.complete_swap(db, swap_id, current_user.id)
    except (LookupError, PermissionError, ValueError) as e:
        _raise_http(e)
    return swap_service.serialize_swap(swap, current_user.id)


@router.post("/{swap_id}/cancel", response_model=schemas.Swap)
def cancel_swap(
    swap_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        swap = swap_service.cancel_swap(db, swap_id, current_user.id)
    except (LookupError, PermissionError, ValueError) as e:
        _raise_http(e)
    return swap_service.serialize_swap(swap, current_user.id)
