from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from skillbarter import models, schemas
from skillbarter.database import get_db
from skillbarter.services import swap_service
from skillbarter.utils.security import get_current_user

router = APIRouter(prefix="/swap-requests", tags=["Swap Requests"])


def _raise_http(e: Exception):
    if isinstance(e, LookupError):
        raise HTTPException(status_code=404, detail=str(e))
    if isinstance(e, PermissionError):
        raise HTTPException(status_code=403, detail=str(e))
    raise HTTPException(status_code=400, detail=str(e))


# ======================
# POST: Request a swap
# ======================
@router.post("/", response_model=schemas.SwapRequestDetail, status_code=status.HTTP_201_CREATED)
def create_swap_request(
    payload: schemas.SwapRequestCreate,
    response: Response,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        request, created = swap_service.create_swap_request(
            db,
            requester_id=current_user.id,
            receiver_id=payload.receiver_id,
            offered_skill_id=payload.offered_skill_id,
            requested_skill_id=payload.requested_skill_id,
        )
    except (LookupError, PermissionError, ValueError) as e:
        _raise_http(e)

    if not created:
        response.status_code = status.HTTP_200_OK
    return swap_service.serialize_request(request)


# ======================
# GET: Requests sent to me / by me
# ======================
@router.get("/incoming", response_model=List[schemas.SwapRequestDetail])
def get_incoming_requests(
    status: Optional[str] = Query(None, description="pending, accepted or rejected"),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [
        swap_service.serialize_request(r)
        for r in swap_service.list_incoming_requests(db, current_user.id, status=status)
    ]


@router.get("/outgoing", response_model=List[schemas.SwapRequestDetail])
def get_outgoing_requests(
    status: Optional[str] = Query(None, description="pending, accepted or rejected"),
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return [
        swap_service.serialize_request(r)
        for r in swap_service.list_outgoing_requests(db, current_user.id, status=status)
    ]


# ======================
# POST: Respond to a request
# ======================
@router.post("/{request_id}/accept", response_model=schemas.Swap)
def accept_swap_request(
    request_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        swap = swap_service.accept_swap_request(db, request_id, current_user.id)
    except (LookupError, PermissionError, ValueError) as e:
        _raise_http(e)
    return swap_service.serialize_swap(swap, current_user.id)


@router.post("/{request_id}/reject", response_model=schemas.SwapRequestDetail)
def reject_swap_request(
    request_id: int,
    current_user: models.User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        request = swap_service.reject_swap_request(db, request_id, current_user.id)
    except (LookupError, PermissionError, ValueError) as e:
        _raise_http(e)
    return swap_service.serialize_request(request)
