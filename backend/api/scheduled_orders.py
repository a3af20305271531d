from fastapi import APIRouter, Depends, HTTPException, status

from auth import get_current_user
from schemas import (
    ScheduledOrderCreate,
    ScheduledOrderListResponse,
    ScheduledOrderRecord,
)
from services import scheduled_orders_service
from services.users_service import StoredUser

router = APIRouter(prefix="/api/scheduled-orders", tags=["scheduled-orders"])


@router.post("", response_model=ScheduledOrderRecord, status_code=status.HTTP_201_CREATED)
async def create_scheduled_order(
    payload: ScheduledOrderCreate,
    user: StoredUser = Depends(get_current_user),
) -> ScheduledOrderRecord:
    try:
        return await scheduled_orders_service.create_scheduled_order(user, payload)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.get("", response_model=ScheduledOrderListResponse)
async def list_scheduled_orders(
    user: StoredUser = Depends(get_current_user),
) -> ScheduledOrderListResponse:
    return await scheduled_orders_service.list_scheduled_orders(user.user_id)


@router.get("/{scheduled_id}", response_model=ScheduledOrderRecord)
async def read_scheduled_order(
    scheduled_id: str,
    user: StoredUser = Depends(get_current_user),
) -> ScheduledOrderRecord:
    order = await scheduled_orders_service.get_scheduled_order(user.user_id, scheduled_id)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    return order


@router.post("/{scheduled_id}/cancel", response_model=ScheduledOrderRecord)
async def cancel_scheduled_order(
    scheduled_id: str,
    user: StoredUser = Depends(get_current_user),
) -> ScheduledOrderRecord:
    try:
        return await scheduled_orders_service.cancel_scheduled_order(
            user.user_id, scheduled_id
        )
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
