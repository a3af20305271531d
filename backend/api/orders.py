from fastapi import APIRouter, Depends, HTTPException, status

from auth import get_current_user
from mobile_order.errors import MobileOrderError
from schemas import (
    LiveOrderStatusResponse,
    OrderListResponse,
    OrderRecord,
    PlaceOrderRequest,
    PlacedOrderResponse,
)
from services import orders_service
from services.users_service import StoredUser

router = APIRouter(prefix="/api/orders", tags=["orders"])


@router.post("", response_model=PlacedOrderResponse)
async def place_order(
    payload: PlaceOrderRequest,
    user: StoredUser = Depends(get_current_user),
) -> PlacedOrderResponse:
    try:
        return await orders_service.place_order(user, payload)
    except MobileOrderError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc


@router.get("", response_model=OrderListResponse)
async def list_orders(
    user: StoredUser = Depends(get_current_user),
) -> OrderListResponse:
    return await orders_service.list_orders(user.user_id)


@router.get("/{order_id}", response_model=OrderRecord)
async def read_order(
    order_id: str,
    user: StoredUser = Depends(get_current_user),
) -> OrderRecord:
    order = await orders_service.get_order(user.user_id, order_id)
    if order is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return order


@router.post("/{order_id}/status", response_model=LiveOrderStatusResponse)
async def check_status(
    order_id: str,
    user: StoredUser = Depends(get_current_user),
) -> LiveOrderStatusResponse:
    try:
        return await orders_service.check_live_status(user, order_id)
    except MobileOrderError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
