from typing import Any, Awaitable, Callable, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from auth import get_current_user
from mobile_order.errors import MobileOrderError
from services import account_service
from services.users_service import StoredUser

router = APIRouter(prefix="/api/account", tags=["account"])


async def _upstream(
    fetch: Callable[[StoredUser], Awaitable[Dict[str, Any]]], user: StoredUser
) -> Dict[str, Any]:
    try:
        return await fetch(user)
    except MobileOrderError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=str(exc),
        ) from exc


@router.get("/locations")
async def read_upstream_locations(
    user: StoredUser = Depends(get_current_user),
) -> Dict[str, Any]:
    return await _upstream(account_service.get_locations, user)


@router.get("/payment-methods")
async def read_payment_methods(
    user: StoredUser = Depends(get_current_user),
) -> Dict[str, Any]:
    return await _upstream(account_service.get_payment_methods, user)


@router.get("/order-history")
async def read_order_history(
    user: StoredUser = Depends(get_current_user),
) -> Dict[str, Any]:
    return await _upstream(account_service.get_order_history, user)
