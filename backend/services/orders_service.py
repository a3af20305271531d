import asyncio
from typing import Optional

from repositories.orders_repository import fetch_user_order, fetch_user_orders
from schemas import (
    LiveOrderStatusResponse,
    OrderListResponse,
    OrderRecord,
    PlaceOrderRequest,
    PlacedOrderResponse,
)
from services.order_processor import order_processor
from services.order_status import classify_order_status, extract_barcode, extract_order
from services.users_service import StoredUser, open_session


async def place_order(user: StoredUser, payload: PlaceOrderRequest) -> PlacedOrderResponse:
    return await order_processor.process_order(
        user.token,
        payload.cart_items,
        payload.location_id,
        payload.total,
        payload.special_request,
        "direct",
        user_email=user.email,
    )


async def list_orders(user_id: str) -> OrderListResponse:
    rows = await asyncio.to_thread(fetch_user_orders, user_id)
    return OrderListResponse(items=[OrderRecord(**row) for row in rows])


async def get_order(user_id: str, order_id: str) -> Optional[OrderRecord]:
    row = await asyncio.to_thread(fetch_user_order, user_id, order_id)
    return OrderRecord(**row) if row else None


async def check_live_status(user: StoredUser, order_id: str) -> LiveOrderStatusResponse:
    client = open_session(user.token)
    try:
        payload = await asyncio.to_thread(client.check_order_status, order_id)
    finally:
        client.close()
    return LiveOrderStatusResponse(
        order_id=order_id,
        status=classify_order_status(extract_order(payload)).value,
        barcode=extract_barcode(payload),
        payload=payload,
    )
