import asyncio
from datetime import datetime, timezone
from typing import Optional

from repositories.scheduled_orders_repository import (
    fetch_user_scheduled_order,
    fetch_user_scheduled_orders,
    insert_scheduled_order,
    transition_status,
)
from schemas import (
    ScheduledOrderCreate,
    ScheduledOrderListResponse,
    ScheduledOrderRecord,
)
from services.order_processor import location_name
from services.scheduler import append_note, parse_datetime
from services.users_service import StoredUser


async def create_scheduled_order(
    user: StoredUser, payload: ScheduledOrderCreate
) -> ScheduledOrderRecord:
    scheduled_time = parse_datetime(payload.scheduled_time)
    if scheduled_time is None or scheduled_time <= datetime.now(timezone.utc):
        raise ValueError("Scheduled time must be in the future")
    if not payload.cart_items:
        raise ValueError("cart_items must not be empty")
    record = {
        "user_id": user.user_id,
        "user_email": user.email,
        "location_id": payload.location_id,
        "location_name": payload.location_name or location_name(payload.location_id),
        "items": payload.items,
        "cart_items": payload.cart_items,
        "total": payload.total,
        "special_request": payload.special_request or "",
        "scheduled_time": scheduled_time,
        "status": "scheduled",
        "notes": payload.notes or "",
    }
    row = await asyncio.to_thread(insert_scheduled_order, record)
    return ScheduledOrderRecord(**row)


async def list_scheduled_orders(user_id: str) -> ScheduledOrderListResponse:
    rows = await asyncio.to_thread(fetch_user_scheduled_orders, user_id)
    return ScheduledOrderListResponse(items=[ScheduledOrderRecord(**row) for row in rows])


async def get_scheduled_order(
    user_id: str, scheduled_id: str
) -> Optional[ScheduledOrderRecord]:
    row = await asyncio.to_thread(fetch_user_scheduled_order, user_id, scheduled_id)
    return ScheduledOrderRecord(**row) if row else None


async def cancel_scheduled_order(user_id: str, scheduled_id: str) -> ScheduledOrderRecord:
    row = await asyncio.to_thread(fetch_user_scheduled_order, user_id, scheduled_id)
    if not row:
        raise LookupError("Scheduled order not found")
    if row.get("status") != "scheduled":
        raise ValueError(f"Cannot cancel order with status: {row.get('status')}")
    stamp = datetime.now(timezone.utc).isoformat()
    updated = await asyncio.to_thread(
        transition_status,
        scheduled_id,
        from_status="scheduled",
        to_status="cancelled",
        notes=append_note(row.get("notes"), f"Cancelled by user at {stamp}"),
    )
    if not updated:
        raise ValueError("Scheduled order is already being processed")
    return ScheduledOrderRecord(**updated)
