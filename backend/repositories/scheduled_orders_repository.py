from datetime import datetime
from typing import Any, Dict, List, Optional

from supabase_client import get_supabase

TABLE_NAME = "scheduled_orders"


def _serialize(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in fields.items()
    }


def insert_scheduled_order(record: Dict[str, Any]) -> Dict[str, Any]:
    response = get_supabase().table(TABLE_NAME).insert(_serialize(record)).execute()
    if not response.data:
        raise RuntimeError("Failed to store scheduled order")
    return response.data[0]


def fetch_user_scheduled_orders(user_id: str) -> List[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("user_id", user_id)
        .order("scheduled_time", desc=True)
        .execute()
    )
    return response.data or []


def fetch_user_scheduled_order(
    user_id: str, scheduled_id: str
) -> Optional[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("id", scheduled_id)
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_due(until: datetime) -> List[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("status", "scheduled")
        .lte("scheduled_time", until.isoformat())
        .order("scheduled_time")
        .execute()
    )
    return response.data or []


def transition_status(
    scheduled_id: str,
    *,
    from_status: str,
    to_status: str,
    **fields: Any,
) -> Optional[Dict[str, Any]]:
    """Move a row between statuses only if it is still in ``from_status``.

    Returns the updated row, or ``None`` when another writer got there first.
    """
    payload = _serialize({"status": to_status, **fields})
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .update(payload)
        .eq("id", scheduled_id)
        .eq("status", from_status)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def update_scheduled_order(scheduled_id: str, **fields: Any) -> None:
    payload = {key: value for key, value in fields.items() if value is not None}
    if not payload:
        return
    get_supabase().table(TABLE_NAME).update(_serialize(payload)).eq(
        "id", scheduled_id
    ).execute()
