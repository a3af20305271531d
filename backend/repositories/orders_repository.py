from datetime import datetime
from typing import Any, Dict, List, Optional

from supabase_client import get_supabase

TABLE_NAME = "orders"


def _serialize(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in fields.items()
    }


def insert_order(record: Dict[str, Any]) -> Dict[str, Any]:
    response = get_supabase().table(TABLE_NAME).insert(_serialize(record)).execute()
    if not response.data:
        raise RuntimeError("Failed to store order")
    return response.data[0]


def update_order(record_id: str, **fields: Any) -> None:
    payload = {key: value for key, value in fields.items() if value is not None}
    if not payload:
        return
    get_supabase().table(TABLE_NAME).update(_serialize(payload)).eq(
        "id", record_id
    ).execute()


def fetch_user_orders(user_id: str) -> List[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )
    return response.data or []


def fetch_user_order(user_id: str, order_id: str) -> Optional[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("user_id", user_id)
        .eq("order_id", order_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None
