from typing import Any, Dict, Optional

from supabase_client import get_supabase

TABLE_NAME = "mobile_order_users"


def fetch_active_user(user_id: str) -> Optional[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("user_id", user_id)
        .eq("is_active", True)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def upsert_user(record: Dict[str, Any]) -> Dict[str, Any]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .upsert(record, on_conflict="user_id")
        .execute()
    )
    if not response.data:
        raise RuntimeError("Failed to store user session")
    return response.data[0]


def deactivate_user(user_id: str) -> bool:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .update({"is_active": False})
        .eq("user_id", user_id)
        .execute()
    )
    return bool(response.data)
