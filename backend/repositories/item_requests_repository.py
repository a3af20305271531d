from datetime import datetime
from typing import Any, Dict, List, Optional

from supabase_client import get_supabase

TABLE_NAME = "item_requests"


def _serialize(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in fields.items()
    }


def insert_item_request(record: Dict[str, Any]) -> Dict[str, Any]:
    response = get_supabase().table(TABLE_NAME).insert(_serialize(record)).execute()
    if not response.data:
        raise RuntimeError("Failed to store item request")
    return response.data[0]


def fetch_user_item_requests(user_id: str) -> List[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("user_id", user_id)
        .order("created_at", desc=True)
        .execute()
    )
    return response.data or []


def fetch_user_item_request(user_id: str, request_id: str) -> Optional[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("id", request_id)
        .eq("user_id", user_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_item_request(request_id: str) -> Optional[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .eq("id", request_id)
        .limit(1)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None


def fetch_public_item_requests(limit: int = 50) -> List[Dict[str, Any]]:
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .select("*")
        .order("created_at", desc=True)
        .limit(limit)
        .execute()
    )
    return response.data or []


def transition_status(
    request_id: str,
    *,
    from_status: str,
    to_status: str,
    **fields: Any,
) -> Optional[Dict[str, Any]]:
    payload = _serialize({"status": to_status, **fields})
    response = (
        get_supabase()
        .table(TABLE_NAME)
        .update(payload)
        .eq("id", request_id)
        .eq("status", from_status)
        .execute()
    )
    items = response.data or []
    return items[0] if items else None
