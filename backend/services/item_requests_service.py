import asyncio
import copy
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from repositories.item_requests_repository import (
    fetch_item_request,
    fetch_public_item_requests,
    fetch_user_item_request,
    fetch_user_item_requests,
    insert_item_request,
    transition_status,
)
from schemas import (
    FulfillItemRequest,
    FulfillItemResponse,
    ItemRequestCreate,
    ItemRequestListResponse,
    ItemRequestRecord,
)
from services.menu_service import get_menu
from services.order_processor import location_name, order_processor
from services.users_service import StoredUser

logger = logging.getLogger("mobile-order")

DEFAULT_LOCATION_ID = "13"
DEFAULT_TOTAL = 500
PUBLIC_LIMIT = 50


def _plain_cart_item(itemid: int, sectionid: int) -> Dict[str, Any]:
    return {
        "itemid": itemid,
        "sectionid": sectionid,
        "upsell_upsellid": 0,
        "upsell_variantid": 0,
        "options": [],
        "meal_ex_applied": False,
    }


def stored_cart_item(
    item_details: Dict[str, Any], selected_options: List[Dict[str, Any]]
) -> Optional[Dict[str, Any]]:
    """Cart item saved with the request, with options replaced by the chosen ones."""
    cart_item = (item_details or {}).get("cart_item")
    if not cart_item:
        return None
    cart_item = copy.deepcopy(cart_item)
    if selected_options:
        cart_item["options"] = [
            {
                "optionid": option["opt_id"],
                "values": [
                    {"valueid": option["value_id"], "combo_itemid": 0, "combo_items": []}
                ],
            }
            for option in selected_options
        ]
    return cart_item


def _names_match(menu_name: str, requested: str) -> bool:
    menu_name = menu_name.lower()
    requested = requested.lower()
    return requested in menu_name or menu_name in requested


async def _cart_from_menu(
    fulfiller: StoredUser, item_name: str, location_id: str
) -> Tuple[Dict[str, Any], Any]:
    for item in await get_menu(fulfiller, location_id):
        if item.name and _names_match(item.name, item_name):
            total = round(item.price * 100) or DEFAULT_TOTAL
            return _plain_cart_item(item.id, item.sectionid), total
    logger.warning("No menu item at location %s matches %r", location_id, item_name)
    return _plain_cart_item(1, 1), DEFAULT_TOTAL


def fulfillment_comment(
    row: Dict[str, Any], requester_email: Optional[str], special_request: Optional[str]
) -> str:
    comment = (
        f"Fulfilling request for {requester_email or row.get('user_email')}: "
        f"{row.get('description')}"
    )
    if special_request:
        comment += f" | Additional notes: {special_request}"
    return comment


async def create_item_request(
    user: StoredUser, payload: ItemRequestCreate
) -> ItemRequestRecord:
    record = {
        "user_id": user.user_id,
        "user_email": user.email,
        "item_name": payload.item_name,
        "description": payload.description,
        "location_id": payload.location_id,
        "location_name": payload.location_name
        or (location_name(payload.location_id) if payload.location_id else None),
        "item_details": payload.item_details.model_dump() if payload.item_details else None,
        "selected_options": [option.model_dump() for option in payload.selected_options],
        "status": "pending",
    }
    row = await asyncio.to_thread(insert_item_request, record)
    return ItemRequestRecord(**row)


async def list_item_requests(user_id: str) -> ItemRequestListResponse:
    rows = await asyncio.to_thread(fetch_user_item_requests, user_id)
    return ItemRequestListResponse(items=[ItemRequestRecord(**row) for row in rows])


async def list_public_item_requests() -> ItemRequestListResponse:
    rows = await asyncio.to_thread(fetch_public_item_requests, PUBLIC_LIMIT)
    return ItemRequestListResponse(items=[ItemRequestRecord(**row) for row in rows])


async def get_item_request(user_id: str, request_id: str) -> Optional[ItemRequestRecord]:
    row = await asyncio.to_thread(fetch_user_item_request, user_id, request_id)
    return ItemRequestRecord(**row) if row else None


async def fulfill_item_request(
    fulfiller: StoredUser, request_id: str, payload: FulfillItemRequest
) -> FulfillItemResponse:
    """Place an order on the fulfiller's account for someone else's request.

    The request is claimed (``fulfilling``) with a conditional update before
    anything is ordered and is put back to its previous status if the order
    fails.
    """
    row = await asyncio.to_thread(fetch_item_request, request_id)
    if not row:
        raise LookupError("Item request not found")
    previous_status = row.get("status") or "pending"
    if previous_status == "fulfilled":
        raise ValueError("Request has already been fulfilled")
    if str(row.get("user_id")) == fulfiller.user_id:
        raise ValueError("You cannot fulfill your own request")
    if previous_status == "fulfilling":
        raise ValueError("Request is already being fulfilled")

    claimed = await asyncio.to_thread(
        transition_status, request_id, from_status=previous_status, to_status="fulfilling"
    )
    if not claimed:
        raise ValueError("Request is already being fulfilled")

    location_id = str(row.get("location_id") or DEFAULT_LOCATION_ID)
    item_details = row.get("item_details") or {}
    try:
        cart_item = stored_cart_item(item_details, row.get("selected_options") or [])
        if cart_item is not None:
            total = item_details.get("price") or DEFAULT_TOTAL
        else:
            cart_item, total = await _cart_from_menu(
                fulfiller, row.get("item_name") or "", location_id
            )
        comment = fulfillment_comment(row, payload.requester_email, payload.special_request)
        result = await order_processor.process_order(
            fulfiller.token,
            [cart_item],
            location_id,
            total,
            comment,
            "fulfillment",
            request_id,
            user_email=fulfiller.email,
        )
    except BaseException:
        logger.warning("Fulfilment of item request %s failed, releasing claim", request_id)
        await asyncio.to_thread(
            transition_status, request_id, from_status="fulfilling", to_status=previous_status
        )
        raise

    updated = await asyncio.to_thread(
        transition_status,
        request_id,
        from_status="fulfilling",
        to_status="fulfilled",
        order_id=result.order_id,
        barcode=result.barcode,
        fulfilled_by=fulfiller.user_id,
        fulfilled_by_email=fulfiller.email,
        fulfilled_at=datetime.now(timezone.utc),
        fulfillment_details={
            "actual_order_id": result.order_id,
            "barcode": result.barcode,
            "item_details": item_details or None,
            "cart_items": [cart_item],
            "order_total": total,
            "location_id": location_id,
            "special_comment": comment,
        },
    )
    logger.info("Item request %s fulfilled with order %s", request_id, result.order_id)
    return FulfillItemResponse(request=ItemRequestRecord(**(updated or row)), order=result)
