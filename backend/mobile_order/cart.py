from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

from .constants import CART_TEMPLATE, CHECKOUT_CHOICE_IDS, PICKUP_TIME_MAX, PICKUP_TIME_MIN


@dataclass
class PricedCart:
    pricing: Dict[str, Any]
    cart_data: Dict[str, Any]


def _pick(source: Mapping[str, Any], *keys: str, default: Any = 0) -> Any:
    for key in keys:
        if key in source and source[key] is not None:
            return source[key]
    return default


def _normalize_value(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "valueid": _pick(raw, "valueid", "valueId"),
        "combo_itemid": _pick(raw, "combo_itemid", "comboItemId"),
        "combo_items": list(_pick(raw, "combo_items", "comboItems", default=[])),
    }


def _normalize_option(raw: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "optionid": _pick(raw, "optionid", "optionId"),
        "values": [_normalize_value(value) for value in raw.get("values") or []],
    }


def normalize_cart_item(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``raw`` in the upstream wire shape; camelCase keys are accepted."""
    return {
        "itemid": _pick(raw, "itemid", "itemId"),
        "sectionid": _pick(raw, "sectionid", "sectionId"),
        "upsell_upsellid": _pick(raw, "upsell_upsellid", "upsellItemId", "upsellUpsellId"),
        "upsell_variantid": _pick(raw, "upsell_variantid", "upsellVariantId"),
        "options": [_normalize_option(option) for option in raw.get("options") or []],
        "meal_ex_applied": bool(
            _pick(raw, "meal_ex_applied", "mealExApplied", default=False)
        ),
    }


def build_cart_payload(
    items: Sequence[Mapping[str, Any]],
    *,
    location_id: str,
    user_id: str,
    campus_id: str,
) -> Dict[str, Any]:
    cart = copy.deepcopy(CART_TEMPLATE)
    cart["userid"] = user_id
    cart["campusid"] = campus_id
    cart["locationid"] = str(location_id)
    cart["items"] = [normalize_cart_item(item) for item in items]
    return cart


def format_amount(total: Any) -> str:
    if isinstance(total, float) and total.is_integer():
        return str(int(total))
    return str(total)


def build_order_cart(
    priced: PricedCart,
    total: Any,
    special_request: Optional[str] = None,
) -> Dict[str, Any]:
    # The server's computed price is advisory; the caller's total is submitted.
    cart = copy.deepcopy(priced.cart_data)
    amount = format_amount(total)
    cart["grand_total"] = amount
    cart["subtotal"] = amount
    cart["pickup_time_min"] = PICKUP_TIME_MIN
    cart["pickup_time_max"] = PICKUP_TIME_MAX
    cart["checkout_select_choiceids"] = list(CHECKOUT_CHOICE_IDS)
    if special_request and special_request.strip():
        cart["special_comment"] = special_request.strip()
    return cart
