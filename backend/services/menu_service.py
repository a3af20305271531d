import asyncio
from typing import Any, Dict, List

from mobile_order.constants import LOCATION_NAMES
from schemas import Location, MenuItem, MenuOptionValue
from services.users_service import StoredUser, open_session


def _to_int(value: Any, default: int = 0) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _clean_options(options: List[Dict[str, Any]]) -> List[List[MenuOptionValue]]:
    cleaned: List[List[MenuOptionValue]] = []
    for option in options or []:
        values = [
            MenuOptionValue(
                name=value.get("qp_name") or "",
                price=_to_int(value.get("price")) / 100,
                opt_id=_to_int(option.get("optionid")),
                value_id=_to_int(value.get("valueid")),
            )
            for value in option.get("values") or []
        ]
        cleaned.append(values)
    return cleaned


def _is_listed(item: Dict[str, Any]) -> bool:
    return _to_int(item.get("manual_online"), 1) != 0 and _to_int(item.get("is_hidden")) != 1


def clean_menu(menu_response: Dict[str, Any]) -> List[MenuItem]:
    """Flatten the upstream ``getmenu`` payload into orderable items."""
    menu = menu_response.get("menu") or {}
    items: List[MenuItem] = []
    for section in menu.get("sections_1") or []:
        for item in section.get("items") or []:
            if not _is_listed(item):
                continue
            items.append(
                MenuItem(
                    id=_to_int(item.get("itemid")),
                    sectionid=_to_int(item.get("sectionid")),
                    name=item.get("name") or "",
                    description=item.get("description") or "",
                    price=_to_int(item.get("price_display")) / 100,
                    category=section.get("name") or "",
                    available=_to_int(item.get("unavailable_reason")) == 0,
                    options=_clean_options(item.get("options") or []),
                )
            )
    return items


async def get_menu(user: StoredUser, location_id: str) -> List[MenuItem]:
    client = open_session(user.token)
    try:
        response = await asyncio.to_thread(client.get_menu, location_id)
    finally:
        client.close()
    return clean_menu(response)


def list_locations() -> List[Location]:
    return [
        Location(location_id=location_id, name=name)
        for location_id, name in sorted(LOCATION_NAMES.items(), key=lambda pair: pair[1])
    ]
