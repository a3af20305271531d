import os

from cryptography.fernet import Fernet

os.environ.setdefault("SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_ROLE_KEY", "header.payload.signature")
os.environ.setdefault("ENCRYPTION_KEY", Fernet.generate_key().decode("utf-8"))
os.environ.setdefault("SCHEDULER_AUTOSTART", "false")

import copy  # noqa: E402
import itertools  # noqa: E402
from typing import Any, Dict, List, Optional  # noqa: E402

import pytest  # noqa: E402

from mobile_order import ClientConfig, Token  # noqa: E402
from mobile_order.identity import SessionState  # noqa: E402

API_URL = "https://api.test"
IDP_URL = "https://idp.test"


@pytest.fixture
def client_config() -> ClientConfig:
    return ClientConfig(
        base_api_url=API_URL,
        base_idp_url=IDP_URL,
        campus_id="4",
        secret_key="test-secret",
        timeout=5.0,
    )


class FakeOrderStore:
    def __init__(self) -> None:
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.updates: List[Dict[str, Any]] = []
        self._ids = itertools.count(1)

    def insert_order(self, record: Dict[str, Any]) -> Dict[str, Any]:
        row = {"id": f"order-row-{next(self._ids)}", **record}
        self.rows[row["id"]] = row
        return copy.deepcopy(row)

    def update_order(self, record_id: str, **fields: Any) -> None:
        self.updates.append({"id": record_id, **fields})
        self.rows[record_id].update(fields)


class FakeSessionClient:
    """Stands in for SessionClient; ``statuses`` feeds check_order_status."""

    def __init__(self, statuses: List[Any], order_id: Any = "A1") -> None:
        self.state = SessionState(session_id="s-1", user_id="u-1", login_token="tok")
        self.statuses = list(statuses)
        self.order_id = order_id
        self.submitted: Optional[Dict[str, Any]] = None
        self.priced_items: Optional[List[Dict[str, Any]]] = None
        self.status_calls = 0
        self.logged_in = False
        self.closed = False

    def login(self):
        self.logged_in = True

    def price_cart(self, items, location_id):
        from mobile_order.cart import PricedCart, build_cart_payload

        self.priced_items = list(items)
        cart_data = build_cart_payload(
            items, location_id=location_id, user_id="u-1", campus_id="4"
        )
        return PricedCart(pricing={"grand_total": "999"}, cart_data=cart_data)

    def submit_order(self, cart):
        self.submitted = cart
        return self.order_id

    def check_order_status(self, order_id):
        self.status_calls += 1
        if not self.statuses:
            return {"order": {}}
        value = self.statuses[0] if len(self.statuses) == 1 else self.statuses.pop(0)
        if isinstance(value, Exception):
            raise value
        return value

    def close(self):
        self.closed = True


async def no_sleep(_seconds: float) -> None:
    return None


@pytest.fixture
def token() -> Token:
    return Token(user_id="u-1", login_token="tok", session_id="s-1")
