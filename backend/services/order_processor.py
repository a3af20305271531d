import asyncio
import logging
from datetime import datetime, timezone
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Sequence

from config import settings
from mobile_order import Credentials, Identity, SessionClient, build_order_cart
from mobile_order.constants import LOCATION_NAMES
from repositories import orders_repository
from schemas import PlacedOrderResponse
from services.order_status import TERMINAL_STATUSES, OrderStatus, OrderStatusPoller
from services.users_service import open_session

logger = logging.getLogger("mobile-order")


def location_name(location_id: str) -> str:
    return LOCATION_NAMES.get(str(location_id), "Restaurant")


class OrderProcessor:
    """Price, submit and track one order, keeping a single Order record current.

    ``client_factory`` builds a ``SessionClient`` for an identity and
    ``order_store`` provides ``insert_order(record)`` and
    ``update_order(record_id, **fields)``; both default to the live
    implementations.
    """

    def __init__(
        self,
        *,
        client_factory: Callable[[Identity], SessionClient] = open_session,
        order_store: Any = orders_repository,
        poll_interval_seconds: Optional[float] = None,
        max_poll_attempts: Optional[int] = None,
        max_poll_errors: Optional[int] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._client_factory = client_factory
        self._orders = order_store
        self._poll_interval = (
            settings.order_poll_interval_seconds
            if poll_interval_seconds is None
            else poll_interval_seconds
        )
        self._max_attempts = (
            settings.order_poll_max_attempts if max_poll_attempts is None else max_poll_attempts
        )
        self._max_errors = (
            settings.order_poll_max_errors if max_poll_errors is None else max_poll_errors
        )
        self._sleep = sleep

    async def _persist_transition(
        self,
        record_id: str,
        status: OrderStatus,
        barcode: Optional[str],
        payload: Dict[str, Any],
    ) -> None:
        fields: Dict[str, Any] = {"status": status.value}
        if barcode:
            fields["barcode"] = barcode
        if status in TERMINAL_STATUSES:
            fields["completed_at"] = datetime.now(timezone.utc)
        await asyncio.to_thread(self._orders.update_order, record_id, **fields)

    async def process_order(
        self,
        identity: Identity,
        cart_items: Sequence[Mapping[str, Any]],
        location_id: str,
        total: Any,
        special_request: Optional[str] = None,
        order_type: str = "direct",
        related_id: Optional[str] = None,
        *,
        user_email: Optional[str] = None,
    ) -> PlacedOrderResponse:
        client = self._client_factory(identity)
        try:
            if isinstance(identity, Credentials):
                await asyncio.to_thread(client.login)

            priced = await asyncio.to_thread(client.price_cart, cart_items, location_id)
            order_cart = build_order_cart(priced, total, special_request)
            order_id = await asyncio.to_thread(client.submit_order, order_cart)
            logger.info("Order %s processed, creating database record", order_id)

            items: List[Dict[str, Any]] = [dict(item) for item in cart_items]
            record = await asyncio.to_thread(
                self._orders.insert_order,
                {
                    "user_id": client.state.user_id,
                    "user_email": user_email,
                    "order_id": order_id,
                    "location_id": str(location_id),
                    "location_name": location_name(location_id),
                    "status": OrderStatus.PENDING.value,
                    "items": items,
                    "order_total": total,
                    "special_comment": special_request or "",
                    "order_type": order_type,
                    "related_id": related_id,
                },
            )
            record_id = str(record["id"])

            poller = OrderStatusPoller(
                client,
                order_id,
                on_transition=partial(self._persist_transition, record_id),
                interval_seconds=self._poll_interval,
                max_attempts=self._max_attempts,
                max_consecutive_errors=self._max_errors,
                sleep=self._sleep,
                logger=logger,
            )
            try:
                result = await poller.run()
            except asyncio.CancelledError:
                if not poller.status.is_terminal:
                    await self._persist_transition(
                        record_id, OrderStatus.ERROR, poller.barcode, {}
                    )
                raise
        finally:
            client.close()

        return PlacedOrderResponse(
            order_id=order_id,
            status=result.status.value,
            barcode=result.barcode,
            message=f"Order completed with barcode: {result.barcode}",
            order_details=result.payload,
            database_id=record_id,
        )


order_processor = OrderProcessor()
