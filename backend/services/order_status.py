"""Order status classification and the polling loop that tracks an order.

The upstream status check returns an ``order`` object whose timestamps and
flags reveal how far the kitchen has got. ``classify_order_status`` maps one
such object to an ``OrderStatus``; ``OrderStatusPoller`` repeats the check
until a terminal status is reached or the attempt budget runs out, handing
every transition to an async callback before it continues or raises.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional

import httpx

from mobile_order.errors import (
    MobileOrderError,
    OrderCancelledError,
    OrderTimedOut,
    TooManyPollingErrors,
)

POLL_INTERVAL_SECONDS = 10
MAX_POLL_ATTEMPTS = 30
MAX_CONSECUTIVE_POLL_ERRORS = 5


class OrderStatus(str, Enum):
    PENDING = "pending"
    RECEIVED = "received"
    PREPARING = "preparing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES


TERMINAL_STATUSES = frozenset(
    {OrderStatus.COMPLETED, OrderStatus.CANCELLED, OrderStatus.TIMEOUT, OrderStatus.ERROR}
)

_PROGRESS_RANK = {
    OrderStatus.PENDING: 0,
    OrderStatus.RECEIVED: 1,
    OrderStatus.PREPARING: 2,
}

TransitionCallback = Callable[["OrderStatus", Optional[str], Dict[str, Any]], Awaitable[None]]


def _present(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def _is_cancelled(value: Any) -> bool:
    try:
        return int(value) == 1
    except (TypeError, ValueError):
        return False


def classify_order_status(order: Optional[Mapping[str, Any]]) -> OrderStatus:
    if not order:
        return OrderStatus.PENDING
    if _is_cancelled(order.get("iscancelled")):
        return OrderStatus.CANCELLED
    if _present(order.get("barcode_token")):
        return OrderStatus.COMPLETED
    if _present(order.get("kitchen_datetime")):
        return OrderStatus.PREPARING
    if _present(order.get("printed_datetime")):
        return OrderStatus.RECEIVED
    return OrderStatus.PENDING


def extract_order(payload: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    order = payload.get("order") if isinstance(payload, Mapping) else None
    return order if isinstance(order, dict) else None


def extract_barcode(payload: Mapping[str, Any]) -> Optional[str]:
    order = extract_order(payload) or {}
    for candidate in (order.get("barcode_token"), payload.get("barcode_token")):
        if _present(candidate):
            return str(candidate).strip()
    return None


@dataclass
class PollResult:
    order_id: str
    status: OrderStatus
    barcode: Optional[str]
    attempts: int
    payload: Dict[str, Any] = field(default_factory=dict)


class OrderStatusPoller:
    """Track one submitted order until it completes, is cancelled or gives up.

    The first check happens immediately, later ones every ``interval_seconds``.
    Failed status calls count toward ``max_attempts`` and toward a separate
    consecutive-failure counter capped at ``max_consecutive_errors``.
    """

    def __init__(
        self,
        client,
        order_id: str,
        *,
        on_transition: Optional[TransitionCallback] = None,
        interval_seconds: float = POLL_INTERVAL_SECONDS,
        max_attempts: int = MAX_POLL_ATTEMPTS,
        max_consecutive_errors: int = MAX_CONSECUTIVE_POLL_ERRORS,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._client = client
        self.order_id = order_id
        self._on_transition = on_transition
        self._interval = interval_seconds
        self._max_attempts = max_attempts
        self._max_errors = max_consecutive_errors
        self._sleep = sleep
        self._logger = logger or logging.getLogger("mobile-order")

        self.status = OrderStatus.PENDING
        self.barcode: Optional[str] = None
        self.attempts = 0
        self.consecutive_errors = 0
        self.last_payload: Dict[str, Any] = {}

    async def _transition(self, status: OrderStatus, payload: Dict[str, Any]) -> None:
        self._logger.info(
            "Order %s: %s -> %s (attempt %s)",
            self.order_id,
            self.status.value,
            status.value,
            self.attempts,
        )
        self.status = status
        if self._on_transition is not None:
            await self._on_transition(status, self.barcode, payload)

    def _result(self) -> PollResult:
        return PollResult(
            order_id=self.order_id,
            status=self.status,
            barcode=self.barcode,
            attempts=self.attempts,
            payload=self.last_payload,
        )

    async def run(self) -> PollResult:
        while self.attempts < self._max_attempts:
            if self.attempts > 0:
                await self._sleep(self._interval)
            self.attempts += 1
            try:
                payload = await asyncio.to_thread(
                    self._client.check_order_status, self.order_id
                )
            except (httpx.HTTPError, MobileOrderError, ValueError) as exc:
                self.consecutive_errors += 1
                self._logger.warning(
                    "Error polling order %s (attempt %s): %s",
                    self.order_id,
                    self.attempts,
                    exc,
                )
                if self.consecutive_errors >= self._max_errors:
                    await self._transition(OrderStatus.ERROR, {"error": str(exc)})
                    raise TooManyPollingErrors(
                        self.order_id, self.consecutive_errors
                    ) from exc
                continue

            self.consecutive_errors = 0
            self.last_payload = payload
            self.barcode = extract_barcode(payload) or self.barcode
            observed = classify_order_status(extract_order(payload))

            if observed is OrderStatus.CANCELLED:
                await self._transition(observed, payload)
                raise OrderCancelledError(self.order_id)
            if observed is OrderStatus.COMPLETED:
                await self._transition(observed, payload)
                return self._result()
            # Progress never moves backwards even if upstream timestamps vanish.
            if _PROGRESS_RANK[observed] > _PROGRESS_RANK[self.status]:
                await self._transition(observed, payload)

        await self._transition(OrderStatus.TIMEOUT, self.last_payload)
        raise OrderTimedOut(self.order_id, self.attempts)
