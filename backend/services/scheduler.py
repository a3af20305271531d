import asyncio
import contextlib
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from config import settings
from mobile_order.errors import UserInactiveError
from repositories import scheduled_orders_repository
from services.order_processor import OrderProcessor, order_processor
from services.users_service import StoredUser, load_active_user

logger = logging.getLogger("mobile-order")

STOPPED_NOTE = "Scheduler stopped while the order was in progress"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> Optional[datetime]:
    if not value:
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_due(row: Dict[str, Any], now: datetime, lookahead: timedelta) -> bool:
    if row.get("status") != "scheduled":
        return False
    scheduled_time = parse_datetime(row.get("scheduled_time"))
    if scheduled_time is None:
        return False
    return scheduled_time <= now + lookahead


def append_note(existing: Optional[str], line: str) -> str:
    return f"{existing or ''}\n{line}"


class ScheduledOrderScheduler:
    """Background sweep that places scheduled orders once they fall due.

    Each sweep claims a due row (``scheduled`` -> ``processing``) with a
    conditional update before doing any work, so overlapping sweeps never
    place the same order twice.
    """

    def __init__(
        self,
        processor: Optional[OrderProcessor] = None,
        *,
        store: Any = scheduled_orders_repository,
        user_lookup: Callable[[str], Optional[StoredUser]] = load_active_user,
        interval_seconds: Optional[int] = None,
        lookahead_seconds: Optional[int] = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._processor = processor or order_processor
        self._store = store
        self._user_lookup = user_lookup
        self.interval_seconds = (
            settings.scheduler_interval_seconds if interval_seconds is None else interval_seconds
        )
        self.lookahead = timedelta(
            seconds=settings.scheduler_lookahead_seconds
            if lookahead_seconds is None
            else lookahead_seconds
        )
        self._clock = clock
        self._task: Optional[asyncio.Task] = None
        self._lock = asyncio.Lock()
        self._last_run_at: Optional[datetime] = None
        self._last_success_at: Optional[datetime] = None
        self._last_error: Optional[str] = None
        self._completed_count = 0
        self._failed_count = 0

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.is_running:
            logger.info("Scheduled order processor is already running")
            return
        logger.info("Starting scheduled order processor")
        self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if not self._task:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Scheduled order processor stopped")

    async def _run(self) -> None:
        while True:
            try:
                await self.run_once()
            except Exception as exc:  # pragma: no cover - background guard
                self._last_error = str(exc)
                logger.exception("Scheduled order sweep failed: %s", exc)
            await asyncio.sleep(self.interval_seconds)

    async def run_once(self) -> int:
        """Process every due scheduled order once; returns how many completed."""
        async with self._lock:
            now = self._clock()
            self._last_run_at = now
            rows = await asyncio.to_thread(self._store.fetch_due, now + self.lookahead)
            due = [row for row in rows if is_due(row, now, self.lookahead)]
            logger.info("Found %s scheduled orders to process", len(due))
            completed = 0
            for row in due:
                if await self._process_one(row):
                    completed += 1
            self._last_success_at = self._clock()
            self._last_error = None
            return completed

    async def _mark_failed(self, row: Dict[str, Any], reason: str) -> None:
        self._failed_count += 1
        try:
            await asyncio.to_thread(
                self._store.update_scheduled_order,
                str(row["id"]),
                status="failed",
                notes=append_note(row.get("notes"), f"Failed: {reason}"),
            )
        except Exception as exc:  # pragma: no cover - storage failure
            logger.exception("Could not mark scheduled order %s failed: %s", row["id"], exc)

    async def _process_one(self, row: Dict[str, Any]) -> bool:
        scheduled_id = str(row["id"])
        claimed = await asyncio.to_thread(
            self._store.transition_status,
            scheduled_id,
            from_status="scheduled",
            to_status="processing",
            processed_at=self._clock(),
        )
        if not claimed:
            logger.info("Scheduled order %s was already claimed", scheduled_id)
            return False

        logger.info("Processing scheduled order %s", scheduled_id)
        try:
            user = await asyncio.to_thread(self._user_lookup, str(row["user_id"]))
            if user is None:
                raise UserInactiveError(str(row["user_id"]))

            result = await self._processor.process_order(
                user.token,
                row.get("cart_items") or [],
                str(row["location_id"]),
                row["total"],
                row.get("special_request"),
                "scheduled",
                scheduled_id,
                user_email=user.email or row.get("user_email"),
            )
            await asyncio.to_thread(
                self._store.update_scheduled_order,
                scheduled_id,
                status="completed",
                actual_order_id=result.order_id,
                barcode=result.barcode,
                completed_at=self._clock(),
            )
        except asyncio.CancelledError:
            logger.warning("Scheduled order %s interrupted by shutdown", scheduled_id)
            await self._mark_failed(row, STOPPED_NOTE)
            raise
        except Exception as exc:  # one failed order must not stop the sweep
            logger.error("Error processing scheduled order %s: %s", scheduled_id, exc)
            await self._mark_failed(row, str(exc))
            return False

        self._completed_count += 1
        logger.info(
            "Scheduled order %s completed with order ID %s", scheduled_id, result.order_id
        )
        return True

    def get_status(self) -> Dict[str, Any]:
        return {
            "running": self.is_running,
            "interval_seconds": self.interval_seconds,
            "lookahead_seconds": int(self.lookahead.total_seconds()),
            "last_run_at": self._last_run_at,
            "last_success_at": self._last_success_at,
            "last_error": self._last_error,
            "completed_count": self._completed_count,
            "failed_count": self._failed_count,
        }


scheduled_order_scheduler = ScheduledOrderScheduler()
