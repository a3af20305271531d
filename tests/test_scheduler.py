import asyncio
import copy
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

from mobile_order import Token
from schemas import PlacedOrderResponse
from services.scheduler import ScheduledOrderScheduler, is_due, parse_datetime
from services.users_service import StoredUser

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


def scheduled_row(row_id: str, minutes_ahead: int, **fields: Any) -> Dict[str, Any]:
    row = {
        "id": row_id,
        "user_id": "u-1",
        "user_email": "jane@scu.edu",
        "location_id": "6",
        "cart_items": [{"itemid": 1, "sectionid": 1}],
        "total": 385,
        "special_request": "",
        "scheduled_time": (NOW + timedelta(minutes=minutes_ahead)).isoformat(),
        "status": "scheduled",
        "notes": "",
    }
    row.update(fields)
    return row


class FakeScheduledStore:
    def __init__(self, rows: List[Dict[str, Any]]) -> None:
        self.rows = {row["id"]: copy.deepcopy(row) for row in rows}
        self.stolen: set = set()

    def fetch_due(self, until: datetime) -> List[Dict[str, Any]]:
        return [
            copy.deepcopy(row)
            for row in self.rows.values()
            if row["status"] == "scheduled" and parse_datetime(row["scheduled_time"]) <= until
        ]

    def transition_status(
        self, scheduled_id: str, *, from_status: str, to_status: str, **fields: Any
    ) -> Optional[Dict[str, Any]]:
        row = self.rows[scheduled_id]
        if scheduled_id in self.stolen or row["status"] != from_status:
            return None
        row.update(status=to_status, **fields)
        return copy.deepcopy(row)

    def update_scheduled_order(self, scheduled_id: str, **fields: Any) -> None:
        self.rows[scheduled_id].update(
            {key: value for key, value in fields.items() if value is not None}
        )


class FakeProcessor:
    def __init__(self, failures: Optional[Dict[str, Exception]] = None) -> None:
        self.failures = failures or {}
        self.calls: List[Dict[str, Any]] = []

    async def process_order(
        self,
        identity,
        cart_items,
        location_id,
        total,
        special_request=None,
        order_type="direct",
        related_id=None,
        *,
        user_email=None,
    ) -> PlacedOrderResponse:
        self.calls.append(
            {
                "identity": identity,
                "location_id": location_id,
                "total": total,
                "order_type": order_type,
                "related_id": related_id,
                "user_email": user_email,
            }
        )
        if related_id in self.failures:
            raise self.failures[related_id]
        return PlacedOrderResponse(
            order_id=f"order-{related_id}",
            status="completed",
            barcode=f"BC-{related_id}",
            message="ok",
        )


def active_user(user_id: str) -> StoredUser:
    return StoredUser(
        user_id=user_id,
        name="Jane",
        email="jane@scu.edu",
        token=Token(user_id=user_id, login_token="tok", session_id="s-1"),
    )


def make_scheduler(store, processor, user_lookup=active_user) -> ScheduledOrderScheduler:
    return ScheduledOrderScheduler(
        processor,
        store=store,
        user_lookup=user_lookup,
        interval_seconds=60,
        lookahead_seconds=300,
        clock=lambda: NOW,
    )


def test_due_window_includes_four_minutes_but_not_ten():
    lookahead = timedelta(minutes=5)
    assert is_due(scheduled_row("a", 4), NOW, lookahead)
    assert not is_due(scheduled_row("b", 10), NOW, lookahead)
    assert is_due(scheduled_row("c", -30), NOW, lookahead)
    assert not is_due(scheduled_row("d", 1, status="processing"), NOW, lookahead)


def test_sweep_processes_only_orders_in_the_window():
    store = FakeScheduledStore([scheduled_row("soon", 4), scheduled_row("later", 10)])
    processor = FakeProcessor()
    scheduler = make_scheduler(store, processor)

    completed = asyncio.run(scheduler.run_once())

    assert completed == 1
    assert [call["related_id"] for call in processor.calls] == ["soon"]
    assert processor.calls[0]["order_type"] == "scheduled"
    assert processor.calls[0]["identity"].login_token == "tok"
    soon = store.rows["soon"]
    assert soon["status"] == "completed"
    assert soon["actual_order_id"] == "order-soon"
    assert soon["barcode"] == "BC-soon"
    assert soon["processed_at"] == NOW
    assert store.rows["later"]["status"] == "scheduled"


def test_rows_claimed_elsewhere_are_skipped():
    store = FakeScheduledStore([scheduled_row("taken", 1)])
    store.stolen.add("taken")
    processor = FakeProcessor()

    completed = asyncio.run(make_scheduler(store, processor).run_once())

    assert completed == 0
    assert processor.calls == []


def test_missing_user_marks_order_failed_with_note():
    store = FakeScheduledStore([scheduled_row("orphan", 2, notes="Lunch")])
    processor = FakeProcessor()
    scheduler = make_scheduler(store, processor, user_lookup=lambda user_id: None)

    asyncio.run(scheduler.run_once())

    row = store.rows["orphan"]
    assert row["status"] == "failed"
    assert row["notes"] == "Lunch\nFailed: User not found or inactive"
    assert processor.calls == []


def test_one_failure_does_not_stop_the_sweep():
    store = FakeScheduledStore(
        [scheduled_row("bad", 1, notes="first note"), scheduled_row("good", 2)]
    )
    processor = FakeProcessor({"bad": RuntimeError("Order A1 was cancelled")})
    scheduler = make_scheduler(store, processor)

    completed = asyncio.run(scheduler.run_once())

    assert completed == 1
    assert store.rows["bad"]["status"] == "failed"
    assert store.rows["bad"]["notes"] == "first note\nFailed: Order A1 was cancelled"
    assert store.rows["good"]["status"] == "completed"
    status = scheduler.get_status()
    assert status["completed_count"] == 1
    assert status["failed_count"] == 1
    assert status["last_run_at"] == NOW


def test_start_is_idempotent_and_stop_cancels():
    store = FakeScheduledStore([])
    scheduler = make_scheduler(store, FakeProcessor())

    async def scenario():
        await scheduler.start()
        first = scheduler._task
        await scheduler.start()
        assert scheduler._task is first
        assert scheduler.is_running
        await asyncio.sleep(0)
        await scheduler.stop()
        assert not scheduler.is_running

    asyncio.run(scenario())
    assert scheduler.get_status()["running"] is False


def test_start_runs_a_sweep_immediately():
    store = FakeScheduledStore([scheduled_row("due", 1)])
    scheduler = make_scheduler(store, FakeProcessor())

    async def scenario():
        await scheduler.start()
        for _ in range(200):
            if store.rows["due"]["status"] == "completed":
                break
            await asyncio.sleep(0.01)
        await scheduler.stop()

    asyncio.run(scenario())

    assert store.rows["due"]["status"] == "completed"
    assert scheduler.get_status()["completed_count"] == 1


class BlockingProcessor(FakeProcessor):
    def __init__(self) -> None:
        super().__init__()
        self.started = None

    async def process_order(self, *args, **kwargs):
        self.started.set()
        await asyncio.sleep(3600)


def test_stopping_mid_order_marks_the_claimed_row_failed():
    store = FakeScheduledStore([scheduled_row("busy", 1, notes="Dinner")])
    processor = BlockingProcessor()
    scheduler = make_scheduler(store, processor)

    async def scenario():
        processor.started = asyncio.Event()
        await scheduler.start()
        await asyncio.wait_for(processor.started.wait(), timeout=5)
        await scheduler.stop()

    asyncio.run(scenario())

    row = store.rows["busy"]
    assert row["status"] == "failed"
    assert row["notes"] == (
        "Dinner\nFailed: Scheduler stopped while the order was in progress"
    )
    assert not scheduler.is_running
