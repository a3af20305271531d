import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from mobile_order import Token
from schemas import ScheduledOrderCreate
from services import scheduled_orders_service
from services.users_service import StoredUser

USER = StoredUser(
    user_id="u-1",
    name="Jane",
    email="jane@scu.edu",
    token=Token(user_id="u-1", login_token="tok", session_id="s-1"),
)


def _payload(scheduled_time: datetime) -> ScheduledOrderCreate:
    return ScheduledOrderCreate(
        location_id="13",
        cart_items=[{"itemid": 1, "sectionid": 1}],
        total=12.5,
        scheduled_time=scheduled_time,
    )


def test_scheduling_in_the_past_is_rejected(monkeypatch):
    inserted = []
    monkeypatch.setattr(
        scheduled_orders_service, "insert_scheduled_order", inserted.append
    )
    past = datetime.now(timezone.utc) - timedelta(minutes=1)

    with pytest.raises(ValueError):
        asyncio.run(scheduled_orders_service.create_scheduled_order(USER, _payload(past)))
    assert inserted == []


def test_scheduling_in_the_future_stores_a_scheduled_row(monkeypatch):
    def fake_insert(record):
        return {"id": "sched-1", "created_at": None, **record}

    monkeypatch.setattr(scheduled_orders_service, "insert_scheduled_order", fake_insert)
    future = datetime.now(timezone.utc) + timedelta(hours=2)

    record = asyncio.run(
        scheduled_orders_service.create_scheduled_order(USER, _payload(future))
    )

    assert record.id == "sched-1"
    assert record.status == "scheduled"
    assert record.location_name == "Fire Grill"
    assert record.user_email == "jane@scu.edu"


def _existing(status: str, notes: str = "Pick up at noon"):
    return {
        "id": "sched-1",
        "user_id": "u-1",
        "location_id": "13",
        "cart_items": [],
        "total": 12.5,
        "scheduled_time": "2026-03-02T12:00:00+00:00",
        "status": status,
        "notes": notes,
    }


def test_cancel_appends_note_and_uses_conditional_update(monkeypatch):
    calls = []

    def fake_transition(scheduled_id, *, from_status, to_status, **fields):
        calls.append((scheduled_id, from_status, to_status))
        return {**_existing(to_status), **fields}

    monkeypatch.setattr(
        scheduled_orders_service,
        "fetch_user_scheduled_order",
        lambda user_id, scheduled_id: _existing("scheduled"),
    )
    monkeypatch.setattr(scheduled_orders_service, "transition_status", fake_transition)

    record = asyncio.run(scheduled_orders_service.cancel_scheduled_order("u-1", "sched-1"))

    assert calls == [("sched-1", "scheduled", "cancelled")]
    assert record.status == "cancelled"
    assert record.notes.startswith("Pick up at noon\nCancelled by user at ")


def test_cancel_rejects_orders_past_scheduled(monkeypatch):
    monkeypatch.setattr(
        scheduled_orders_service,
        "fetch_user_scheduled_order",
        lambda user_id, scheduled_id: _existing("processing"),
    )

    with pytest.raises(ValueError):
        asyncio.run(scheduled_orders_service.cancel_scheduled_order("u-1", "sched-1"))


def test_cancel_unknown_order_raises_lookup_error(monkeypatch):
    monkeypatch.setattr(
        scheduled_orders_service,
        "fetch_user_scheduled_order",
        lambda user_id, scheduled_id: None,
    )

    with pytest.raises(LookupError):
        asyncio.run(scheduled_orders_service.cancel_scheduled_order("u-1", "missing"))
