import asyncio

import pytest

from conftest import FakeOrderStore, FakeSessionClient, no_sleep
from mobile_order import Credentials
from mobile_order.errors import (
    OrderCancelledError,
    OrderIdMissingError,
    OrderTimedOut,
    TooManyPollingErrors,
    UpstreamRequestError,
)
from services.order_processor import OrderProcessor

CART_ITEMS = [{"itemid": 1, "sectionid": 1, "options": [], "mealExApplied": False}]


def make_processor(client, store, **overrides):
    options = {
        "client_factory": lambda identity: client,
        "order_store": store,
        "poll_interval_seconds": 0,
        "max_poll_attempts": 30,
        "max_poll_errors": 5,
        "sleep": no_sleep,
    }
    options.update(overrides)
    return OrderProcessor(**options)


def test_completed_order_returns_barcode_and_tracks_one_record(token):
    client = FakeSessionClient(
        [
            {"order": {"printed_datetime": "t"}},
            {"order": {"kitchen_datetime": "t"}},
            {"order": {"barcode_token": "BC-1"}},
        ]
    )
    store = FakeOrderStore()
    processor = make_processor(client, store)

    result = asyncio.run(
        processor.process_order(token, CART_ITEMS, "6", 385, user_email="jane@scu.edu")
    )

    assert result.order_id == "A1"
    assert result.status == "completed"
    assert result.barcode == "BC-1"
    assert len(store.rows) == 1
    row = next(iter(store.rows.values()))
    assert result.database_id == row["id"]
    assert row["status"] == "completed"
    assert row["barcode"] == "BC-1"
    assert row["location_name"] == "Spice Market"
    assert row["user_id"] == "u-1"
    assert [update["status"] for update in store.updates] == [
        "received",
        "preparing",
        "completed",
    ]
    assert client.closed
    assert not client.logged_in


def test_submitted_total_is_the_callers_total(token):
    client = FakeSessionClient([{"order": {"barcode_token": "B"}}])
    processor = make_processor(client, FakeOrderStore())

    asyncio.run(processor.process_order(token, CART_ITEMS, "6", 385))

    assert client.submitted["grand_total"] == "385"
    assert client.submitted["subtotal"] == "385"


def test_credentials_identity_logs_in_first():
    client = FakeSessionClient([{"order": {"barcode_token": "B"}}])
    processor = make_processor(client, FakeOrderStore())

    asyncio.run(
        processor.process_order(Credentials(username="jdoe", password="pw"), CART_ITEMS, "6", 5)
    )

    assert client.logged_in


def test_polling_times_out_after_thirty_attempts(token):
    client = FakeSessionClient([{"order": {}}])
    store = FakeOrderStore()
    processor = make_processor(client, store)

    with pytest.raises(OrderTimedOut):
        asyncio.run(processor.process_order(token, CART_ITEMS, "6", 385))

    assert client.status_calls == 30
    assert len(store.rows) == 1
    row = next(iter(store.rows.values()))
    assert row["status"] == "timeout"
    assert row["completed_at"] is not None
    assert client.closed


def test_cancelled_order_is_marked_and_raised(token):
    client = FakeSessionClient([{"order": {"iscancelled": 1, "barcode_token": "X"}}])
    store = FakeOrderStore()
    processor = make_processor(client, store)

    with pytest.raises(OrderCancelledError):
        asyncio.run(processor.process_order(token, CART_ITEMS, "6", 385))

    assert next(iter(store.rows.values()))["status"] == "cancelled"


def test_repeated_poll_failures_mark_the_order_as_error(token):
    client = FakeSessionClient([UpstreamRequestError("processorderstatuscheck", "down")])
    store = FakeOrderStore()
    processor = make_processor(client, store)

    with pytest.raises(TooManyPollingErrors):
        asyncio.run(processor.process_order(token, CART_ITEMS, "6", 385))

    assert client.status_calls == 5
    assert next(iter(store.rows.values()))["status"] == "error"


def test_missing_order_id_creates_no_record(token):
    client = FakeSessionClient([], order_id=None)

    def submit_without_id(cart):
        raise OrderIdMissingError()

    client.submit_order = submit_without_id
    store = FakeOrderStore()
    processor = make_processor(client, store)

    with pytest.raises(OrderIdMissingError):
        asyncio.run(processor.process_order(token, CART_ITEMS, "6", 385))

    assert store.rows == {}
    assert client.closed


def test_cancelled_tracking_marks_the_record_as_error(token):
    client = FakeSessionClient([{"order": {"printed_datetime": "t"}}])
    store = FakeOrderStore()
    processor = make_processor(
        client, store, sleep=asyncio.sleep, poll_interval_seconds=3600
    )

    async def scenario():
        task = asyncio.create_task(
            processor.process_order(token, CART_ITEMS, "6", 385)
        )
        for _ in range(200):
            if client.status_calls:
                break
            await asyncio.sleep(0.01)
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert len(store.rows) == 1
    assert next(iter(store.rows.values()))["status"] == "error"
    assert client.closed
