"""Unit tests for the domain event base class."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime
from uuid import UUID, uuid4

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.events import OrderStatusChanged

pytestmark = pytest.mark.unit


def test_event_name_is_derived_from_class():
    event = OrderStatusChanged(aggregate_id=uuid4())

    assert event.event_name == "OrderStatusChanged"
    assert isinstance(event.event_id, UUID)
    assert isinstance(event.occurred_on, datetime)
    assert event.occurred_on.tzinfo is not None


def test_events_are_immutable():
    event = OrderStatusChanged(aggregate_id=uuid4())

    with pytest.raises(FrozenInstanceError):
        event.new_status = "shipped"


def test_every_event_gets_its_own_id():
    aggregate_id = uuid4()

    first = OrderStatusChanged(aggregate_id=aggregate_id)
    second = OrderStatusChanged(aggregate_id=aggregate_id)

    assert first.event_id != second.event_id


def test_payload_is_json_friendly():
    aggregate_id = uuid4()
    event = OrderStatusChanged(
        aggregate_id=aggregate_id,
        old_status=OrderStatus.SHIPPED,
        new_status=OrderStatus.DELIVERED,
    )

    payload = event.to_payload()

    assert payload["aggregate_id"] == str(aggregate_id)
    assert payload["event_name"] == "OrderStatusChanged"
    assert payload["old_status"] == "shipped"
    assert payload["new_status"] == "delivered"
    assert isinstance(payload["occurred_on"], str)
