"""Unit tests for the Order status state machine.

Covers:
- The six allowed edges and nothing else (self-loops, reverse edges,
  skips and exits from terminal states are all rejected).
- Ordering of ``get_valid_next_statuses``.
- Status descriptions.
- Custom transition tables and hooks.
"""

from __future__ import annotations

from itertools import product

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.state_machine import (
    STATUS_TRANSITIONS,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    OrderStateMachine,
    StatusTransition,
    TransitionHook,
    get_status_description,
    get_valid_next_statuses,
    is_valid_transition,
)

pytestmark = pytest.mark.unit

ALLOWED_EDGES = {
    (OrderStatus.PENDING, OrderStatus.PROCESSING),
    (OrderStatus.PENDING, OrderStatus.CANCELLED),
    (OrderStatus.PROCESSING, OrderStatus.SHIPPED),
    (OrderStatus.PROCESSING, OrderStatus.CANCELLED),
    (OrderStatus.SHIPPED, OrderStatus.DELIVERED),
    (OrderStatus.SHIPPED, OrderStatus.CANCELLED),
}


class TestIsValidTransition:
    @pytest.mark.parametrize("source,target", sorted(ALLOWED_EDGES))
    def test_allowed_edges(self, source, target):
        assert is_valid_transition(source, target) is True

    @pytest.mark.parametrize(
        "source,target",
        [
            pair
            for pair in product(OrderStatus, OrderStatus)
            if pair not in ALLOWED_EDGES
        ],
    )
    def test_every_other_pair_is_rejected(self, source, target):
        assert is_valid_transition(source, target) is False

    def test_no_edge_is_bidirectional(self):
        for source, target in ALLOWED_EDGES:
            assert not is_valid_transition(target, source)

    def test_plain_strings_are_accepted(self):
        assert is_valid_transition("pending", "processing") is True
        assert is_valid_transition("delivered", "pending") is False

    def test_unknown_status_is_rejected(self):
        assert is_valid_transition("archived", "pending") is False
        assert is_valid_transition("pending", "archived") is False


class TestValidNextStatuses:
    def test_forward_edge_first_then_cancelled(self):
        assert get_valid_next_statuses(OrderStatus.PENDING) == [
            OrderStatus.PROCESSING,
            OrderStatus.CANCELLED,
        ]
        assert get_valid_next_statuses(OrderStatus.PROCESSING) == [
            OrderStatus.SHIPPED,
            OrderStatus.CANCELLED,
        ]
        assert get_valid_next_statuses(OrderStatus.SHIPPED) == [
            OrderStatus.DELIVERED,
            OrderStatus.CANCELLED,
        ]

    @pytest.mark.parametrize("status", ["delivered", "cancelled"])
    def test_terminal_states_have_no_successors(self, status):
        assert get_valid_next_statuses(status) == []

    def test_terminal_states_constant(self):
        assert TERMINAL_STATES == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}

    def test_returned_list_is_a_copy(self):
        statuses = get_valid_next_statuses(OrderStatus.PENDING)
        statuses.append(OrderStatus.DELIVERED)
        assert get_valid_next_statuses(OrderStatus.PENDING) == [
            OrderStatus.PROCESSING,
            OrderStatus.CANCELLED,
        ]

    def test_adjacency_is_read_only(self):
        with pytest.raises(TypeError):
            VALID_TRANSITIONS[OrderStatus.DELIVERED] = (OrderStatus.PENDING,)


class TestStatusDescription:
    @pytest.mark.parametrize(
        "status,description",
        [
            ("pending", "Order placed, awaiting processing"),
            ("processing", "Order is being prepared"),
            ("shipped", "Order has been shipped"),
            ("delivered", "Order has been delivered"),
            ("cancelled", "Order has been cancelled"),
        ],
    )
    def test_every_status_has_a_description(self, status, description):
        assert get_status_description(status) == description

    def test_unknown_status_raises(self):
        with pytest.raises(ValueError):
            get_status_description("archived")


class TestTransitionTable:
    def test_only_shipping_edge_declares_required_fields(self):
        required = {
            (t.source, t.target): t.required_fields
            for t in STATUS_TRANSITIONS
            if t.required_fields
        }
        assert required == {
            (OrderStatus.PROCESSING, OrderStatus.SHIPPED): (
                "tracking_number",
                "nfe_access_key",
            )
        }

    def test_find_returns_transition_record(self):
        machine = OrderStateMachine(STATUS_TRANSITIONS)
        transition = machine.find(OrderStatus.PROCESSING, OrderStatus.SHIPPED)
        assert transition is not None
        assert transition.target == OrderStatus.SHIPPED
        assert machine.find(OrderStatus.DELIVERED, OrderStatus.PENDING) is None

    def test_duplicate_edges_are_rejected(self):
        edge = StatusTransition(OrderStatus.PENDING, OrderStatus.PROCESSING)
        with pytest.raises(ValueError, match="Duplicate transition"):
            OrderStateMachine([edge, edge])

    def test_custom_table_with_hook(self):
        calls = []

        class RecordingHook(TransitionHook):
            def run(self, order, update):
                calls.append((order, update))

        machine = OrderStateMachine(
            [
                StatusTransition(
                    OrderStatus.PENDING, OrderStatus.SHIPPED, hook=RecordingHook()
                )
            ]
        )

        assert machine.is_valid_transition(OrderStatus.PENDING, OrderStatus.SHIPPED)
        assert machine.is_terminal(OrderStatus.PROCESSING)
        machine.find(OrderStatus.PENDING, OrderStatus.SHIPPED).hook.run("o", "u")
        assert calls == [("o", "u")]

    def test_default_hook_is_a_no_op(self):
        assert TransitionHook().run(None, None) is None

