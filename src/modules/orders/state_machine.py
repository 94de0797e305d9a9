"""Order status state machine.

Transitions are data: each allowed edge is a ``StatusTransition`` record
carrying the payload fields it requires and the business-logic hook to
run once the new status has been persisted.  ``OrderStateMachine`` indexes
a transition table; the module-level helpers answer questions against
the default table.

Default graph::

    pending    -> processing, cancelled
    processing -> shipped, cancelled
    shipped    -> delivered, cancelled
    delivered  -> (terminal)
    cancelled  -> (terminal)

``processing -> shipped`` requires ``tracking_number`` and
``nfe_access_key`` in the update payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Iterable, List, Mapping, Optional, Tuple

from modules.orders.constants import STATUS_DESCRIPTIONS, OrderStatus

if TYPE_CHECKING:
    from modules.orders.dtos import UpdateOrderStatusDTO
    from modules.orders.models import Order


class TransitionHook:
    """Business rule attached to a single transition.

    Runs after the status patch has been written, with the order as it
    was loaded and the update that moved it.  The base class does
    nothing; subclass and override ``run`` to plug a rule into a
    transition table.
    """

    def run(self, order: Order, update: UpdateOrderStatusDTO) -> None:
        return None


NO_HOOK = TransitionHook()


@dataclass(frozen=True)
class StatusTransition:
    source: OrderStatus
    target: OrderStatus
    required_fields: Tuple[str, ...] = ()
    hook: TransitionHook = field(default=NO_HOOK, compare=False)


# Declared order matters: it is the order of ``get_valid_next_statuses``
# (forward edge first, cancellation last) and of required-field checks.
STATUS_TRANSITIONS: Tuple[StatusTransition, ...] = (
    StatusTransition(OrderStatus.PENDING, OrderStatus.PROCESSING),
    StatusTransition(OrderStatus.PENDING, OrderStatus.CANCELLED),
    StatusTransition(
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        required_fields=("tracking_number", "nfe_access_key"),
    ),
    StatusTransition(OrderStatus.PROCESSING, OrderStatus.CANCELLED),
    StatusTransition(OrderStatus.SHIPPED, OrderStatus.DELIVERED),
    StatusTransition(OrderStatus.SHIPPED, OrderStatus.CANCELLED),
)


class OrderStateMachine:
    """Read-only index over a transition table."""

    def __init__(self, transitions: Iterable[StatusTransition]) -> None:
        edges = {}
        adjacency = {status: [] for status in OrderStatus}
        for transition in transitions:
            key = (transition.source, transition.target)
            if key in edges:
                raise ValueError(
                    f"Duplicate transition {transition.source} -> {transition.target}."
                )
            edges[key] = transition
            adjacency[transition.source].append(transition.target)

        self._edges: Mapping[Tuple[str, str], StatusTransition] = MappingProxyType(
            edges
        )
        self.adjacency: Mapping[OrderStatus, Tuple[OrderStatus, ...]] = (
            MappingProxyType({s: tuple(t) for s, t in adjacency.items()})
        )

    def is_valid_transition(self, source: str, target: str) -> bool:
        return target in self.adjacency.get(source, ())

    def get_valid_next_statuses(self, status: str) -> List[OrderStatus]:
        return list(self.adjacency.get(status, ()))

    def is_terminal(self, status: str) -> bool:
        return not self.adjacency.get(status, ())

    def find(self, source: str, target: str) -> Optional[StatusTransition]:
        """Return the transition record for an edge, or ``None``."""
        return self._edges.get((source, target))


default_state_machine = OrderStateMachine(STATUS_TRANSITIONS)

VALID_TRANSITIONS = default_state_machine.adjacency

TERMINAL_STATES = frozenset(
    status for status in OrderStatus if default_state_machine.is_terminal(status)
)


def is_valid_transition(source: str, target: str) -> bool:
    """Return ``True`` iff ``source -> target`` is an edge of the graph."""
    return default_state_machine.is_valid_transition(source, target)


def get_valid_next_statuses(status: str) -> List[OrderStatus]:
    """Statuses reachable from *status* in one step; ``[]`` when terminal."""
    return default_state_machine.get_valid_next_statuses(status)


def get_status_description(status: str) -> str:
    """Human-readable timeline text for *status*.

    Raises:
        ValueError: *status* is not an ``OrderStatus`` value.
    """
    return STATUS_DESCRIPTIONS[OrderStatus(status)]
