"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

from shared.domain.events import DomainEvent


@dataclass(frozen=True)
class OrderStatusChanged(DomainEvent):
    """Raised after a status transition has been persisted."""

    old_status: str = ""
    new_status: str = ""


@dataclass(frozen=True)
class OrderNfeCorrected(DomainEvent):
    """Raised after NF-e data of a shipped order has been corrected."""

    fields: Tuple[str, ...] = field(default_factory=tuple)
