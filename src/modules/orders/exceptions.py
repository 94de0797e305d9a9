"""Order domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer (Views) catches these and translates them into
appropriate HTTP responses.
"""

from __future__ import annotations

from typing import Optional


class OrderDomainError(Exception):
    """Base class for every order lifecycle failure."""


class OrderNotFound(OrderDomainError):
    """The requested order does not exist."""


class InvalidStatusTransition(OrderDomainError):
    """The requested status is not reachable from the current one."""


class MissingRequiredField(OrderDomainError):
    """The transition declares a field the update payload did not carry."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class OrderAccessDenied(OrderDomainError):
    """The requester neither owns the order nor is an administrator."""


class InvalidOrderState(OrderDomainError):
    """The operation is not allowed in the order's current status."""


class EmptyNfePatch(OrderDomainError):
    """An NF-e correction carried neither an access key nor a URL."""
