"""Estimated delivery date for a shipment."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional

from django.utils import timezone

from modules.orders.constants import (
    DEFAULT_SHIPPING_METHOD,
    DELIVERY_DAYS,
    ShippingMethod,
)

SATURDAY = 5
SUNDAY = 6


def calculate_estimated_delivery(
    method: str = DEFAULT_SHIPPING_METHOD,
    from_date: Optional[datetime] = None,
) -> datetime:
    """Add the method's calendar-day offset, then push weekends to Monday.

    The weekend adjustment is a single pass applied after the offset: a
    Sunday gains one day and a Saturday gains two.  Neither rule is
    re-evaluated after the other has fired.

    ``from_date`` defaults to the current local time.

    Raises:
        ValueError: unknown shipping method.
    """
    start = from_date if from_date is not None else timezone.localtime()
    estimated = start + timedelta(days=DELIVERY_DAYS[ShippingMethod(method)])

    if estimated.weekday() == SUNDAY:
        estimated += timedelta(days=1)
    if estimated.weekday() == SATURDAY:
        estimated += timedelta(days=2)

    return estimated
