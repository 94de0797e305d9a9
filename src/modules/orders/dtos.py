"""Order DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer (DRF Serializers)
and the Service layer.  DTOs are immutable (``frozen=True``).

Field names are snake_case in Python and camelCase on the wire: every
DTO accepts either spelling on input and ``model_dump(by_alias=True)``
emits camelCase.

- ``UpdateOrderStatusDTO``: payload of a status transition.
- ``UpdateOrderNfeDTO``: payload of an NF-e correction.
- ``OrderFiltersDTO``: optional filters and paging for status listings.
- ``RequesterDTO``: resolved identity of the caller.
- ``TimelineEntryDTO``: one point of an order's history.
- ``OrderStatusStatsDTO``: aggregate report over all orders.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from modules.companies.models import CompanyRole
from modules.orders.constants import DEFAULT_PAGE_SIZE, OrderStatus
from modules.orders.validators import is_valid_nfe_access_key

if TYPE_CHECKING:
    from modules.orders.models import Order

_http_url = TypeAdapter(HttpUrl)

INVALID_NFE_KEY_MESSAGE = (
    "Invalid NF-e access key: expected 44 digits with a valid check digit."
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class _NfeFieldsMixin(_CamelModel):
    nfe_access_key: Optional[str] = None
    nfe_url: Optional[str] = None

    @field_validator("nfe_access_key")
    @classmethod
    def nfe_access_key_must_be_valid(cls, v: Optional[str]) -> Optional[str]:
        if v and not is_valid_nfe_access_key(v):
            raise ValueError(INVALID_NFE_KEY_MESSAGE)
        return v

    @field_validator("nfe_url")
    @classmethod
    def nfe_url_must_be_http(cls, v: Optional[str]) -> Optional[str]:
        if v:
            try:
                _http_url.validate_python(v)
            except ValidationError:
                raise ValueError("NF-e URL must be a valid http(s) URL.") from None
        return v


# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class UpdateOrderStatusDTO(_NfeFieldsMixin):
    """Immutable DTO for a status transition request.

    Only ``status`` is mandatory here.  Whether the shipment fields are
    required depends on the transition and is checked by the service,
    since a DTO cannot know the order's current status.
    """

    status: OrderStatus
    tracking_number: Optional[str] = None
    estimated_delivery_date: Optional[datetime] = None
    notes: Optional[str] = None

    @classmethod
    def alias_for(cls, field_name: str) -> str:
        """Wire name of *field_name* (e.g. ``trackingNumber``)."""
        return cls.model_fields[field_name].alias or field_name


class UpdateOrderNfeDTO(_NfeFieldsMixin):
    """Immutable DTO for an NF-e correction.

    Both fields are optional; an empty correction is rejected by the
    service so that the error surfaces with the domain taxonomy.
    """

    @property
    def is_empty(self) -> bool:
        return not self.nfe_access_key and not self.nfe_url


class OrderFiltersDTO(_CamelModel):
    """Immutable DTO for status listings.

    ``company_id`` matches the supplier, ``buyer_id`` the company that
    placed the quotation.  The creation-date range applies only when
    both bounds are supplied.
    """

    company_id: Optional[UUID] = None
    buyer_id: Optional[UUID] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1)
    offset: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def date_range_must_be_ordered(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate.")
        return self

    @property
    def created_at_range(self) -> Optional[Tuple[datetime, datetime]]:
        if self.start_date and self.end_date:
            return (self.start_date, self.end_date)
        return None


class RequesterDTO(_CamelModel):
    """Identity of the caller, resolved by the transport layer."""

    company_id: UUID
    role: CompanyRole

    @property
    def is_admin(self) -> bool:
        return self.role == CompanyRole.ADMIN


# ---------------------------------------------------------------------------
# Output DTOs
# ---------------------------------------------------------------------------


class TimelineEntryDTO(_CamelModel):
    status: OrderStatus
    description: str
    date: datetime
    can_transition_to: List[OrderStatus]


class OrderStatusStatsDTO(_CamelModel):
    """Immutable DTO for the admin status report.

    ``status_counts`` always carries one key per ``OrderStatus``.
    ``average_processing_time`` is in days.
    """

    status_counts: Dict[str, int]
    total_orders: int
    average_processing_time: float


@dataclass(frozen=True)
class OrderHistory:
    order: Order
    timeline: List[TimelineEntryDTO]


@dataclass(frozen=True)
class OrderPage:
    orders: List[Order]
    total: int
