"""Order DRF serializers for API input/output.

The serializer operates at the Interface layer (API Views).
Business logic lives in the Service Layer, which receives
Pydantic DTOs from ``dtos.py``.

Wire names are camelCase; every input field declares ``source`` so that
``validated_data`` comes out in the snake_case the DTOs expect.
"""

from __future__ import annotations

from django.core.validators import URLValidator
from rest_framework import serializers

from modules.companies.models import Company
from modules.orders.constants import OrderStatus
from modules.orders.dtos import INVALID_NFE_KEY_MESSAGE
from modules.orders.models import Order
from modules.orders.validators import is_valid_nfe_access_key
from modules.quotations.models import Quotation

MAX_PAGE_LIMIT = 100

NFE_URL_VALIDATOR = URLValidator(
    schemes=["http", "https"], message="NF-e URL must be a valid http(s) URL."
)


def validate_nfe_access_key(value: str) -> str:
    if value and not is_valid_nfe_access_key(value):
        raise serializers.ValidationError(INVALID_NFE_KEY_MESSAGE)
    return value


class _NfeFieldsSerializer(serializers.Serializer):
    nfeAccessKey = serializers.CharField(
        source="nfe_access_key",
        required=False,
        allow_blank=True,
        allow_null=True,
        validators=[validate_nfe_access_key],
    )
    nfeUrl = serializers.URLField(
        source="nfe_url",
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=500,
        validators=[NFE_URL_VALIDATOR],
    )


# ---------------------------------------------------------------------------
# Input Serializers
# ---------------------------------------------------------------------------


class UpdateOrderStatusSerializer(_NfeFieldsSerializer):
    """Validates a status transition request payload."""

    status = serializers.ChoiceField(choices=OrderStatus.choices)
    trackingNumber = serializers.CharField(
        source="tracking_number",
        required=False,
        allow_blank=True,
        allow_null=True,
        max_length=100,
    )
    estimatedDeliveryDate = serializers.DateTimeField(
        source="estimated_delivery_date",
        required=False,
        allow_null=True,
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class BulkUpdateOrderStatusSerializer(UpdateOrderStatusSerializer):
    """Status transition applied to several orders."""

    orderIds = serializers.ListField(
        source="order_ids",
        child=serializers.UUIDField(),
        allow_empty=False,
        max_length=MAX_PAGE_LIMIT,
    )


class UpdateOrderNfeSerializer(_NfeFieldsSerializer):
    """Validates an NF-e correction; emptiness is checked by the service."""


class OrderListQuerySerializer(serializers.Serializer):
    """Query string of the order listings."""

    status = serializers.ChoiceField(choices=OrderStatus.choices, required=False)
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=MAX_PAGE_LIMIT, default=20)


class AdminOrderListQuerySerializer(OrderListQuerySerializer):
    limit = serializers.IntegerField(min_value=1, max_value=MAX_PAGE_LIMIT, default=50)
    startDate = serializers.DateTimeField(source="start_date", required=False)
    endDate = serializers.DateTimeField(source="end_date", required=False)


# ---------------------------------------------------------------------------
# Output Serializers (Read)
# ---------------------------------------------------------------------------


class CompanySummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = ["id", "name", "role"]
        read_only_fields = fields


class QuotationSummarySerializer(serializers.ModelSerializer):
    buyerId = serializers.UUIDField(source="buyer_id", read_only=True)
    totalAmount = serializers.DecimalField(
        source="total_amount", max_digits=10, decimal_places=2, read_only=True
    )
    validUntil = serializers.DateTimeField(source="valid_until", read_only=True)

    class Meta:
        model = Quotation
        fields = ["id", "status", "buyerId", "totalAmount", "validUntil"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Read serializer for orders with company and quotation projections."""

    companyId = serializers.UUIDField(source="company_id", read_only=True)
    quotationId = serializers.UUIDField(source="quotation_id", read_only=True)
    totalAmount = serializers.DecimalField(
        source="total_amount", max_digits=12, decimal_places=2, read_only=True
    )
    trackingNumber = serializers.CharField(source="tracking_number", read_only=True)
    nfeAccessKey = serializers.CharField(source="nfe_access_key", read_only=True)
    nfeUrl = serializers.CharField(source="nfe_url", read_only=True)
    estimatedDeliveryDate = serializers.DateTimeField(
        source="estimated_delivery_date", read_only=True
    )
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    company = CompanySummarySerializer(read_only=True)
    quotation = QuotationSummarySerializer(read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "companyId",
            "quotationId",
            "totalAmount",
            "trackingNumber",
            "nfeAccessKey",
            "nfeUrl",
            "estimatedDeliveryDate",
            "createdAt",
            "updatedAt",
            "company",
            "quotation",
        ]
        read_only_fields = fields
