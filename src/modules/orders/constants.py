"""Order domain constants.

Status and shipping-method choices plus the static lookup tables that
describe them.  The transition graph itself lives in
``modules.orders.state_machine``.  Every table here is read-only.
"""

from types import MappingProxyType

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "pending", "Pendente"
    PROCESSING = "processing", "Em processamento"
    SHIPPED = "shipped", "Enviado"
    DELIVERED = "delivered", "Entregue"
    CANCELLED = "cancelled", "Cancelado"


class ShippingMethod(models.TextChoices):
    STANDARD = "standard", "Padrão"
    EXPRESS = "express", "Expresso"
    ECONOMY = "economy", "Econômico"


# Timeline text shown to buyers and suppliers.
STATUS_DESCRIPTIONS = MappingProxyType(
    {
        OrderStatus.PENDING: "Order placed, awaiting processing",
        OrderStatus.PROCESSING: "Order is being prepared",
        OrderStatus.SHIPPED: "Order has been shipped",
        OrderStatus.DELIVERED: "Order has been delivered",
        OrderStatus.CANCELLED: "Order has been cancelled",
    }
)

# Calendar days between shipment and expected delivery.
DELIVERY_DAYS = MappingProxyType(
    {
        ShippingMethod.STANDARD: 5,
        ShippingMethod.EXPRESS: 2,
        ShippingMethod.ECONOMY: 10,
    }
)

DEFAULT_SHIPPING_METHOD = ShippingMethod.STANDARD

# NF-e data may only be corrected once the goods have left the supplier.
NFE_CORRECTABLE_STATUSES = frozenset({OrderStatus.SHIPPED, OrderStatus.DELIVERED})

NFE_ACCESS_KEY_LENGTH = 44

DEFAULT_PAGE_SIZE = 50
