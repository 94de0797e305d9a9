"""Tasks assíncronas do módulo de pedidos."""

from typing import List, Optional

import structlog
from celery import shared_task

from modules.orders.dtos import UpdateOrderStatusDTO
from modules.orders.repositories.django_repository import OrderDjangoRepository
from modules.orders.services import OrderStatusService

logger = structlog.get_logger(__name__)


@shared_task(name="orders.bulk_update_status")
def bulk_update_order_status_task(
    order_ids: List[str], update: dict, company_id: Optional[str] = None
) -> List[str]:
    """Aplica a mesma transição de status a vários pedidos em background.

    ``update`` usa as chaves camelCase da API.  Retorna os ids
    atualizados; pedidos com falha são apenas registrados no log.
    """
    dto = UpdateOrderStatusDTO.model_validate(update)
    service = OrderStatusService(order_repository=OrderDjangoRepository())
    orders = service.bulk_update_order_status(order_ids, dto, company_id)
    updated_ids = [str(order.id) for order in orders]
    logger.info(
        "orders.bulk_update_task.finished",
        requested=len(order_ids),
        updated=len(updated_ids),
    )
    return updated_ids
