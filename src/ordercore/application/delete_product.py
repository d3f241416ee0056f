"""Application service: Delete Product use case.

Existing orders keep their items (and price snapshots).  Cancelling such
an order later cannot restock the deleted product; see CancelOrderHandler.
"""

from __future__ import annotations

import logging

from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class DeleteProductHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, product_id: int) -> None:
        logger.info("Deleting product with id: %s", product_id)
        with self._uow_factory() as uow:
            uow.products.delete(product_id)
            uow.commit()
        logger.info("Product %s deleted", product_id)
