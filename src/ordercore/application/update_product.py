"""Application service: Update Product use case."""

from __future__ import annotations

import logging

from ordercore.application.add_product import parse_product_status
from ordercore.application.dto import ProductDTO
from ordercore.domain.exceptions import ProductNotFoundError
from ordercore.domain.model.value_objects import Money
from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class UpdateProductHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(
        self,
        product_id: int,
        name: str | None = None,
        price: str | None = None,
        category: str | None = None,
        description: str | None = None,
        status: str | None = None,
    ) -> ProductDTO:
        """Update a product's catalog details.

        This does NOT affect any existing orders; they captured a
        price snapshot at creation time.  Stock is not editable here;
        use the stock adjustment use case.
        """
        logger.info("Updating product with id: %s", product_id)

        with self._uow_factory() as uow:
            uow.lock_products([product_id])
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise ProductNotFoundError(product_id)

            product.update_details(
                name=name,
                description=description,
                category=category,
                status=parse_product_status(status) if status else None,
                price=Money.of(price) if price is not None else None,
            )
            uow.products.save(product)
            uow.commit()

        logger.info("Product %s updated", product_id)
        return ProductDTO.from_domain(product)
