"""Application service: Add Product use case."""

from __future__ import annotations

import logging

from ordercore.application.dto import ProductDTO
from ordercore.domain.exceptions import ValidationError
from ordercore.domain.model.product import Product, ProductStatus
from ordercore.domain.model.value_objects import Money
from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class AddProductHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(
        self,
        name: str,
        price: str,
        stock_quantity: int = 0,
        category: str = "",
        description: str = "",
        status: str | None = None,
    ) -> ProductDTO:
        """Add a new product to the catalog with its opening stock."""
        logger.info("Creating new product: %s", name)
        product = Product.create(
            name=name,
            price=Money.of(price),
            stock_quantity=stock_quantity,
            category=category,
            description=description,
            status=parse_product_status(status) if status else ProductStatus.AVAILABLE,
        )

        with self._uow_factory() as uow:
            uow.products.add(product)
            uow.commit()

        logger.info("Product created with id: %s", product.id)
        return ProductDTO.from_domain(product)


def parse_product_status(value: ProductStatus | str) -> ProductStatus:
    if isinstance(value, ProductStatus):
        return value
    try:
        return ProductStatus(value.strip().upper())
    except ValueError as exc:
        allowed = ", ".join(s.value for s in ProductStatus)
        raise ValidationError(
            f"Unknown product status '{value}' (expected one of {allowed})"
        ) from exc
