"""Application service: product catalog queries."""

from __future__ import annotations

import logging

from ordercore.application.dto import ProductDTO
from ordercore.domain.exceptions import ProductNotFoundError, ValidationError
from ordercore.domain.model.criteria import ProductSearchCriteria
from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class ShowProductHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, product_id: int) -> ProductDTO:
        logger.debug("Fetching product by id: %s", product_id)
        with self._uow_factory() as uow:
            product = uow.products.get_by_id(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return ProductDTO.from_domain(product)


class ListProductsHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, category: str | None = None) -> list[ProductDTO]:
        """Whole catalog, or the AVAILABLE products of one category."""
        logger.debug("Fetching products (category=%s)", category)
        with self._uow_factory() as uow:
            if category is None:
                products = uow.products.list_all()
            else:
                products = uow.products.find_by_category(category)
        return [ProductDTO.from_domain(p) for p in products]


class SearchProductsHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, criteria: ProductSearchCriteria) -> list[ProductDTO]:
        logger.debug("Searching products with criteria: %s", criteria)
        with self._uow_factory() as uow:
            products = uow.products.search(criteria)
        return [ProductDTO.from_domain(p) for p in products]


class LowStockProductsHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, threshold: int) -> list[ProductDTO]:
        """Products with fewer than *threshold* units, lowest stock first."""
        if threshold < 0:
            raise ValidationError("Low-stock threshold cannot be negative")
        logger.debug("Fetching low stock products (threshold: %s)", threshold)
        with self._uow_factory() as uow:
            products = uow.products.find_low_stock(threshold)
        return [ProductDTO.from_domain(p) for p in products]
