"""Application service: Adjust Prices By Category use case.

Bulk repricing, e.g. a 10% category sale (multiplier ``0.9``).  Orders
already placed keep the prices they were created with.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation

from ordercore.domain.exceptions import ValidationError
from ordercore.domain.model.criteria import ProductSearchCriteria
from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory

logger = logging.getLogger(__name__)


class AdjustPricesByCategoryHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, category: str, multiplier: str | Decimal) -> int:
        """Scale every price in *category*; return how many products changed."""
        factor = _parse_multiplier(multiplier)
        logger.info("Adjusting prices for category %s by multiplier %s", category, factor)

        with self._uow_factory() as uow:
            criteria = ProductSearchCriteria(categories=[category])
            product_ids = [p.id for p in uow.products.search(criteria)]
            uow.lock_products(product_ids)

            changed = 0
            for product_id in product_ids:
                product = uow.products.get_by_id(product_id)
                if product is None or product.category != category:
                    continue
                product.update_price(product.price.scale(factor))
                uow.products.save(product)
                changed += 1
            uow.commit()

        logger.info("Prices adjusted for %d product(s) in %s", changed, category)
        return changed


def _parse_multiplier(value: str | Decimal) -> Decimal:
    if isinstance(value, float):
        raise ValidationError(f"Price multiplier must not be a float: {value!r}")
    try:
        factor = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid price multiplier: {value!r}") from exc
    if not factor.is_finite() or factor <= 0:
        raise ValidationError("Price multiplier must be positive")
    return factor
