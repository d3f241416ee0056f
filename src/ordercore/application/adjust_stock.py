"""Application service: Adjust Stock use case.

Administrative stock changes (restocking, write-offs, corrections) go
through the same ledger primitive that order reservations use.
"""

from __future__ import annotations

from ordercore.domain.repository.unit_of_work import UnitOfWorkFactory
from ordercore.domain.service.inventory_ledger import InventoryLedger


class AdjustStockHandler:

    def __init__(self, uow_factory: UnitOfWorkFactory) -> None:
        self._uow_factory = uow_factory

    def handle(self, product_id: int, delta: int) -> int:
        """Move stock by *delta* (negative to remove) and return the new level."""
        with self._uow_factory() as uow:
            new_quantity = InventoryLedger(uow).adjust_stock(product_id, delta)
            uow.commit()
        return new_quantity
