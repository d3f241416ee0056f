"""JSON-file-backed record store.

Behaves like ``InMemoryDatabase`` (same units of work, same record locks)
and keeps its committed state in one file, ``store.json``, so it can be
shared by several processes, e.g. concurrent CLI invocations.

* Every unit of work holds ``.lock`` in the data directory for its whole
  lifetime, so units of work are serialised across processes.
* On opening, the unit of work re-reads ``store.json`` under that lock,
  so stock checks always see the latest commit from any process.
* A commit writes a temporary sibling and renames it over ``store.json``
  in one step.  Readers see either the old file or the new one; a failed
  write leaves the old file intact and the commit is not published.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime
from decimal import Decimal
from pathlib import Path

from filelock import FileLock, Timeout

from ordercore.domain.exceptions import BusyError
from ordercore.domain.model.order import Order, OrderItem, OrderStatus
from ordercore.domain.model.product import Product, ProductStatus
from ordercore.domain.model.value_objects import Money, Quantity
from ordercore.infrastructure.persistence.locks import DEFAULT_LOCK_TIMEOUT
from ordercore.infrastructure.persistence.memory import InMemoryDatabase, _Snapshot

logger = logging.getLogger(__name__)

DATA_FILE = "store.json"
LOCK_FILE = ".lock"


class JsonDatabase(InMemoryDatabase):

    def __init__(self, data_dir: Path, lock_timeout: float = DEFAULT_LOCK_TIMEOUT) -> None:
        super().__init__(lock_timeout)
        data_dir.mkdir(parents=True, exist_ok=True)
        self._data_file = data_dir / DATA_FILE
        self._file_lock = FileLock(str(data_dir / LOCK_FILE), timeout=lock_timeout)
        # One unit of work per process at a time; the file lock covers the rest.
        self._session_lock = threading.Lock()
        self.begin()
        self.end()

    # --- Session hooks --------------------------------------------------------

    def begin(self) -> None:
        timeout = self.locks.timeout
        if not self._session_lock.acquire(timeout=timeout):
            raise self._busy()
        try:
            self._file_lock.acquire()
        except Timeout:
            self._session_lock.release()
            raise self._busy() from None
        try:
            self._refresh()
        except BaseException:
            self._file_lock.release()
            self._session_lock.release()
            raise

    def end(self) -> None:
        self._file_lock.release()
        self._session_lock.release()

    def _busy(self) -> BusyError:
        logger.warning(
            "Timed out after %.2fs waiting for data directory %s",
            self.locks.timeout,
            self._data_file.parent,
        )
        return BusyError(
            f"Data directory {self._data_file.parent} is in use by another "
            f"operation; try again"
        )

    def _refresh(self) -> None:
        """Reload ``store.json``; another process may have committed since."""
        if not self._data_file.exists():
            self._replace_file(self._empty_document())
        document = json.loads(self._data_file.read_text(encoding="utf-8"))
        self._snapshot = self._snapshot_from_raw(document)
        self._merge_sequences(document.get("sequences", {}))
        logger.debug(
            "Loaded %d product(s) and %d order(s) from %s",
            len(self._snapshot.products),
            len(self._snapshot.orders),
            self._data_file,
        )

    # --- Persistence hook -----------------------------------------------------

    def _persist(self, snapshot: _Snapshot) -> None:
        with self._sequence_lock:
            sequences = dict(self._sequences)
        document = {
            "sequences": sequences,
            "products": [
                self._product_to_raw(snapshot.products[pid]) for pid in sorted(snapshot.products)
            ],
            "orders": [
                self._order_to_raw(snapshot.orders[oid], snapshot.items.get(oid, []))
                for oid in sorted(snapshot.orders)
            ],
        }
        self._replace_file(document)

    def _merge_sequences(self, stored: dict[str, int]) -> None:
        # IDs keep growing across processes, including past deleted records.
        previous = dict(self._sequences)
        self._reset_sequences(self._snapshot)
        with self._sequence_lock:
            for kind in self._sequences:
                self._sequences[kind] = max(
                    self._sequences[kind], previous[kind], stored.get(kind, 0)
                )

    @staticmethod
    def _empty_document() -> dict:
        return {"sequences": {"product": 0, "order": 0, "item": 0}, "products": [], "orders": []}

    def _snapshot_from_raw(self, document: dict) -> _Snapshot:
        products = {}
        for raw in document["products"]:
            product = self._product_to_domain(raw)
            products[product.id] = product
        orders = {}
        items = {}
        for raw in document["orders"]:
            order = self._order_to_domain(raw)
            items[order.id] = order.items
            order.items = []
            orders[order.id] = order
        return _Snapshot(products=products, orders=orders, items=items)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _product_to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "name": product.name,
            "description": product.description,
            "price": str(product.price.amount),
            "currency": product.price.currency,
            "stock_quantity": product.stock_quantity,
            "category": product.category,
            "status": product.status.value,
            "created_at": product.created_at.isoformat(),
            "updated_at": product.updated_at.isoformat(),
        }

    @staticmethod
    def _product_to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            name=raw["name"],
            description=raw.get("description", ""),
            price=Money(Decimal(raw["price"]), raw.get("currency", "USD")),
            stock_quantity=raw["stock_quantity"],
            category=raw.get("category", ""),
            status=ProductStatus(raw.get("status", "AVAILABLE")),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )

    @staticmethod
    def _order_to_raw(order: Order, items: list[OrderItem]) -> dict:
        return {
            "id": order.id,
            "user_id": order.user_id,
            "status": order.status.value,
            "total_amount": str(order.total_amount.amount),
            "currency": order.total_amount.currency,
            "shipping_address": order.shipping_address,
            "created_at": order.created_at.isoformat(),
            "updated_at": order.updated_at.isoformat(),
            "items": [
                {
                    "id": item.id,
                    "product_id": item.product_id,
                    "quantity": item.quantity.value,
                    "unit_price": str(item.unit_price.amount),
                    "subtotal": str(item.subtotal.amount),
                    "currency": item.unit_price.currency,
                }
                for item in items
            ],
        }

    @staticmethod
    def _order_to_domain(raw: dict) -> Order:
        currency = raw.get("currency", "USD")
        items = [
            OrderItem(
                id=i["id"],
                order_id=raw["id"],
                product_id=i["product_id"],
                quantity=Quantity(i["quantity"]),
                unit_price=Money(Decimal(i["unit_price"]), i.get("currency", currency)),
                subtotal=Money(Decimal(i["subtotal"]), i.get("currency", currency)),
            )
            for i in raw["items"]
        ]
        return Order(
            id=raw["id"],
            user_id=raw["user_id"],
            shipping_address=raw["shipping_address"],
            total_amount=Money(Decimal(raw["total_amount"]), currency),
            items=items,
            status=OrderStatus(raw["status"]),
            created_at=datetime.fromisoformat(raw["created_at"]),
            updated_at=datetime.fromisoformat(raw["updated_at"]),
        )

    # --- File helpers ---------------------------------------------------------

    def _replace_file(self, document: dict) -> None:
        tmp = self._write_temp(self._data_file, document)
        tmp.replace(self._data_file)

    @staticmethod
    def _write_temp(path: Path, document: dict) -> Path:
        tmp = path.with_name(path.name + ".tmp")
        with tmp.open("w", encoding="utf-8") as fh:
            json.dump(document, fh, indent=2)
            fh.write("\n")
            fh.flush()
            os.fsync(fh.fileno())
        return tmp
