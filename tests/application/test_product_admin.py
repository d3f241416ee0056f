"""Integration tests for catalog management and stock administration."""

from decimal import Decimal

import pytest

from ordercore.application.add_product import AddProductHandler
from ordercore.application.adjust_prices import AdjustPricesByCategoryHandler
from ordercore.application.adjust_stock import AdjustStockHandler
from ordercore.application.create_order import CreateOrderHandler
from ordercore.application.delete_product import DeleteProductHandler
from ordercore.application.dto import OrderItemSpec
from ordercore.application.show_order import ShowOrderHandler
from ordercore.application.show_product import (
    ListProductsHandler,
    LowStockProductsHandler,
    SearchProductsHandler,
    ShowProductHandler,
)
from ordercore.application.update_product import UpdateProductHandler
from ordercore.domain.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from ordercore.domain.model.criteria import ProductSearchCriteria
from ordercore.domain.model.product import ProductStatus
from tests.fakes import make_product, seed, stock_of


class TestAddAndUpdateProduct:

    def test_add_product(self, db):
        dto = AddProductHandler(db.unit_of_work).handle(
            name="Widget", price="15.00", stock_quantity=10, category="Tools"
        )
        assert dto.id == 1
        assert dto.price == Decimal("15.00")
        assert dto.status == "AVAILABLE"
        assert ShowProductHandler(db.unit_of_work).handle(dto.id) == dto

    def test_add_with_negative_stock_rejected(self, db):
        with pytest.raises(ValidationError, match="cannot be negative"):
            AddProductHandler(db.unit_of_work).handle(name="Widget", price="1", stock_quantity=-1)

    def test_update_does_not_touch_stock(self, db):
        (pid,) = seed(db, make_product(stock=7))
        dto = UpdateProductHandler(db.unit_of_work).handle(
            pid, name="Gizmo", price="12.00", status="discontinued"
        )
        assert dto.name == "Gizmo"
        assert dto.status == "DISCONTINUED"
        assert dto.stock_quantity == 7

    def test_price_change_leaves_existing_orders_alone(self, db):
        (pid,) = seed(db, make_product(price="10.00", stock=5))
        order = CreateOrderHandler(db.unit_of_work).handle(1, "1 Main St", [OrderItemSpec(pid, 2)])

        UpdateProductHandler(db.unit_of_work).handle(pid, price="99.00")

        stored = ShowOrderHandler(db.unit_of_work).handle(order.id)
        assert stored.items[0].unit_price == Decimal("10.00")
        assert stored.total_amount == Decimal("20.00")

    def test_update_unknown(self, db):
        with pytest.raises(ProductNotFoundError):
            UpdateProductHandler(db.unit_of_work).handle(5, name="x")

    def test_delete(self, db):
        (pid,) = seed(db, make_product())
        DeleteProductHandler(db.unit_of_work).handle(pid)
        with pytest.raises(ProductNotFoundError):
            ShowProductHandler(db.unit_of_work).handle(pid)


class TestAdjustStock:

    def test_restock_and_write_off(self, db):
        (pid,) = seed(db, make_product(stock=5))
        handler = AdjustStockHandler(db.unit_of_work)
        assert handler.handle(pid, 10) == 15
        assert handler.handle(pid, -15) == 0
        assert stock_of(db, pid) == 0

    def test_write_off_below_zero_rejected(self, db):
        (pid,) = seed(db, make_product(stock=5))
        with pytest.raises(InsufficientStockError):
            AdjustStockHandler(db.unit_of_work).handle(pid, -6)
        assert stock_of(db, pid) == 5

    def test_zero_delta_reports_current_stock(self, db):
        (pid,) = seed(db, make_product(stock=5))
        assert AdjustStockHandler(db.unit_of_work).handle(pid, 0) == 5
        assert stock_of(db, pid) == 5


class TestCatalogQueries:

    @pytest.fixture
    def catalog(self, db):
        return seed(
            db,
            make_product("Red Widget", price="5.00", stock=0, category="Tools"),
            make_product("Blue Widget", price="15.00", stock=3, category="Tools"),
            make_product("Garden Hose", price="25.00", stock=20, category="Garden"),
            make_product(
                "Old Widget", price="1.00", stock=1, category="Tools",
                status=ProductStatus.DISCONTINUED,
            ),
        )

    def test_search_by_name_and_stock(self, db, catalog):
        red, blue, _, old = catalog
        criteria = ProductSearchCriteria(name="widget", in_stock_only=True)
        found = SearchProductsHandler(db.unit_of_work).handle(criteria)
        assert [p.id for p in found] == [blue, old]

    def test_search_by_price_and_status(self, db, catalog):
        _, blue, hose, _ = catalog
        criteria = ProductSearchCriteria(
            min_price=Decimal("10"), statuses=[ProductStatus.AVAILABLE]
        )
        found = SearchProductsHandler(db.unit_of_work).handle(criteria)
        assert [p.id for p in found] == [blue, hose]

    def test_list_category_skips_unavailable(self, db, catalog):
        red, blue, _, old = catalog
        found = ListProductsHandler(db.unit_of_work).handle("Tools")
        assert {p.id for p in found} == {red, blue}

    def test_low_stock(self, db, catalog):
        red, blue, _, old = catalog
        found = LowStockProductsHandler(db.unit_of_work).handle(5)
        assert [p.id for p in found] == [red, old, blue]

    def test_low_stock_negative_threshold(self, db):
        with pytest.raises(ValidationError, match="cannot be negative"):
            LowStockProductsHandler(db.unit_of_work).handle(-1)


class TestAdjustPrices:

    def test_scales_only_the_category(self, db):
        tool, garden = seed(
            db,
            make_product("Hammer", price="19.99", category="Tools"),
            make_product("Hose", price="20.00", category="Garden"),
        )

        changed = AdjustPricesByCategoryHandler(db.unit_of_work).handle("Tools", "0.85")

        assert changed == 1
        show = ShowProductHandler(db.unit_of_work)
        assert show.handle(tool).price == Decimal("16.99")
        assert show.handle(garden).price == Decimal("20.00")

    def test_existing_orders_keep_their_prices(self, db):
        (pid,) = seed(db, make_product(price="10.00", stock=5, category="Tools"))
        order = CreateOrderHandler(db.unit_of_work).handle(1, "1 Main St", [OrderItemSpec(pid, 1)])

        AdjustPricesByCategoryHandler(db.unit_of_work).handle("Tools", Decimal("2"))

        assert ShowProductHandler(db.unit_of_work).handle(pid).price == Decimal("20.00")
        assert ShowOrderHandler(db.unit_of_work).handle(order.id).total_amount == Decimal("10.00")

    @pytest.mark.parametrize("multiplier", ["0", "-1", "abc", 0.9])
    def test_bad_multiplier(self, db, multiplier):
        with pytest.raises(ValidationError):
            AdjustPricesByCategoryHandler(db.unit_of_work).handle("Tools", multiplier)
