"""
Tests for InventoryFacade (item-level read model).
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from inventory_kernel.exceptions import ItemNotFoundError, NoMetricAssignedError
from inventory_kernel.models.item import Metric


class TestTotals:

    def test_no_records_is_zero(self, facade, item):
        assert facade.total_stock(item) == Decimal("0")
        assert facade.is_in_stock(item) is False

    def test_total_sums_locations(
        self, ledger, facade, item, location_a, location_b, test_actor_id
    ):
        ledger.create_stock_on_location(item, location_a, "2.5", actor_id=test_actor_id)
        ledger.create_stock_on_location(item, location_b, 4, actor_id=test_actor_id)

        assert facade.total_stock(item) == Decimal("6.5")
        assert facade.total_stock(item.id) == Decimal("6.5")
        assert facade.is_in_stock(item) is True

    def test_total_is_per_item(
        self, ledger, facade, create_item, location_a, test_actor_id
    ):
        first = create_item()
        second = create_item()
        ledger.create_stock_on_location(first, location_a, 3, actor_id=test_actor_id)

        assert facade.total_stock(second) == Decimal("0")

    def test_all_empty_records_not_in_stock(
        self, ledger, facade, item, location_a, test_actor_id
    ):
        ledger.create_stock_on_location(item, location_a, 0, actor_id=test_actor_id)

        assert facade.is_in_stock(item) is False


class TestMetric:

    def test_has_metric(self, facade, create_item, create_metric):
        assert facade.has_metric(create_item(metric=create_metric())) is True
        assert facade.has_metric(create_item()) is False

    def test_metric_symbol(self, facade, create_item, create_metric):
        item = create_item(metric=create_metric("Metre", "m"))
        assert facade.metric_symbol(item) == "m"
        assert facade.metric_symbol(item.id) == "m"

    def test_unflushed_metric_assignment(self, facade, item, test_actor_id):
        """has_metric and metric_symbol agree before the assignment is flushed."""
        item.metric = Metric(name="Litre", symbol="l", created_by_id=test_actor_id)

        assert facade.has_metric(item) is True
        assert facade.metric_symbol(item) == "l"

    def test_metric_symbol_without_metric(self, facade, item):
        with pytest.raises(NoMetricAssignedError) as exc_info:
            facade.metric_symbol(item)
        assert exc_info.value.code == "NO_METRIC_ASSIGNED"

    def test_unknown_item(self, facade):
        with pytest.raises(ItemNotFoundError):
            facade.has_metric(uuid4())


class TestListings:

    def test_stocks_for_item_ordered_by_location_code(
        self, ledger, facade, item, location_a, location_b, location_c, test_actor_id
    ):
        ledger.create_stock_on_location(item, location_c, 1, actor_id=test_actor_id)
        ledger.create_stock_on_location(item, location_a, 2, actor_id=test_actor_id)

        stocks = facade.stocks_for_item(item)

        assert [s.location_id for s in stocks] == [location_a.id, location_c.id]

    def test_locations_for_item_skips_empty_and_retired(
        self, ledger, facade, item, location_a, location_b, location_c, test_actor_id
    ):
        ledger.create_stock_on_location(item, location_a, 2, actor_id=test_actor_id)
        ledger.create_stock_on_location(item, location_b, 0, actor_id=test_actor_id)
        retired = ledger.create_stock_on_location(item, location_c, 0, actor_id=test_actor_id)
        ledger.retire_stock(retired, actor_id=test_actor_id)

        locations = facade.locations_for_item(item)

        assert [loc.code for loc in locations] == ["A"]
        assert locations[0].name == "Location A"

    def test_movements_for_unknown_stock(self, facade):
        assert facade.movements_for_stock(uuid4()) == []
