"""
Tests for the Metric, Item, Location and Stock ORM models.

Covers:
- Defaults on a new stock record
- Database constraints that back the ledger's invariants
"""

from decimal import Decimal

import pytest
from sqlalchemy.exc import IntegrityError

from inventory_kernel.models.item import Item
from inventory_kernel.models.stock import Stock, StockStatus


def _stock(item, location, actor_id, **kwargs) -> Stock:
    return Stock(item_id=item.id, location_id=location.id, created_by_id=actor_id, **kwargs)


class TestStockModel:

    def test_defaults(self, session, item, location_a, test_actor_id):
        stock = _stock(item, location_a, test_actor_id)
        session.add(stock)
        session.flush()

        assert stock.quantity == Decimal("0")
        assert stock.status == StockStatus.ACTIVE
        assert stock.is_active is True
        assert stock.location is location_a

    def test_one_record_per_pair(self, session, item, location_a, test_actor_id):
        session.add(_stock(item, location_a, test_actor_id))
        session.flush()

        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.add(_stock(item, location_a, test_actor_id))
                session.flush()

    def test_negative_quantity_rejected(self, session, item, location_a, test_actor_id):
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.add(_stock(item, location_a, test_actor_id, quantity=Decimal("-1")))
                session.flush()

    def test_unknown_status_rejected(self, session, item, location_a, test_actor_id):
        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.add(_stock(item, location_a, test_actor_id, status="lost"))
                session.flush()

    def test_retired_is_not_active(self, session, item, location_a, test_actor_id):
        stock = _stock(item, location_a, test_actor_id, status=StockStatus.RETIRED)
        session.add(stock)
        session.flush()

        assert stock.is_active is False


class TestCatalogModels:

    def test_item_metric(self, create_item, create_metric):
        kg = create_metric("Kilogram", "kg")
        item = create_item(metric=kg)

        assert item.metric_id == kg.id
        assert item.metric.symbol == "kg"

    def test_duplicate_sku_rejected(self, session, create_item, test_actor_id):
        create_item(sku="DUP-1")

        with pytest.raises(IntegrityError):
            with session.begin_nested():
                session.add(Item(sku="DUP-1", name="Copy", created_by_id=test_actor_id))
                session.flush()

    def test_duplicate_metric_symbol_rejected(self, session, create_metric):
        create_metric("Kilogram", "kg")

        with pytest.raises(IntegrityError):
            with session.begin_nested():
                create_metric("Kilos", "kg")

    def test_duplicate_location_code_rejected(self, session, create_location):
        create_location("DOCK")

        with pytest.raises(IntegrityError):
            with session.begin_nested():
                create_location("DOCK")
