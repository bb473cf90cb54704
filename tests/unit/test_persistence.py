"""Unit tests for persistence services (tables and orders)."""
import pytest
from decimal import Decimal
from unittest.mock import AsyncMock
from sqlalchemy.exc import OperationalError

from tabletap.core.config import settings
from tabletap.core.errors import StoreUnavailableError, ValidationError
from tabletap.services.cart.models import CartItem
from tabletap.services.menu.base import AddOn, MenuItem
from tabletap.services.orders.status import OrderStatus
from tabletap.services.persistence.orders import OrderStore
from tabletap.services.persistence.tables import TableStore

RESTAURANT = settings.restaurant_id


def _lines():
    cheese = AddOn(id="extra-cheese", name="Extra cheese", price=Decimal("1.00"))
    return [
        CartItem(
            menu_item=MenuItem(id="burger", name="Burger", price=Decimal("10.00"), add_ons=[cheese]),
            quantity=2,
            selected_add_ons=[cheese],
            special_instructions="no onions",
        ),
        CartItem(menu_item=MenuItem(id="fries", name="Fries", price=Decimal("5.00")), quantity=1),
    ]


async def _insert(test_db, table):
    return await OrderStore(test_db).insert_order(
        restaurant_id=RESTAURANT,
        table=table,
        items=_lines(),
        subtotal=Decimal("27.00"),
        tax=Decimal("2.70"),
        total=Decimal("29.70"),
    )


class TestTableStore:
    """Test table persistence."""

    async def test_create_and_get_table(self, test_db):
        store = TableStore(test_db)

        table = await store.create_table(RESTAURANT, 4)
        found = await store.get_table_by_number(RESTAURANT, 4)

        assert found is not None
        assert found.id == table.id

    async def test_tables_are_scoped_by_restaurant(self, test_db):
        store = TableStore(test_db)
        await store.create_table("other-restaurant", 7)

        assert await store.get_table_by_number(RESTAURANT, 7) is None

    async def test_duplicate_table_rejected(self, test_db):
        store = TableStore(test_db)
        await store.create_table(RESTAURANT, 2)

        with pytest.raises(ValidationError):
            await store.create_table(RESTAURANT, 2)

    async def test_list_tables_sorted(self, test_db):
        store = TableStore(test_db)
        for number in (3, 1, 2):
            await store.create_table(RESTAURANT, number)

        tables = await store.list_tables(RESTAURANT)

        assert [t.table_number for t in tables] == [1, 2, 3]


class TestOrderStore:
    """Test order persistence."""

    async def test_insert_order(self, test_db, tables):
        order = await _insert(test_db, tables[3])

        assert order.id is not None
        assert order.status == "pending"
        assert order.table_number == 4
        assert order.created_at is not None
        assert len(order.items) == 2
        assert order.items[0].item_name == "Burger"
        assert order.items[0].add_ons == [
            {"id": "extra-cheese", "name": "Extra cheese", "price": "1.00"}
        ]
        assert order.items[0].menu_item["id"] == "burger"

    async def test_transition_status_conditional(self, test_db, tables):
        """Only the first of two identical conditional updates changes the row."""
        store = OrderStore(test_db)
        order = await _insert(test_db, tables[0])

        first = await store.transition_status(order.id, OrderStatus.PENDING, OrderStatus.ACCEPTED)
        second = await store.transition_status(order.id, OrderStatus.PENDING, OrderStatus.ACCEPTED)

        assert first is True
        assert second is False
        stored = await store.get_order_by_id(order.id)
        assert stored.status == "accepted"

    async def test_transition_unknown_order(self, test_db):
        store = OrderStore(test_db)

        assert await store.transition_status("missing", OrderStatus.PENDING, OrderStatus.ACCEPTED) is False

    async def test_list_orders_filters(self, test_db, tables):
        store = OrderStore(test_db)
        first = await _insert(test_db, tables[0])
        second = await _insert(test_db, tables[1])
        await store.transition_status(second.id, OrderStatus.PENDING, OrderStatus.ACCEPTED)

        pending = await store.list_orders(RESTAURANT, statuses=[OrderStatus.PENDING])
        table_two = await store.list_orders(RESTAURANT, table_number=2)
        everything = await store.list_orders(RESTAURANT)

        assert [o.id for o in pending] == [first.id]
        assert [o.id for o in table_two] == [second.id]
        assert {o.id for o in everything} == {first.id, second.id}

    async def test_store_outage_raises_unavailable(self, test_db):
        """Connection errors become StoreUnavailableError after rollback."""
        test_db.execute = AsyncMock(
            side_effect=OperationalError("SELECT", {}, Exception("connection refused"))
        )
        test_db.rollback = AsyncMock()

        with pytest.raises(StoreUnavailableError):
            await OrderStore(test_db).get_order_by_id("any")

        test_db.rollback.assert_awaited_once()
