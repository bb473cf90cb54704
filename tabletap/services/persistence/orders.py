"""Order persistence service."""
from datetime import datetime
from decimal import Decimal
from typing import Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import desc, select, update
from sqlalchemy.orm import selectinload

from tabletap.db.models import DiningTable, Order, OrderItem
from tabletap.services.cart.models import CartItem
from tabletap.services.orders.status import INITIAL_STATUS, OrderStatus
from tabletap.services.persistence.guard import store_guard


class OrderStore:
    """
    Service for persisting orders.

    Status changes go through a conditional update keyed on the expected
    current status, so two clients advancing the same order cannot both win.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def insert_order(
        self,
        restaurant_id: str,
        table: DiningTable,
        items: List[CartItem],
        subtotal: Decimal,
        tax: Decimal,
        total: Decimal,
        special_notes: Optional[str] = None,
    ) -> Order:
        """Create a pending order with a frozen copy of its lines."""
        order = Order(
            restaurant_id=restaurant_id,
            table_id=table.id,
            table_number=table.table_number,
            status=INITIAL_STATUS.value,
            subtotal=subtotal,
            tax=tax,
            total=total,
            special_notes=special_notes,
            items=[
                OrderItem(
                    menu_item_id=item.menu_item.id,
                    item_name=item.menu_item.name,
                    unit_price=item.menu_item.price,
                    quantity=item.quantity,
                    add_ons=[
                        add_on.model_dump(mode="json") for add_on in item.selected_add_ons
                    ],
                    special_instructions=item.special_instructions,
                    menu_item=item.menu_item.model_dump(mode="json"),
                )
                for item in items
            ],
        )
        async with store_guard(self.db, "insert order"):
            self.db.add(order)
            await self.db.commit()
        return await self.get_order_by_id(order.id)

    async def get_order_by_id(self, order_id: str) -> Optional[Order]:
        """Get order by ID with items, as currently stored."""
        async with store_guard(self.db, "order lookup"):
            result = await self.db.execute(
                select(Order)
                .where(Order.id == order_id)
                .options(selectinload(Order.items))
                .execution_options(populate_existing=True)
            )
            return result.scalar_one_or_none()

    async def list_orders(
        self,
        restaurant_id: str,
        statuses: Optional[Iterable[OrderStatus]] = None,
        table_number: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Order]:
        """Query orders by status and table, newest first."""
        query = (
            select(Order)
            .where(Order.restaurant_id == restaurant_id)
            .options(selectinload(Order.items))
            .order_by(desc(Order.created_at))
            .execution_options(populate_existing=True)
        )
        if statuses is not None:
            query = query.where(Order.status.in_([OrderStatus(s).value for s in statuses]))
        if table_number is not None:
            query = query.where(Order.table_number == table_number)
        if limit is not None:
            query = query.limit(limit)

        async with store_guard(self.db, "list orders"):
            result = await self.db.execute(query)
            return list(result.scalars().all())

    async def transition_status(
        self, order_id: str, expected: OrderStatus, new: OrderStatus
    ) -> bool:
        """
        Set the status only if the stored status is still `expected`.

        Returns:
            True if the row changed, False if the order was missing or had
            already moved on
        """
        async with store_guard(self.db, "status update"):
            result = await self.db.execute(
                update(Order)
                .where(Order.id == order_id, Order.status == OrderStatus(expected).value)
                .values(status=OrderStatus(new).value, updated_at=datetime.utcnow())
                .execution_options(synchronize_session=False)
            )
            await self.db.commit()
        return result.rowcount == 1
