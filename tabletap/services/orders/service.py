"""Order lifecycle service: placing orders and advancing their status."""
import logging
from decimal import Decimal
from typing import Iterable, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from tabletap.core.config import settings
from tabletap.core.errors import InvalidTransitionError, NotFoundError, ValidationError
from tabletap.db import models as db_models
from tabletap.services.cart.models import CartItem
from tabletap.services.menu.base import AddOn, MenuItem
from tabletap.services.orders.models import Order
from tabletap.services.orders.status import (
    KITCHEN_STATUSES,
    OrderStatus,
    is_legal_transition,
    next_status,
)
from tabletap.services.persistence.orders import OrderStore
from tabletap.services.persistence.tables import TableStore
from tabletap.services.pricing import calculate_totals, to_money
from tabletap.services.realtime.notifier import OrderChangeEvent, OrderChangeNotifier

logger = logging.getLogger(__name__)


def order_from_row(row: db_models.Order) -> Order:
    """Build an Order from its stored row and frozen lines."""
    return Order(
        id=row.id,
        table_number=row.table_number,
        status=OrderStatus(row.status),
        created_at=row.created_at,
        updated_at=row.updated_at,
        subtotal=to_money(row.subtotal),
        tax=to_money(row.tax),
        total=to_money(row.total),
        special_notes=row.special_notes,
        items=[
            CartItem(
                menu_item=MenuItem.model_validate(item.menu_item),
                quantity=item.quantity,
                selected_add_ons=[AddOn.model_validate(a) for a in item.add_ons or []],
                special_instructions=item.special_instructions,
            )
            for item in row.items
        ],
    )


class OrderLifecycleService:
    """
    Creates orders and moves them through pending, accepted, preparing,
    ready and served.

    The only legal status change is to the next status in that sequence.
    The check is made against the stored status and repeated by the store's
    conditional update, so concurrent staff clients cannot skip or repeat a
    step. Successful changes are published on the notifier.
    """

    def __init__(
        self,
        db: AsyncSession,
        notifier: OrderChangeNotifier,
        restaurant_id: Optional[str] = None,
        tax_rate: Optional[Decimal] = None,
    ):
        self.notifier = notifier
        self.restaurant_id = restaurant_id or settings.restaurant_id
        self.tax_rate = settings.tax_rate if tax_rate is None else tax_rate
        self.order_store = OrderStore(db)
        self.table_store = TableStore(db)

    async def place_order(
        self,
        table_number: int,
        cart_items: Iterable[CartItem],
        subtotal: Optional[Decimal] = None,
        tax: Optional[Decimal] = None,
        total: Optional[Decimal] = None,
        special_notes: Optional[str] = None,
    ) -> Order:
        """
        Place a pending order for a table.

        Totals that are given must agree with the totals recomputed from the
        lines; omitted totals are computed.

        Raises:
            ValidationError: empty cart, unknown table or inconsistent totals
            StoreUnavailableError: the order store is unreachable
        """
        items = [item.model_copy(deep=True) for item in cart_items]
        if not items:
            raise ValidationError("Cannot place an order with an empty cart")

        table = await self.table_store.get_table_by_number(self.restaurant_id, table_number)
        if table is None:
            raise ValidationError(f"Table {table_number} not found")

        computed = calculate_totals(items, self.tax_rate)
        for field, given in (("subtotal", subtotal), ("tax", tax), ("total", total)):
            if given is not None and to_money(given) != getattr(computed, field):
                raise ValidationError(
                    f"Order {field} {to_money(given)} does not match "
                    f"computed {getattr(computed, field)}"
                )

        row = await self.order_store.insert_order(
            restaurant_id=self.restaurant_id,
            table=table,
            items=items,
            subtotal=computed.subtotal,
            tax=computed.tax,
            total=computed.total,
            special_notes=special_notes,
        )
        order = order_from_row(row)
        logger.info(
            f"[ORDERS] Placed order {order.id} - table {table_number}, "
            f"{order.total_items} items, total {order.total}"
        )
        await self._publish("INSERT", order)
        return order

    async def get_order(self, order_id: str) -> Order:
        """Get an order as currently stored."""
        row = await self._get_row(order_id)
        return order_from_row(row)

    async def _get_row(self, order_id: str) -> db_models.Order:
        row = await self.order_store.get_order_by_id(order_id)
        if row is None or row.restaurant_id != self.restaurant_id:
            raise NotFoundError(f"Order {order_id} not found")
        return row

    async def update_status(self, order_id: str, new_status) -> Order:
        """
        Move an order to its next status.

        Raises:
            NotFoundError: unknown order id
            InvalidTransitionError: new_status is not the next status, or
                another client changed the order first
            StoreUnavailableError: the order store is unreachable
        """
        try:
            new_status = OrderStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown order status '{new_status}'")

        row = await self._get_row(order_id)
        current = OrderStatus(row.status)
        if not is_legal_transition(current, new_status):
            logger.warning(
                f"[ORDERS] Rejected transition for order {order_id}: {current} -> {new_status}"
            )
            raise InvalidTransitionError(
                f"Order {order_id} is {current}; cannot move to {new_status}",
                current_status=current,
                requested_status=new_status,
            )

        changed = await self.order_store.transition_status(order_id, current, new_status)
        if not changed:
            latest = await self.order_store.get_order_by_id(order_id)
            latest_status = OrderStatus(latest.status) if latest is not None else None
            logger.warning(
                f"[ORDERS] Order {order_id} was already updated to {latest_status} "
                f"before {current} -> {new_status} could commit"
            )
            raise InvalidTransitionError(
                f"Order {order_id} was already updated (now {latest_status})",
                current_status=latest_status,
                requested_status=new_status,
            )

        order = order_from_row(await self._get_row(order_id))
        logger.info(f"[ORDERS] Order {order_id}: {current} -> {new_status}")
        await self._publish("UPDATE", order)
        return order

    async def advance(self, order_id: str) -> Order:
        """Apply the staff action for the order's current status."""
        row = await self._get_row(order_id)
        target = next_status(OrderStatus(row.status))
        if target is None:
            raise InvalidTransitionError(
                f"Order {order_id} is already {row.status}",
                current_status=OrderStatus(row.status),
            )
        return await self.update_status(order_id, target)

    async def list_active(
        self,
        statuses: Optional[Iterable] = None,
        table_number: Optional[int] = None,
    ) -> List[Order]:
        """List orders matching the status filter, newest first."""
        rows = await self.order_store.list_orders(
            self.restaurant_id, statuses=statuses, table_number=table_number
        )
        return [order_from_row(row) for row in rows]

    async def list_kitchen_orders(self) -> List[Order]:
        return await self.list_active(KITCHEN_STATUSES)

    async def _publish(self, event: str, order: Order) -> None:
        await self.notifier.publish(
            OrderChangeEvent(
                event=event,
                order_id=order.id,
                restaurant_id=self.restaurant_id,
                status=order.status.value,
            )
        )
