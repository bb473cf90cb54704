"""Order observers: keep a view of the order store in step with change events."""
import inspect
import logging
from typing import Awaitable, Callable, Dict, Iterable, List, Optional

from tabletap.core.errors import InvalidTransitionError, NotFoundError
from tabletap.services.orders.models import Order
from tabletap.services.orders.status import KITCHEN_STATUSES, group_orders, next_status
from tabletap.services.realtime.notifier import OrderChangeEvent, OrderChangeNotifier

logger = logging.getLogger(__name__)

FetchOrders = Callable[[], Awaitable[List[Order]]]
AdvanceAction = Callable[[str], Awaitable[Order]]


class OrderObserver:
    """
    A customer tracker, dashboard or kitchen view over the shared order store.

    Every change notification triggers a refetch of the authoritative state.
    Refetches are numbered; a result is dropped when a later refetch has
    already been applied, and everything is dropped after close().
    """

    def __init__(
        self,
        fetch_orders: FetchOrders,
        notifier: OrderChangeNotifier,
        statuses: Optional[Iterable] = None,
        order_id: Optional[str] = None,
        name: str = "observer",
    ):
        self._fetch_orders = fetch_orders
        self.notifier = notifier
        self.statuses = frozenset(statuses) if statuses is not None else None
        self.order_id = order_id
        self.name = name
        self._orders: List[Order] = []
        self._requested = 0
        self._applied = 0
        self._closed = False
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._known_ids: Optional[set] = None
        self._new_order_callbacks: List[Callable[[List[Order]], object]] = []

    @property
    def orders(self) -> List[Order]:
        return list(self._orders)

    @property
    def closed(self) -> bool:
        return self._closed

    def grouped(self) -> Dict[str, List[Order]]:
        return group_orders(self._orders)

    def get(self, order_id: str) -> Optional[Order]:
        for order in self._orders:
            if order.id == order_id:
                return order
        return None

    def _wants(self, order: Order) -> bool:
        if self.order_id is not None and order.id != self.order_id:
            return False
        return self.statuses is None or order.status in self.statuses

    def on_new_orders(self, callback: Callable[[List[Order]], object]) -> None:
        """Call back (sync or async) with orders that appear in a snapshot after the first one."""
        self._new_order_callbacks.append(callback)

    async def start(self) -> None:
        """Subscribe to change events and load the first snapshot."""
        if self._unsubscribe is None:
            self._unsubscribe = self.notifier.on_change(self._handle_change)
        await self.refresh()

    async def _handle_change(self, event: OrderChangeEvent) -> None:
        if self.order_id is not None and event.order_id != self.order_id:
            return
        await self.refresh()

    async def refresh(self) -> bool:
        """
        Refetch from the store and apply the result if it is still current.

        Returns:
            True if the snapshot was applied
        """
        if self._closed:
            return False
        self._requested += 1
        sequence = self._requested

        orders = await self._fetch_orders()

        if self._closed:
            return False
        if sequence < self._applied:
            logger.debug(f"[REALTIME] {self.name}: dropping stale refetch #{sequence}")
            return False
        self._applied = sequence
        await self._apply([order for order in orders if self._wants(order)])
        return True

    async def _apply(self, orders: List[Order]) -> None:
        new_orders = []
        if self._known_ids is not None:
            new_orders = [order for order in orders if order.id not in self._known_ids]
        self._known_ids = {order.id for order in orders}
        self._orders = orders

        if not new_orders:
            return
        logger.info(f"[REALTIME] {self.name}: {len(new_orders)} new order(s)")
        for callback in list(self._new_order_callbacks):
            try:
                result = callback(list(new_orders))
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"[REALTIME] {self.name}: new-order callback failed: {type(e).__name__}: {e}",
                    exc_info=True,
                )

    async def advance(self, order_id: str, action: AdvanceAction) -> Order:
        """
        Optimistically show the order at its next status while `action` commits it.

        The previous status is restored if `action` fails, and the error is
        re-raised for the caller to display.
        """
        previous = self.get(order_id)
        if previous is None:
            raise NotFoundError(f"Order {order_id} is not in this view")
        target = next_status(previous.status)
        if target is None:
            raise InvalidTransitionError(
                f"Order {order_id} is already {previous.status}",
                current_status=previous.status,
            )

        self._replace(order_id, previous.model_copy(update={"status": target}))
        try:
            confirmed = await action(order_id)
        except Exception:
            logger.warning(f"[REALTIME] {self.name}: rolling back optimistic update of {order_id}")
            self._replace(order_id, previous)
            raise

        self._replace(order_id, confirmed if self._wants(confirmed) else None)
        return confirmed

    def _replace(self, order_id: str, order: Optional[Order]) -> None:
        updated = []
        for existing in self._orders:
            if existing.id != order_id:
                updated.append(existing)
            elif order is not None:
                updated.append(order)
        self._orders = updated

    def close(self) -> None:
        """Stop listening; in-flight refetches are discarded."""
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


def kitchen_observer(fetch_orders: FetchOrders, notifier: OrderChangeNotifier) -> OrderObserver:
    """Kitchen display: accepted and preparing orders."""
    return OrderObserver(fetch_orders, notifier, statuses=KITCHEN_STATUSES, name="kitchen")


def dashboard_observer(fetch_orders: FetchOrders, notifier: OrderChangeNotifier) -> OrderObserver:
    """Staff dashboard: every order, grouped by status with grouped()."""
    return OrderObserver(fetch_orders, notifier, name="dashboard")


def customer_tracker(
    fetch_orders: FetchOrders, notifier: OrderChangeNotifier, order_id: str
) -> OrderObserver:
    """Diner's view of their own order."""
    return OrderObserver(fetch_orders, notifier, order_id=order_id, name="customer")
