"""In-process publish/subscribe channel for order changes."""
import inspect
import logging
from datetime import datetime
from typing import Callable, List, Literal, Optional
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class OrderChangeEvent(BaseModel):
    """
    "Something changed" notice for the orders table.

    Subscribers treat it as a cue to refetch; the payload is informational.
    """

    event: Literal["INSERT", "UPDATE"]
    table: str = "orders"
    order_id: str
    restaurant_id: str
    status: Optional[str] = None
    occurred_at: datetime = Field(default_factory=datetime.utcnow)


ChangeCallback = Callable[[OrderChangeEvent], object]


class OrderChangeNotifier:
    """Delivers order change events to every registered callback."""

    def __init__(self):
        self._subscribers: List[ChangeCallback] = []

    def on_change(self, callback: ChangeCallback) -> Callable[[], None]:
        """
        Register a callback (sync or async).

        Returns:
            A function that removes the subscription
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def publish(self, event: OrderChangeEvent) -> None:
        """Deliver an event; a failing subscriber does not stop the others."""
        logger.debug(
            f"[REALTIME] {event.event} order {event.order_id} -> "
            f"{len(self._subscribers)} subscribers"
        )
        for callback in list(self._subscribers):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error(
                    f"[REALTIME] Subscriber failed for order {event.order_id}: "
                    f"{type(e).__name__}: {e}",
                    exc_info=True,
                )
