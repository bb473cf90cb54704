"""Order status enumeration and transition rules."""
from enum import Enum
from typing import Dict, Iterable, List, Optional


class OrderStatus(str, Enum):
    """Order statuses, in the only order an order may move through them."""

    PENDING = "pending"  # Placed by the diner, not yet seen by staff
    ACCEPTED = "accepted"
    PREPARING = "preparing"
    READY = "ready"
    SERVED = "served"  # Terminal

    def __str__(self) -> str:
        """Return the string value of the status."""
        return self.value


ORDER_SEQUENCE: List[OrderStatus] = [
    OrderStatus.PENDING,
    OrderStatus.ACCEPTED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.SERVED,
]

INITIAL_STATUS = OrderStatus.PENDING

# Staff action label for moving an order out of each status
STATUS_ACTIONS: Dict[OrderStatus, str] = {
    OrderStatus.PENDING: "Accept",
    OrderStatus.ACCEPTED: "Start Preparing",
    OrderStatus.PREPARING: "Mark Ready",
    OrderStatus.READY: "Mark Served",
}

KITCHEN_STATUSES = frozenset({OrderStatus.ACCEPTED, OrderStatus.PREPARING})

DASHBOARD_COLUMNS: Dict[str, frozenset] = {
    "pending": frozenset({OrderStatus.PENDING}),
    "in_progress": frozenset({OrderStatus.ACCEPTED, OrderStatus.PREPARING}),
    "ready": frozenset({OrderStatus.READY}),
    "served": frozenset({OrderStatus.SERVED}),
}


def next_status(status: OrderStatus) -> Optional[OrderStatus]:
    """Return the single legal next status, or None for a terminal status."""
    index = ORDER_SEQUENCE.index(OrderStatus(status))
    if index + 1 >= len(ORDER_SEQUENCE):
        return None
    return ORDER_SEQUENCE[index + 1]


def is_legal_transition(current: OrderStatus, new: OrderStatus) -> bool:
    """Check whether moving from current to new is allowed."""
    return next_status(current) == OrderStatus(new)


def group_orders(orders: Iterable) -> Dict[str, list]:
    """Split orders into dashboard columns, keeping their input order."""
    columns: Dict[str, list] = {name: [] for name in DASHBOARD_COLUMNS}
    for order in orders:
        for name, statuses in DASHBOARD_COLUMNS.items():
            if order.status in statuses:
                columns[name].append(order)
                break
    return columns
