"""Order models."""
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel

from tabletap.services.cart.models import CartItem
from tabletap.services.orders.status import OrderStatus


class Order(BaseModel):
    """A placed order: frozen lines and totals with a mutable status."""

    id: str
    table_number: int
    items: List[CartItem]
    status: OrderStatus = OrderStatus.PENDING
    created_at: datetime
    updated_at: Optional[datetime] = None
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    special_notes: Optional[str] = None

    @property
    def total_items(self) -> int:
        return sum(item.quantity for item in self.items)
