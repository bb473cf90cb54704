"""Cart and order pricing."""
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable
from pydantic import BaseModel

from tabletap.services.cart.models import CartItem


DEFAULT_TAX_RATE = Decimal("0.10")
CENT = Decimal("0.01")


class PriceSummary(BaseModel):
    """Derived totals for a set of cart lines."""

    total_items: int = 0
    subtotal: Decimal = Decimal("0.00")
    tax: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")


def to_money(value) -> Decimal:
    """Quantize a number to cents."""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def unit_price(item: CartItem) -> Decimal:
    """Price of one unit of a line: base price plus every selected add-on."""
    return item.menu_item.price + sum(
        (add_on.price for add_on in item.selected_add_ons), Decimal("0")
    )


def line_total(item: CartItem) -> Decimal:
    return unit_price(item) * item.quantity


def calculate_totals(items: Iterable[CartItem], tax_rate=DEFAULT_TAX_RATE) -> PriceSummary:
    """
    Compute item count, subtotal, tax and total for cart lines.

    Args:
        items: Cart lines
        tax_rate: Fraction of the subtotal charged as tax

    Returns:
        PriceSummary with money values rounded to cents
    """
    items = list(items)
    subtotal = to_money(sum((line_total(item) for item in items), Decimal("0")))
    tax = to_money(subtotal * Decimal(str(tax_rate)))
    return PriceSummary(
        total_items=sum(item.quantity for item in items),
        subtotal=subtotal,
        tax=tax,
        total=subtotal + tax,
    )
