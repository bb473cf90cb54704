"""Diner cart: line merging, quantity updates, pricing and persistence."""
import json
import logging
from decimal import Decimal
from typing import Iterable, List, Optional

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from tabletap.core.errors import ValidationError
from tabletap.services.cart.models import CartItem, make_line_key
from tabletap.services.cart.storage import CartStorage
from tabletap.services.menu.base import AddOn, MenuItem
from tabletap.services.pricing import DEFAULT_TAX_RATE, PriceSummary, calculate_totals

logger = logging.getLogger(__name__)

_lines_adapter = TypeAdapter(List[CartItem])


def cart_storage_key(namespace: str, session_id: str) -> str:
    """Storage key for a diner session's cart."""
    return f"{namespace}:{session_id}"


class Cart:
    """
    The diner's in-progress selection before an order is placed.

    Lines are keyed by menu item id plus the set of selected add-on ids.
    Every mutation writes the full line list to storage; totals are derived
    from the current lines on each access.
    """

    def __init__(
        self,
        storage: CartStorage,
        key: str,
        tax_rate: Decimal = DEFAULT_TAX_RATE,
    ):
        self.storage = storage
        self.key = key
        self.tax_rate = tax_rate
        self._lines: List[CartItem] = self._load()

    def _load(self) -> List[CartItem]:
        """Load saved lines; missing or corrupt data yields an empty cart."""
        try:
            raw = self.storage.get(self.key)
        except (OSError, ValueError) as e:
            logger.warning(f"[CART] Failed to read cart '{self.key}': {e}")
            return []
        if not raw:
            return []
        try:
            lines = _lines_adapter.validate_python(json.loads(raw))
        except (ValueError, TypeError, SchemaError) as e:
            logger.warning(f"[CART] Discarding corrupt cart '{self.key}': {type(e).__name__}")
            return []
        return [line for line in lines if line.quantity >= 1]

    def _save(self) -> None:
        payload = json.dumps(_lines_adapter.dump_python(self._lines, mode="json"))
        try:
            self.storage.set(self.key, payload)
        except OSError as e:
            # The in-memory cart stays authoritative for this session
            logger.error(f"[CART] Failed to save cart '{self.key}': {e}", exc_info=True)

    @property
    def items(self) -> List[CartItem]:
        return [line.model_copy(deep=True) for line in self._lines]

    def add_item(
        self,
        menu_item: MenuItem,
        quantity: int = 1,
        add_ons: Iterable[AddOn] = (),
        instructions: Optional[str] = None,
    ) -> CartItem:
        """
        Add a quantity of a menu item with the given add-ons.

        A line with the same item and add-on set has its quantity increased;
        otherwise a new line holding a copy of the menu item is appended.

        Raises:
            ValidationError: quantity is zero or negative
        """
        if quantity < 1:
            raise ValidationError(f"Quantity must be at least 1, got {quantity}")

        line = CartItem(
            menu_item=menu_item.model_copy(deep=True),
            quantity=quantity,
            selected_add_ons=[add_on.model_copy() for add_on in add_ons],
            special_instructions=instructions or None,
        )
        for existing in self._lines:
            if existing.line_key == line.line_key:
                existing.quantity += quantity
                if line.special_instructions:
                    existing.special_instructions = line.special_instructions
                self._save()
                return existing.model_copy(deep=True)

        self._lines.append(line)
        self._save()
        return line.model_copy(deep=True)

    def _matches(self, line: CartItem, menu_item_id: str, add_on_ids) -> bool:
        if add_on_ids is None:
            return line.menu_item.id == menu_item_id
        return line.line_key == make_line_key(menu_item_id, add_on_ids)

    def update_quantity(
        self, menu_item_id: str, quantity: int, add_on_ids: Optional[Iterable[str]] = None
    ) -> None:
        """
        Set the quantity of matching lines; zero or less removes them.

        Without add_on_ids every line for the menu item matches. Unknown
        items are ignored.
        """
        if quantity <= 0:
            self.remove_item(menu_item_id, add_on_ids)
            return
        add_on_ids = None if add_on_ids is None else list(add_on_ids)
        changed = False
        for line in self._lines:
            if self._matches(line, menu_item_id, add_on_ids):
                line.quantity = quantity
                changed = True
        if changed:
            self._save()

    def remove_item(self, menu_item_id: str, add_on_ids: Optional[Iterable[str]] = None) -> None:
        """
        Remove lines for a menu item.

        Without add_on_ids this removes every variant of the item; with
        add_on_ids only the line with exactly that add-on set is removed.
        """
        add_on_ids = None if add_on_ids is None else list(add_on_ids)
        remaining = [
            line for line in self._lines
            if not self._matches(line, menu_item_id, add_on_ids)
        ]
        if len(remaining) != len(self._lines):
            self._lines = remaining
            self._save()

    def clear(self) -> None:
        """Remove every line."""
        self._lines = []
        self._save()

    @property
    def summary(self) -> PriceSummary:
        return calculate_totals(self._lines, self.tax_rate)

    @property
    def total_items(self) -> int:
        return self.summary.total_items

    @property
    def subtotal(self) -> Decimal:
        return self.summary.subtotal

    @property
    def tax(self) -> Decimal:
        return self.summary.tax

    @property
    def total(self) -> Decimal:
        return self.summary.total

    def __len__(self) -> int:
        return len(self._lines)
