"""Cart line models."""
from typing import FrozenSet, List, Optional, Tuple
from pydantic import BaseModel, Field, field_validator

from tabletap.services.menu.base import AddOn, MenuItem


LineKey = Tuple[str, FrozenSet[str]]


def make_line_key(menu_item_id: str, add_on_ids) -> LineKey:
    """Build the identity of a cart line from an item id and its add-on ids."""
    return menu_item_id, frozenset(add_on_ids)


class CartItem(BaseModel):
    """One cart line: a menu item snapshot, a quantity and selected add-ons."""

    menu_item: MenuItem
    quantity: int = Field(default=1, ge=1)
    selected_add_ons: List[AddOn] = []
    special_instructions: Optional[str] = None

    @field_validator("selected_add_ons")
    @classmethod
    def _collapse_duplicate_add_ons(cls, add_ons: List[AddOn]) -> List[AddOn]:
        # An add-on applies once per unit
        seen = set()
        unique = []
        for add_on in add_ons:
            if add_on.id not in seen:
                seen.add(add_on.id)
                unique.append(add_on)
        return unique

    @property
    def add_on_ids(self) -> FrozenSet[str]:
        return frozenset(add_on.id for add_on in self.selected_add_ons)

    @property
    def line_key(self) -> LineKey:
        return make_line_key(self.menu_item.id, self.add_on_ids)
