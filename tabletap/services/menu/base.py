"""Menu provider interface."""
from abc import ABC, abstractmethod
from decimal import Decimal
from typing import List, Optional
from pydantic import BaseModel


class AddOn(BaseModel):
    """Priced modifier offered on a menu item (e.g. extra cheese)."""

    id: str
    name: str
    price: Decimal = Decimal("0")


class MenuItem(BaseModel):
    """Menu item model."""

    id: str
    name: str
    description: str = ""
    price: Decimal
    image: Optional[str] = None
    category: Optional[str] = None
    is_veg: bool = False
    is_available: bool = True
    add_ons: List[AddOn] = []


class Category(BaseModel):
    """Menu category."""

    id: str
    name: str
    icon: Optional[str] = None
    sort_order: int = 0


class Menu(BaseModel):
    """Menu model."""

    items: List[MenuItem]
    categories: List[Category] = []


class MenuProvider(ABC):
    """Abstract base class for menu providers."""

    @abstractmethod
    async def get_menu(self) -> Menu:
        """Get the full menu."""
        pass

    @abstractmethod
    async def get_item_by_id(self, item_id: str) -> Optional[MenuItem]:
        """Get a menu item by id."""
        pass
