"""In-memory menu provider."""
import yaml
from decimal import Decimal
from pathlib import Path
from typing import Optional
from tabletap.services.menu.base import AddOn, Category, Menu, MenuItem, MenuProvider


class InMemoryMenuProvider(MenuProvider):
    """In-memory menu provider using YAML configuration."""

    def __init__(self, menu_file: Optional[str] = None):
        """Initialize with optional menu file path."""
        if menu_file is None:
            menu_file = Path(__file__).parent / "data" / "menu.yaml"
        self.menu_file = Path(menu_file)
        self._menu: Optional[Menu] = None

    async def _load_menu(self) -> Menu:
        """Load menu from YAML file."""
        if self._menu is None:
            if not self.menu_file.exists():
                # Default menu if file doesn't exist
                self._menu = Menu(
                    items=[
                        MenuItem(
                            id="margherita",
                            name="Margherita Pizza",
                            description="Tomato, mozzarella and basil",
                            price=Decimal("12.00"),
                            category="mains",
                            is_veg=True,
                            add_ons=[
                                AddOn(id="extra-cheese", name="Extra cheese", price=Decimal("1.50")),
                                AddOn(id="olives", name="Olives", price=Decimal("1.00")),
                            ],
                        ),
                        MenuItem(
                            id="fries",
                            name="Fries",
                            description="Crispy french fries",
                            price=Decimal("4.00"),
                            category="sides",
                            is_veg=True,
                        ),
                        MenuItem(
                            id="lemonade",
                            name="Lemonade",
                            description="Fresh lemonade",
                            price=Decimal("3.00"),
                            category="drinks",
                            is_veg=True,
                        ),
                    ],
                    categories=[
                        Category(id="mains", name="Mains", sort_order=1),
                        Category(id="sides", name="Sides", sort_order=2),
                        Category(id="drinks", name="Drinks", sort_order=3),
                    ],
                )
            else:
                with open(self.menu_file, "r") as f:
                    data = yaml.safe_load(f) or {}
                    items = [
                        MenuItem(**item) for item in data.get("items", [])
                    ]
                    categories = [
                        Category(**category) for category in data.get("categories", [])
                    ]
                    self._menu = Menu(items=items, categories=categories)
        return self._menu

    async def get_menu(self) -> Menu:
        """Get the full menu."""
        return await self._load_menu()

    async def get_item_by_id(self, item_id: str) -> Optional[MenuItem]:
        """Get a menu item by id."""
        menu = await self._load_menu()
        for item in menu.items:
            if item.id == item_id:
                return item
        return None
