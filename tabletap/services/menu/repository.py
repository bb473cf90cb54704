"""Menu repository."""
from typing import Iterable, List, Optional
from tabletap.core.errors import NotFoundError, ValidationError
from tabletap.services.menu.base import AddOn, Category, Menu, MenuItem, MenuProvider


class MenuRepository:
    """Read-only catalog facade used by the cart and the menu API."""

    def __init__(self, provider: MenuProvider):
        self.provider = provider

    async def get_menu(self) -> Menu:
        """Get the full menu."""
        return await self.provider.get_menu()

    async def fetch_categories(self) -> List[Category]:
        """Get categories in display order."""
        menu = await self.provider.get_menu()
        return sorted(menu.categories, key=lambda c: c.sort_order)

    async def fetch_menu_items(
        self,
        category: Optional[str] = None,
        available_only: bool = True,
        veg_only: bool = False,
    ) -> List[MenuItem]:
        """Get menu items matching the filter."""
        menu = await self.provider.get_menu()
        items = []
        for item in menu.items:
            if category is not None and item.category != category:
                continue
            if available_only and not item.is_available:
                continue
            if veg_only and not item.is_veg:
                continue
            items.append(item)
        return items

    async def get_item(self, item_id: str) -> MenuItem:
        """
        Get a snapshot of a menu item.

        The returned copy is detached from the catalog so callers may keep it
        after the catalog changes.
        """
        item = await self.provider.get_item_by_id(item_id)
        if item is None:
            raise NotFoundError(f"Menu item '{item_id}' not found")
        return item.model_copy(deep=True)

    async def get_orderable_item(self, item_id: str) -> MenuItem:
        """
        Get a snapshot of a menu item a diner may order right now.

        Raises:
            ValidationError: the item does not exist or is unavailable
        """
        try:
            item = await self.get_item(item_id)
        except NotFoundError:
            raise ValidationError(f"Menu item '{item_id}' does not exist")
        if not item.is_available:
            raise ValidationError(f"'{item.name}' is not available")
        return item

    @staticmethod
    def resolve_add_ons(item: MenuItem, add_on_ids: Iterable[str]) -> List[AddOn]:
        """Map add-on ids to the item's add-ons, rejecting ones it does not offer."""
        offered = {add_on.id: add_on for add_on in item.add_ons}
        resolved = []
        for add_on_id in dict.fromkeys(add_on_ids):
            if add_on_id not in offered:
                raise ValidationError(
                    f"Add-on '{add_on_id}' is not offered for '{item.name}'"
                )
            resolved.append(offered[add_on_id].model_copy())
        return resolved
