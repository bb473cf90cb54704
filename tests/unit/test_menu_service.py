"""Unit tests for the menu catalog."""
import pytest
from decimal import Decimal

from tabletap.core.errors import NotFoundError, ValidationError
from tabletap.services.menu.in_memory_menu import InMemoryMenuProvider
from tabletap.services.menu.repository import MenuRepository


class TestMenuRepository:
    """Test catalog queries."""

    async def test_fetch_categories_in_order(self, test_menu_repository):
        categories = await test_menu_repository.fetch_categories()

        assert [c.id for c in categories] == ["mains", "sides", "drinks"]

    async def test_fetch_menu_items_hides_unavailable(self, test_menu_repository):
        items = await test_menu_repository.fetch_menu_items()

        assert "milkshake" not in [i.id for i in items]
        assert len(items) == 3

    async def test_fetch_menu_items_filters(self, test_menu_repository):
        drinks = await test_menu_repository.fetch_menu_items(category="drinks", available_only=False)
        veg = await test_menu_repository.fetch_menu_items(veg_only=True)

        assert {i.id for i in drinks} == {"soda", "milkshake"}
        assert {i.id for i in veg} == {"fries", "soda"}

    async def test_get_item_returns_detached_copy(self, test_menu_repository):
        """Changing a fetched item does not change the catalog."""
        item = await test_menu_repository.get_item("burger")
        item.price = Decimal("1.00")

        again = await test_menu_repository.get_item("burger")
        assert again.price == Decimal("10.00")
        assert [a.id for a in again.add_ons] == ["extra-cheese", "bacon"]

    async def test_get_unknown_item(self, test_menu_repository):
        with pytest.raises(NotFoundError):
            await test_menu_repository.get_item("pizza")

    async def test_get_orderable_item(self, test_menu_repository):
        burger = await test_menu_repository.get_orderable_item("burger")

        assert burger.price == Decimal("10.00")
        with pytest.raises(ValidationError):
            await test_menu_repository.get_orderable_item("milkshake")
        with pytest.raises(ValidationError):
            await test_menu_repository.get_orderable_item("pizza")

    async def test_resolve_add_ons(self, test_menu_repository):
        burger = await test_menu_repository.get_item("burger")

        add_ons = MenuRepository.resolve_add_ons(burger, ["bacon", "bacon"])

        assert [a.id for a in add_ons] == ["bacon"]
        assert add_ons[0].price == Decimal("2.00")

    async def test_resolve_unknown_add_on(self, test_menu_repository):
        fries = await test_menu_repository.get_item("fries")

        with pytest.raises(ValidationError):
            MenuRepository.resolve_add_ons(fries, ["bacon"])


class TestInMemoryMenuProvider:
    """Test YAML loading and the fallback menu."""

    async def test_missing_file_uses_default_menu(self, tmp_path):
        provider = InMemoryMenuProvider(menu_file=str(tmp_path / "missing.yaml"))

        menu = await provider.get_menu()

        assert len(menu.items) == 3
        assert await provider.get_item_by_id("margherita") is not None

    async def test_bundled_menu_loads(self):
        provider = InMemoryMenuProvider()

        menu = await provider.get_menu()

        assert len(menu.categories) == 4
        assert any(item.add_ons for item in menu.items)
