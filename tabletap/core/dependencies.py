"""FastAPI dependencies."""
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from tabletap.core.config import settings
from tabletap.db.database import get_db
from tabletap.services.cart.cart import Cart, cart_storage_key
from tabletap.services.cart.storage import CartStorage, FileCartStorage
from tabletap.services.menu.repository import MenuRepository
from tabletap.services.menu.in_memory_menu import InMemoryMenuProvider
from tabletap.services.orders.service import OrderLifecycleService
from tabletap.services.persistence.tables import TableStore
from tabletap.services.realtime.notifier import OrderChangeNotifier

# One change channel per process, shared by every request and websocket
order_notifier = OrderChangeNotifier()


def get_menu_repository() -> MenuRepository:
    """Get menu repository instance."""
    return MenuRepository(provider=InMemoryMenuProvider(menu_file=settings.menu_file))


def get_notifier() -> OrderChangeNotifier:
    """Get the order change notifier."""
    return order_notifier


def get_cart_storage() -> CartStorage:
    """Get durable cart storage."""
    return FileCartStorage(settings.cart_storage_dir)


def get_cart(
    session_id: str,
    storage: CartStorage = Depends(get_cart_storage),
) -> Cart:
    """Load the cart for a diner session."""
    return Cart(
        storage=storage,
        key=cart_storage_key(settings.cart_storage_key, session_id),
        tax_rate=settings.tax_rate,
    )


def get_order_service(
    db: AsyncSession = Depends(get_db),
    notifier: OrderChangeNotifier = Depends(get_notifier),
) -> OrderLifecycleService:
    """Get the order lifecycle service for this request."""
    return OrderLifecycleService(db=db, notifier=notifier)


def get_table_store(db: AsyncSession = Depends(get_db)) -> TableStore:
    """Get the table store for this request."""
    return TableStore(db)
