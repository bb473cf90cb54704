"""Shared test fixtures and configuration."""
import pytest
import os
from decimal import Decimal
from pathlib import Path
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RESTAURANT_ID", "test-restaurant")
os.environ.setdefault("RESTAURANT_NAME", "Test Restaurant")
os.environ.setdefault("TAX_RATE", "0.10")

from tabletap.main import app
from tabletap.db.database import Base, get_db
from tabletap.core.config import settings
from tabletap.core.dependencies import get_cart_storage, get_menu_repository, get_notifier
from tabletap.services.cart.storage import InMemoryCartStorage
from tabletap.services.menu.repository import MenuRepository
from tabletap.services.menu.in_memory_menu import InMemoryMenuProvider
from tabletap.services.orders.service import OrderLifecycleService
from tabletap.services.persistence.tables import TableStore
from tabletap.services.realtime.notifier import OrderChangeNotifier


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_TAX_RATE = Decimal("0.10")


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def test_sessionmaker(test_db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_sessionmaker):
    """Create test database session."""
    async with test_sessionmaker() as session:
        yield session


@pytest.fixture
def test_menu_path():
    """Return path to test menu YAML file."""
    return Path(__file__).parent / "fixtures" / "test_menu.yaml"


@pytest.fixture
def test_menu_repository(test_menu_path):
    """Create menu repository with test data."""
    provider = InMemoryMenuProvider(menu_file=str(test_menu_path))
    return MenuRepository(provider)


@pytest.fixture
def notifier():
    """Isolated change notifier."""
    return OrderChangeNotifier()


@pytest.fixture
def cart_storage():
    """In-memory cart storage."""
    return InMemoryCartStorage()


@pytest.fixture
async def tables(test_db):
    """Register tables 1 to 5 for the test restaurant."""
    store = TableStore(test_db)
    return [
        await store.create_table(settings.restaurant_id, number)
        for number in range(1, 6)
    ]


@pytest.fixture
def order_service(test_db, notifier):
    """Order lifecycle service on the test database."""
    return OrderLifecycleService(
        db=test_db,
        notifier=notifier,
        restaurant_id=settings.restaurant_id,
        tax_rate=TEST_TAX_RATE,
    )


@pytest.fixture
async def client(test_sessionmaker, test_menu_repository, cart_storage, notifier):
    """HTTP client against the app with test dependencies."""
    async def _override_get_db():
        async with test_sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_menu_repository] = lambda: test_menu_repository
    app.dependency_overrides[get_cart_storage] = lambda: cart_storage
    app.dependency_overrides[get_notifier] = lambda: notifier

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http

    # Clear overrides
    app.dependency_overrides.clear()
