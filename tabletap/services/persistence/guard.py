"""Mapping of database outages to StoreUnavailableError."""
import logging
from contextlib import asynccontextmanager
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tabletap.core.errors import StoreUnavailableError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def store_guard(db: AsyncSession, operation: str):
    """Roll back and raise StoreUnavailableError when the database is unreachable."""
    try:
        yield
    except (OperationalError, InterfaceError) as e:
        logger.error(f"[STORE] {operation} failed: {type(e).__name__}: {e}")
        try:
            await db.rollback()
        except SQLAlchemyError as rollback_error:
            logger.warning(f"[STORE] Rollback after failed {operation} also failed: {rollback_error}")
        raise StoreUnavailableError(f"Order store unavailable ({operation})") from e
