"""Table persistence service."""
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from tabletap.core.errors import ValidationError
from tabletap.db.models import DiningTable
from tabletap.services.persistence.guard import store_guard


class TableStore:
    """Service for persisting restaurant tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_table(self, restaurant_id: str, table_number: int) -> DiningTable:
        """Register a table number for a restaurant."""
        if table_number < 1:
            raise ValidationError(f"Table number must be positive, got {table_number}")

        existing = await self.get_table_by_number(restaurant_id, table_number)
        if existing:
            raise ValidationError(f"Table {table_number} already exists")

        table = DiningTable(restaurant_id=restaurant_id, table_number=table_number)
        async with store_guard(self.db, "create table"):
            self.db.add(table)
            await self.db.commit()
            await self.db.refresh(table)
        return table

    async def get_table_by_number(
        self, restaurant_id: str, table_number: int
    ) -> Optional[DiningTable]:
        """Get a restaurant's table by its number."""
        async with store_guard(self.db, "table lookup"):
            result = await self.db.execute(
                select(DiningTable).where(
                    DiningTable.restaurant_id == restaurant_id,
                    DiningTable.table_number == table_number,
                )
            )
            return result.scalar_one_or_none()

    async def list_tables(self, restaurant_id: str) -> List[DiningTable]:
        """List a restaurant's tables by number."""
        async with store_guard(self.db, "list tables"):
            result = await self.db.execute(
                select(DiningTable)
                .where(DiningTable.restaurant_id == restaurant_id)
                .order_by(DiningTable.table_number)
            )
            return list(result.scalars().all())
