"""Table API endpoints."""
import logging
from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field

from tabletap.core.config import settings
from tabletap.core.dependencies import get_table_store
from tabletap.services.persistence.tables import TableStore


router = APIRouter()
logger = logging.getLogger(__name__)


class TableCreateRequest(BaseModel):
    """Table registration request."""
    table_number: int = Field(ge=1)


class TableResponse(BaseModel):
    """Table response model."""
    id: int
    table_number: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


@router.get("/api/tables", response_model=List[TableResponse])
async def list_tables(table_store: TableStore = Depends(get_table_store)):
    """List the restaurant's tables."""
    return await table_store.list_tables(settings.restaurant_id)


@router.post("/api/tables", response_model=TableResponse, status_code=201)
async def create_table(
    body: TableCreateRequest,
    table_store: TableStore = Depends(get_table_store),
):
    """Register a table number."""
    table = await table_store.create_table(settings.restaurant_id, body.table_number)
    logger.info(f"[TABLES] Registered table {table.table_number}")
    return table
