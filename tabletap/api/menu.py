"""Menu API endpoints."""
import logging
from fastapi import APIRouter, Depends, Request
from tabletap.core.dependencies import get_menu_repository
from tabletap.services.menu.base import Category, MenuItem
from tabletap.services.menu.repository import MenuRepository
from pydantic import BaseModel
from typing import List, Optional


router = APIRouter()
logger = logging.getLogger(__name__)


class MenuResponse(BaseModel):
    """Menu response model."""
    items: List[MenuItem]
    categories: List[Category] = []


@router.get("/api/menu", response_model=MenuResponse)
async def get_menu(
    request: Request,
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Get available menu items and categories."""
    logger.info(
        f"[MENU] Request received - Client: {request.client.host if request.client else 'unknown'}"
    )
    items = await menu_repository.fetch_menu_items()
    categories = await menu_repository.fetch_categories()
    logger.info(f"[MENU] Menu loaded - {len(items)} items, {len(categories)} categories")
    return MenuResponse(items=items, categories=categories)


@router.get("/api/menu/categories", response_model=List[Category])
async def get_categories(
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Get menu categories in display order."""
    return await menu_repository.fetch_categories()


@router.get("/api/menu/items", response_model=List[MenuItem])
async def get_menu_items(
    category: Optional[str] = None,
    veg_only: bool = False,
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Get available menu items, optionally by category or vegetarian only."""
    logger.debug(f"[MENU] Items requested - category: {category}, veg_only: {veg_only}")
    return await menu_repository.fetch_menu_items(category=category, veg_only=veg_only)


@router.get("/api/menu/items/{item_id}", response_model=MenuItem)
async def get_menu_item(
    item_id: str,
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Get a single menu item."""
    return await menu_repository.get_item(item_id)
