"""Diner cart API endpoints."""
import logging
from decimal import Decimal
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from tabletap.core.dependencies import get_cart, get_menu_repository, get_order_service
from tabletap.services.cart.cart import Cart
from tabletap.services.cart.models import CartItem
from tabletap.services.menu.repository import MenuRepository
from tabletap.services.orders.models import Order
from tabletap.services.orders.service import OrderLifecycleService


router = APIRouter()
logger = logging.getLogger(__name__)


class AddCartItemRequest(BaseModel):
    """Add-to-cart request from the item customization screen."""
    menu_item_id: str
    quantity: int = 1
    add_on_ids: List[str] = []
    special_instructions: Optional[str] = None


class UpdateQuantityRequest(BaseModel):
    """Quantity update; zero or less removes the line."""
    quantity: int
    add_on_ids: Optional[List[str]] = None


class CheckoutRequest(BaseModel):
    """Order submission for the cart's contents."""
    table_number: int = Field(ge=1)
    special_notes: Optional[str] = None


class CartResponse(BaseModel):
    """Cart contents with derived totals."""
    session_id: str
    items: List[CartItem]
    total_items: int
    subtotal: Decimal
    tax: Decimal
    total: Decimal


def _cart_response(session_id: str, cart: Cart) -> CartResponse:
    summary = cart.summary
    return CartResponse(
        session_id=session_id,
        items=cart.items,
        total_items=summary.total_items,
        subtotal=summary.subtotal,
        tax=summary.tax,
        total=summary.total,
    )


@router.get("/api/cart/{session_id}", response_model=CartResponse)
async def get_cart_contents(session_id: str, cart: Cart = Depends(get_cart)):
    """Get the cart for a diner session."""
    return _cart_response(session_id, cart)


@router.post("/api/cart/{session_id}/items", response_model=CartResponse)
async def add_cart_item(
    session_id: str,
    body: AddCartItemRequest,
    cart: Cart = Depends(get_cart),
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Add a customized menu item to the cart."""
    menu_item = await menu_repository.get_orderable_item(body.menu_item_id)
    add_ons = menu_repository.resolve_add_ons(menu_item, body.add_on_ids)
    cart.add_item(menu_item, body.quantity, add_ons, body.special_instructions)
    logger.info(
        f"[CART] {session_id}: added {body.quantity}x {menu_item.id} "
        f"with {len(add_ons)} add-ons"
    )
    return _cart_response(session_id, cart)


@router.patch("/api/cart/{session_id}/items/{menu_item_id}", response_model=CartResponse)
async def update_cart_item(
    session_id: str,
    menu_item_id: str,
    body: UpdateQuantityRequest,
    cart: Cart = Depends(get_cart),
):
    """Set the quantity of a cart line."""
    cart.update_quantity(menu_item_id, body.quantity, body.add_on_ids)
    return _cart_response(session_id, cart)


@router.delete("/api/cart/{session_id}/items/{menu_item_id}", response_model=CartResponse)
async def remove_cart_item(
    session_id: str,
    menu_item_id: str,
    add_on_ids: Optional[List[str]] = Query(default=None),
    cart: Cart = Depends(get_cart),
):
    """Remove an item's lines from the cart."""
    cart.remove_item(menu_item_id, add_on_ids)
    return _cart_response(session_id, cart)


@router.delete("/api/cart/{session_id}", response_model=CartResponse)
async def clear_cart(session_id: str, cart: Cart = Depends(get_cart)):
    """Empty the cart."""
    cart.clear()
    return _cart_response(session_id, cart)


@router.post("/api/cart/{session_id}/checkout", response_model=Order, status_code=201)
async def checkout(
    session_id: str,
    body: CheckoutRequest,
    cart: Cart = Depends(get_cart),
    order_service: OrderLifecycleService = Depends(get_order_service),
):
    """Place an order from the cart; the cart is cleared only on success."""
    logger.info(f"[CART] {session_id}: checkout for table {body.table_number}")
    order = await order_service.place_order(
        table_number=body.table_number,
        cart_items=cart.items,
        subtotal=cart.subtotal,
        tax=cart.tax,
        total=cart.total,
        special_notes=body.special_notes,
    )
    cart.clear()
    return order
