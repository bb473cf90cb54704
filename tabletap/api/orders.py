"""Order API endpoints for diners, the staff dashboard and the kitchen display."""
import logging
from decimal import Decimal
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from tabletap.core.dependencies import get_menu_repository, get_order_service
from tabletap.services.cart.models import CartItem
from tabletap.services.menu.repository import MenuRepository
from tabletap.services.orders.models import Order
from tabletap.services.orders.service import OrderLifecycleService
from tabletap.services.orders.status import OrderStatus, STATUS_ACTIONS, group_orders


router = APIRouter()
logger = logging.getLogger(__name__)


class OrderLineRequest(BaseModel):
    """One order line by catalog id; prices come from the menu."""
    menu_item_id: str
    quantity: int = Field(default=1, ge=1)
    add_on_ids: List[str] = []
    special_instructions: Optional[str] = None


class PlaceOrderRequest(BaseModel):
    """Order placement request."""
    table_number: int = Field(ge=1)
    items: List[OrderLineRequest]
    subtotal: Optional[Decimal] = None
    tax: Optional[Decimal] = None
    total: Optional[Decimal] = None
    special_notes: Optional[str] = None


class StatusUpdateRequest(BaseModel):
    """Status change request; must name the order's next status."""
    status: OrderStatus


class DashboardResponse(BaseModel):
    """Orders grouped into dashboard columns."""
    columns: Dict[str, List[Order]]
    actions: Dict[str, str] = {status.value: label for status, label in STATUS_ACTIONS.items()}


@router.post("/api/orders", response_model=Order, status_code=201)
async def place_order(
    body: PlaceOrderRequest,
    request: Request,
    order_service: OrderLifecycleService = Depends(get_order_service),
    menu_repository: MenuRepository = Depends(get_menu_repository),
):
    """Place an order for a table, pricing every line from the menu catalog."""
    logger.info(
        f"[ORDERS] Place order - table {body.table_number}, {len(body.items)} lines, "
        f"Client: {request.client.host if request.client else 'unknown'}"
    )
    items = []
    for line in body.items:
        menu_item = await menu_repository.get_orderable_item(line.menu_item_id)
        items.append(
            CartItem(
                menu_item=menu_item,
                quantity=line.quantity,
                selected_add_ons=menu_repository.resolve_add_ons(menu_item, line.add_on_ids),
                special_instructions=line.special_instructions or None,
            )
        )
    return await order_service.place_order(
        table_number=body.table_number,
        cart_items=items,
        subtotal=body.subtotal,
        tax=body.tax,
        total=body.total,
        special_notes=body.special_notes,
    )


@router.get("/api/orders", response_model=List[Order])
async def list_orders(
    status: Optional[List[OrderStatus]] = Query(default=None),
    table_number: Optional[int] = None,
    order_service: OrderLifecycleService = Depends(get_order_service),
):
    """List orders, optionally filtered by status and table."""
    orders = await order_service.list_active(statuses=status, table_number=table_number)
    logger.debug(f"[ORDERS] Listed {len(orders)} orders - status: {status}, table: {table_number}")
    return orders


@router.get("/api/orders/kitchen", response_model=List[Order])
async def kitchen_orders(
    order_service: OrderLifecycleService = Depends(get_order_service),
):
    """Orders the kitchen is working on (accepted or preparing)."""
    return await order_service.list_kitchen_orders()


@router.get("/api/orders/dashboard", response_model=DashboardResponse)
async def dashboard_orders(
    order_service: OrderLifecycleService = Depends(get_order_service),
):
    """All orders grouped by status column."""
    orders = await order_service.list_active()
    return DashboardResponse(columns=group_orders(orders))


@router.get("/api/orders/{order_id}", response_model=Order)
async def get_order(
    order_id: str,
    order_service: OrderLifecycleService = Depends(get_order_service),
):
    """Get an order's current state (customer tracker)."""
    return await order_service.get_order(order_id)


@router.patch("/api/orders/{order_id}/status", response_model=Order)
async def update_order_status(
    order_id: str,
    body: StatusUpdateRequest,
    order_service: OrderLifecycleService = Depends(get_order_service),
):
    """Move an order to its next status."""
    logger.info(f"[ORDERS] Status update requested - order {order_id} -> {body.status}")
    return await order_service.update_status(order_id, body.status)


@router.post("/api/orders/{order_id}/advance", response_model=Order)
async def advance_order(
    order_id: str,
    order_service: OrderLifecycleService = Depends(get_order_service),
):
    """Apply the staff action for the order's current status."""
    logger.info(f"[ORDERS] Advance requested - order {order_id}")
    return await order_service.advance(order_id)
