"""Main FastAPI application."""
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager

from tabletap.core.errors import TableTapError
from tabletap.core.logging import setup_logging
from tabletap.db.database import init_db
from tabletap.api import cart, health, menu, orders, realtime, tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    setup_logging()
    await init_db()
    yield


app = FastAPI(
    title="TableTap",
    description="Table ordering backend: carts, orders, kitchen and dashboard",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(TableTapError)
async def tabletap_error_handler(request: Request, exc: TableTapError):
    """Report cart, order and store errors with their status code."""
    logger.info(
        f"[API] {request.method} {request.url.path} -> {exc.status_code} "
        f"{type(exc).__name__}: {exc.detail}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": type(exc).__name__},
    )


app.include_router(health.router, tags=["health"])
app.include_router(menu.router, tags=["menu"])
app.include_router(tables.router, tags=["tables"])
app.include_router(cart.router, tags=["cart"])
app.include_router(orders.router, tags=["orders"])
app.include_router(realtime.router, tags=["realtime"])
