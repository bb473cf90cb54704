"""Websocket feed of order change events."""
import asyncio
import logging
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect

from tabletap.core.dependencies import get_notifier
from tabletap.services.realtime.notifier import OrderChangeEvent, OrderChangeNotifier

router = APIRouter()
logger = logging.getLogger(__name__)

# Events beyond this are dropped for a slow client; it refetches on the next one
MAX_PENDING_EVENTS = 100


async def _forward_events(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        event = await queue.get()
        await websocket.send_json({"type": "order_change", **event.model_dump(mode="json")})


async def _wait_for_disconnect(websocket: WebSocket) -> None:
    while True:
        message = await websocket.receive()
        if message["type"] == "websocket.disconnect":
            return


@router.websocket("/ws/orders")
async def order_changes(
    websocket: WebSocket,
    notifier: OrderChangeNotifier = Depends(get_notifier),
):
    """Push every order change to the client, which refetches what it shows."""
    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue(maxsize=MAX_PENDING_EVENTS)

    def enqueue(event: OrderChangeEvent) -> None:
        try:
            queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(f"[REALTIME] Websocket backlog full, dropping event for order {event.order_id}")

    unsubscribe = notifier.on_change(enqueue)
    logger.info(f"[REALTIME] Websocket subscribed - {notifier.subscriber_count} subscribers")
    tasks = []
    try:
        await websocket.send_json({"type": "subscribed"})
        tasks = [
            asyncio.create_task(_forward_events(websocket, queue)),
            asyncio.create_task(_wait_for_disconnect(websocket)),
        ]
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            error = task.exception()
            if error is not None and not isinstance(error, WebSocketDisconnect):
                raise error
        logger.info("[REALTIME] Websocket disconnected")
    except WebSocketDisconnect:
        logger.info("[REALTIME] Websocket disconnected")
    finally:
        for task in tasks:
            task.cancel()
        unsubscribe()
