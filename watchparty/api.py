"""
HTTP and WebSocket handlers for Watch Party
"""
import json
import logging

from aiohttp import web

from .channels import ConnectionHub
from .dispatcher import ConnectionDispatcher, make_message
from .registry import RoomRegistry
from .utils import generate_connection_id

logger = logging.getLogger("watch_party")

registry_key = web.AppKey("registry", RoomRegistry)
hub_key = web.AppKey("hub", ConnectionHub)
dispatcher_key = web.AppKey("dispatcher", ConnectionDispatcher)


def parse_frame(text: str):
    """Split a `{"type": ..., "data": ...}` frame into (event, data)"""
    try:
        frame = json.loads(text)
    except ValueError:
        # JSONDecodeError, or an integer literal past the int conversion limit
        logger.warning("Dropping non-JSON frame: %.80r", text)
        return None, None
    if not isinstance(frame, dict) or not isinstance(frame.get("type"), str):
        logger.warning("Dropping malformed frame: %.80r", text)
        return None, None
    return frame["type"], frame.get("data")


# ============================================================
# WEBSOCKET EVENT CHANNEL
# ============================================================

async def ws_watch_party(request: web.Request) -> web.WebSocketResponse:
    """One websocket per viewer; carries every room event both ways"""
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    hub = request.app[hub_key]
    dispatcher = request.app[dispatcher_key]
    connection_id = generate_connection_id()
    hub.register(connection_id, ws)
    logger.info(f"📡 User connected: {connection_id} (total: {len(hub)})")

    await hub.send(connection_id, make_message("connected", {"connectionId": connection_id}))

    try:
        async for msg in ws:
            if msg.type == web.WSMsgType.TEXT:
                # Keepalive
                if msg.data == "ping":
                    await ws.send_str("pong")
                    continue
                event, data = parse_frame(msg.data)
                if event is None:
                    continue
                logger.debug(f"{connection_id} -> {event}")
                try:
                    deliveries = dispatcher.handle(connection_id, event, data)
                except Exception:
                    logger.exception(f"Error handling {event} from {connection_id}, frame skipped")
                    continue
                await hub.deliver(deliveries)
            elif msg.type == web.WSMsgType.ERROR:
                logger.debug(f"WebSocket error for {connection_id}: {ws.exception()}")
    finally:
        hub.unregister(connection_id)
        await hub.deliver(dispatcher.disconnect(connection_id))
        logger.info(f"📡 User disconnected: {connection_id} (remaining: {len(hub)})")

    return ws


# ============================================================
# HEALTH
# ============================================================

async def api_health(request: web.Request) -> web.Response:
    registry = request.app[registry_key]
    with registry.lock:
        rooms = len(registry)
        participants = registry.connection_count
    return web.json_response({
        "ok": True,
        "rooms": rooms,
        "participants": participants,
        "connections": len(request.app[hub_key]),
    })
