"""
Open websocket connections, addressable by connection id
"""
import json
import logging
from typing import Dict, Iterable

from aiohttp import WSCloseCode, web

from .dispatcher import Delivery

logger = logging.getLogger("watch_party")


class ConnectionHub:
    def __init__(self):
        self._sockets: Dict[str, web.WebSocketResponse] = {}

    def __len__(self):
        return len(self._sockets)

    def __contains__(self, connection_id):
        return connection_id in self._sockets

    def register(self, connection_id: str, ws: web.WebSocketResponse):
        self._sockets[connection_id] = ws

    def unregister(self, connection_id: str):
        self._sockets.pop(connection_id, None)

    async def send(self, connection_id: str, message: dict):
        await self.deliver([Delivery((connection_id,), message)])

    async def deliver(self, deliveries: Iterable[Delivery]):
        """Send each delivery to its recipients, pruning dead sockets

        Ordering is per call only. Deliveries computed by different
        connections' handlers are sent from separate tasks and may interleave
        at a shared recipient.
        """
        dead = set()
        for delivery in deliveries:
            text = json.dumps(delivery.message)
            for connection_id in delivery.connection_ids:
                ws = self._sockets.get(connection_id)
                if ws is None or connection_id in dead:
                    continue
                try:
                    await ws.send_str(text)
                except Exception as e:
                    logger.debug(f"Failed to send to {connection_id}: {e}")
                    dead.add(connection_id)

        for connection_id in dead:
            self.unregister(connection_id)

    async def close_all(self):
        for ws in list(self._sockets.values()):
            await ws.close(code=WSCloseCode.GOING_AWAY, message=b"Server shutdown")
        self._sockets.clear()
