#!/usr/bin/env python3
"""
Watch Party - Entry Point
Serves the front-end and the websocket room channel
"""
import logging
import socket
from typing import Optional

from aiohttp import web

from watchparty import config
from watchparty.api import api_health, dispatcher_key, hub_key, registry_key, ws_watch_party
from watchparty.channels import ConnectionHub
from watchparty.dispatcher import ConnectionDispatcher
from watchparty.registry import RoomRegistry

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("watch_party")


async def index(request):
    return web.FileResponse(config.STATIC_DIR / 'index.html')


async def close_connections(app):
    await app[hub_key].close_all()


def create_app(registry: Optional[RoomRegistry] = None) -> web.Application:
    """Create and configure the aiohttp application"""
    app = web.Application()

    registry = registry or RoomRegistry()
    app[registry_key] = registry
    app[hub_key] = ConnectionHub()
    app[dispatcher_key] = ConnectionDispatcher(registry)

    app.router.add_get("/ws", ws_watch_party)
    app.router.add_get("/health", api_health)

    # Front-end, if one is shipped next to the server
    if config.STATIC_DIR.is_dir():
        app.router.add_get("/", index)
        app.router.add_static('/static', config.STATIC_DIR, name='static')
    else:
        logger.debug(f"No static directory at {config.STATIC_DIR}, serving API only")

    app.on_shutdown.append(close_connections)

    logger.info("🍿 Watch Party server ready")
    return app


def get_local_ip():
    """Get local network IP address"""
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except Exception:
        return "localhost"


def main():
    app = create_app()
    local_ip = get_local_ip()

    logger.info(f"🚀 Starting server on {config.SERVER_HOST}:{config.PORT}")
    logger.info(f"💡 Access at: http://{local_ip}:{config.PORT}")

    web.run_app(app, host=config.SERVER_HOST, port=config.PORT)


if __name__ == "__main__":
    main()
