"""
Runtime configuration read from the environment
"""
import os
from pathlib import Path

PORT = int(os.environ.get("PORT", 3000))
SERVER_HOST = os.environ.get("SERVER_HOST", "0.0.0.0")
STATIC_DIR = Path(os.environ.get("WATCHPARTY_STATIC_DIR", "./public"))
MAX_PARTICIPANTS_PER_ROOM = int(os.environ.get("WATCHPARTY_MAX_PARTICIPANTS", 10))
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
