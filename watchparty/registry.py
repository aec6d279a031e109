"""
Registry of live rooms and of which room each connection belongs to
"""
import logging
import threading
from typing import Callable, Dict, Optional

from .config import MAX_PARTICIPANTS_PER_ROOM
from .errors import RoomNotFound
from .state import MediaType, Room
from .utils import generate_room_id

logger = logging.getLogger("watch_party")


class RoomRegistry:
    """Owns every Room and the connection -> room index.

    All reads and writes must happen while holding `lock`. The dispatcher
    takes it once per inbound event, so a whole operation (capacity check
    and append, host check and mutate, removal and failover and deletion)
    is atomic.
    """

    def __init__(self, capacity: int = MAX_PARTICIPANTS_PER_ROOM,
                 id_generator: Callable[[], str] = generate_room_id):
        self.capacity = capacity
        self.lock = threading.RLock()
        self._generate_id = id_generator
        self._rooms: Dict[str, Room] = {}
        self._connections: Dict[str, str] = {}

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, room_id):
        return room_id in self._rooms

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def _unique_id(self) -> str:
        room_id = self._generate_id()
        while room_id in self._rooms:
            logger.debug("Room ID collision on %s, regenerating", room_id)
            room_id = self._generate_id()
        return room_id

    def create(self, connection_id: str, media_url: str = "",
               media_type: MediaType = MediaType.VIDEO) -> Room:
        room = Room(self._unique_id(), connection_id, media_url, media_type, self.capacity)
        self._rooms[room.id] = room
        self.index(connection_id, room.id)
        return room

    def get(self, room_id) -> Optional[Room]:
        if not isinstance(room_id, str):
            return None
        return self._rooms.get(room_id)

    def require(self, room_id) -> Room:
        room = self.get(room_id)
        if room is None:
            raise RoomNotFound(room_id)
        return room

    def delete(self, room_id: str):
        room = self._rooms.pop(room_id, None)
        if room is None:
            return
        for connection_id in room.participants:
            self.unindex(connection_id)

    def room_of(self, connection_id: str) -> Optional[Room]:
        room_id = self._connections.get(connection_id)
        return self._rooms.get(room_id) if room_id else None

    def index(self, connection_id: str, room_id: str):
        self._connections[connection_id] = room_id

    def unindex(self, connection_id: str):
        self._connections.pop(connection_id, None)
