"""
Routes inbound connection events to room operations.

Each event is handled to completion under the registry lock and yields a
list of Deliveries: a message plus the concrete connection ids it goes to.
Sending happens afterwards, outside the lock.
"""
import logging
from typing import Dict, List, NamedTuple, Tuple

from .errors import NotHost, RoomNotFound, UnrecognizedAction
from .registry import RoomRegistry
from .state import Audience, MediaType, Notification, PlaybackAction, Room

logger = logging.getLogger("watch_party")


class Delivery(NamedTuple):
    connection_ids: Tuple[str, ...]
    message: Dict[str, object]


def make_message(event: str, payload=None) -> Dict[str, object]:
    return {"type": event, "data": {} if payload is None else payload}


def resolve(room: Room, notifications: List[Notification]) -> List[Delivery]:
    """Turn audience-tagged notifications into per-connection deliveries"""
    deliveries = []
    for note in notifications:
        if note.audience is Audience.CONNECTION:
            targets = (note.target,)
        elif note.audience is Audience.ROOM_EXCEPT:
            targets = tuple(cid for cid in room.participants if cid != note.target)
        else:
            targets = tuple(room.participants)
        if targets:
            deliveries.append(Delivery(targets, make_message(note.event, note.payload)))
    return deliveries


def reply(connection_id: str, event: str, payload=None) -> Delivery:
    return Delivery((connection_id,), make_message(event, payload))


class ConnectionDispatcher:
    def __init__(self, registry: RoomRegistry):
        self.registry = registry
        self._handlers = {
            "createRoom": self.create_room,
            "joinRoom": self.join_room,
            "playbackAction": self.playback_action,
        }

    def handle(self, connection_id: str, event: str, data) -> List[Delivery]:
        """Dispatch one inbound event. Unknown events are dropped."""
        handler = self._handlers.get(event)
        if handler is None:
            logger.debug("Ignoring unknown event %r from %s", event, connection_id)
            return []
        if not isinstance(data, dict):
            data = {}
        with self.registry.lock:
            return handler(connection_id, data)

    def _leave_current_room(self, connection_id: str) -> List[Delivery]:
        room = self.registry.room_of(connection_id)
        if room is None:
            return []

        notifications = room.remove_participant(connection_id)
        self.registry.unindex(connection_id)
        logger.info("User %s removed from room %s", connection_id, room.id)
        if room.is_empty:
            self.registry.delete(room.id)
            logger.info("🗑️ Room %s is empty and has been deleted", room.id)
            return []
        return resolve(room, notifications)

    def create_room(self, connection_id: str, data: dict) -> List[Delivery]:
        deliveries = self._leave_current_room(connection_id)

        media_url = data.get("mediaUrl")
        if not isinstance(media_url, str):
            media_url = ""
        room = self.registry.create(connection_id, media_url, MediaType.parse(data.get("mediaType")))
        logger.info("🎬 Room created: %s by %s with media %s", room.id, connection_id, room.media_url)

        deliveries.append(reply(connection_id, "roomCreated", {
            "roomId": room.id,
            "mediaUrl": room.media_url,
            "mediaType": room.media_type.value,
        }))
        deliveries.extend(resolve(room, [room.participants_notification()]))
        return deliveries

    def join_room(self, connection_id: str, data: dict) -> List[Delivery]:
        try:
            room = self.registry.require(data.get("roomId"))
        except RoomNotFound as e:
            logger.info("User %s could not join: %s", connection_id, e)
            return [reply(connection_id, "roomNotFound")]

        if room.has_participant(connection_id):
            logger.debug("User %s re-joined room %s, resending state", connection_id, room.id)
            return resolve(room, room.welcome(connection_id))

        if room.is_full:
            logger.info("User %s failed to join room %s: room full", connection_id, room.id)
            return [reply(connection_id, "roomFull")]

        # Capacity is checked first: a rejected join must not evict from the current room
        deliveries = self._leave_current_room(connection_id)
        notifications = room.join(connection_id)
        self.registry.index(connection_id, room.id)
        logger.info("✅ User %s joined room %s (%d/%d)",
                    connection_id, room.id, len(room.participants), room.capacity)
        return deliveries + resolve(room, notifications)

    def playback_action(self, connection_id: str, data: dict) -> List[Delivery]:
        room = self.registry.get(data.get("roomId"))
        if room is None:
            logger.debug("Playback action from %s for unknown room %r", connection_id, data.get("roomId"))
            return []

        try:
            action = PlaybackAction.parse(data.get("action"))
            notifications = room.apply_host_action(
                connection_id,
                action,
                time=data.get("time"),
                media_url=data.get("mediaUrl"),
                media_type=data.get("mediaType"),
            )
        except NotHost:
            logger.info("User %s (not host) sent playbackAction in room %s. Ignoring.",
                        connection_id, room.id)
            return []
        except UnrecognizedAction as e:
            logger.debug("Room %s: %s", room.id, e)
            return []

        logger.info("▶️ Playback action in room %s by host %s: %s",
                    room.id, connection_id, action.value)
        return resolve(room, notifications)

    def disconnect(self, connection_id: str) -> List[Delivery]:
        with self.registry.lock:
            return self._leave_current_room(connection_id)
