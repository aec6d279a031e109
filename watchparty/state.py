"""
In-memory room state and the playback state machine.

A Room never touches a socket. Every mutating operation returns the list of
notifications it produced; the dispatcher resolves their audiences to
connection ids and the hub delivers them.
"""
import logging
import math
from enum import Enum
from typing import Dict, List, NamedTuple, Optional

from .errors import NotHost, RoomFull, UnrecognizedAction

logger = logging.getLogger("watch_party")


class MediaType(str, Enum):
    VIDEO = "video"
    AUDIO = "audio"

    @classmethod
    def parse(cls, value) -> "MediaType":
        """Unknown or missing media types fall back to video"""
        try:
            return cls(value)
        except ValueError:
            if value is not None:
                logger.debug("Unknown media type %r, using video", value)
            return cls.VIDEO


class PlaybackState(str, Enum):
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackAction(str, Enum):
    LOAD = "load"
    PLAY = "play"
    PAUSE = "pause"
    SEEK = "seek"
    TIME_UPDATE = "timeUpdate"
    ENDED = "ended"

    @classmethod
    def parse(cls, value) -> "PlaybackAction":
        try:
            return cls(value)
        except ValueError:
            raise UnrecognizedAction(value) from None


class Audience(str, Enum):
    CONNECTION = "connection"    # only `target`
    ROOM = "room"                # every participant
    ROOM_EXCEPT = "room_except"  # every participant but `target`


class Notification(NamedTuple):
    event: str
    payload: object
    audience: Audience
    target: Optional[str] = None


def coerce_time(value) -> Optional[float]:
    """Return a usable playback position, or None if the value is not one"""
    if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    if not math.isfinite(value) or value < 0:
        return None
    return value


class Room:
    """Playback state, participants and host pointer of one room.

    Participants are kept in join order. The host flag is derived from
    `host_connection_id`, so exactly one participant is host while the room
    is non-empty.
    """

    def __init__(self, room_id: str, host_connection_id: str, media_url: str = "",
                 media_type: MediaType = MediaType.VIDEO, capacity: int = 10):
        self.id = room_id
        self.media_url = media_url
        self.media_type = media_type
        self.playback_state = PlaybackState.PAUSED
        self.current_time = 0.0
        self.host_connection_id = host_connection_id
        self.participants: List[str] = [host_connection_id]
        self.capacity = capacity

    def __repr__(self):
        return (f"<Room {self.id} host={self.host_connection_id} "
                f"participants={len(self.participants)} {self.playback_state.value}@{self.current_time}>")

    @property
    def is_empty(self) -> bool:
        return not self.participants

    @property
    def is_full(self) -> bool:
        return len(self.participants) >= self.capacity

    def has_participant(self, connection_id: str) -> bool:
        return connection_id in self.participants

    def snapshot(self) -> Dict[str, object]:
        return {
            "mediaUrl": self.media_url,
            "mediaType": self.media_type.value,
            "playbackState": self.playback_state.value,
            "currentTime": self.current_time,
        }

    def participants_view(self) -> List[Dict[str, object]]:
        return [
            {"id": cid, "isHost": cid == self.host_connection_id}
            for cid in self.participants
        ]

    def participants_notification(self) -> Notification:
        return Notification("participantsUpdate", self.participants_view(), Audience.ROOM)

    def welcome(self, connection_id: str) -> List[Notification]:
        """State sync sent privately to a connection that (re)joins"""
        snapshot = self.snapshot()
        return [
            Notification("joinedRoom", {"roomId": self.id, **snapshot},
                          Audience.CONNECTION, connection_id),
            Notification("initialSync", {**snapshot, "isHost": False},
                          Audience.CONNECTION, connection_id),
        ]

    # ------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------

    def join(self, connection_id: str) -> List[Notification]:
        if self.is_full:
            raise RoomFull(self.id, self.capacity)

        self.participants.append(connection_id)
        return self.welcome(connection_id) + [
            Notification("userJoined", {"userId": connection_id},
                         Audience.ROOM_EXCEPT, connection_id),
            self.participants_notification(),
        ]

    def apply_host_action(self, connection_id: str, action: PlaybackAction, time=None,
                          media_url: Optional[str] = None, media_type=None) -> List[Notification]:
        if connection_id != self.host_connection_id:
            raise NotHost(self.id, connection_id)

        if action is PlaybackAction.LOAD and isinstance(media_url, str) and media_url:
            self.media_url = media_url
            self.media_type = MediaType.parse(media_type)
            self.current_time = 0.0
            self.playback_state = PlaybackState.PAUSED
            return [Notification("playbackUpdate", {
                "action": action.value,
                "mediaUrl": self.media_url,
                "mediaType": self.media_type.value,
                "currentTime": self.current_time,
                "playbackState": self.playback_state.value,
            }, Audience.ROOM)]

        position = coerce_time(time)
        if position is not None:
            self.current_time = position
        elif time is not None:
            logger.debug("Ignoring invalid time %r in room %s", time, self.id)

        if action is PlaybackAction.PLAY:
            self.playback_state = PlaybackState.PLAYING
        elif action in (PlaybackAction.PAUSE, PlaybackAction.ENDED):
            self.playback_state = PlaybackState.PAUSED
        # seek, timeUpdate and a load without media only move the clock

        return [Notification("playbackUpdate", {
            "action": action.value,
            "time": self.current_time,
            "currentTime": self.current_time,
            "playbackState": self.playback_state.value,
        }, Audience.ROOM_EXCEPT, connection_id)]

    def remove_participant(self, connection_id: str) -> List[Notification]:
        """Remove a participant, handing host over to the earliest joiner left.

        Returns no notifications when the room became empty; the caller is
        responsible for deleting it.
        """
        self.participants.remove(connection_id)
        if self.is_empty:
            return []

        notifications = []
        if self.host_connection_id == connection_id:
            self.host_connection_id = self.participants[0]
            logger.info("👑 Host left room %s, new host: %s", self.id, self.host_connection_id)
            notifications.append(
                Notification("hostAssigned", {}, Audience.CONNECTION, self.host_connection_id)
            )
        notifications.append(
            Notification("userDisconnected", {"userId": connection_id},
                          Audience.ROOM_EXCEPT, connection_id)
        )
        notifications.append(self.participants_notification())
        return notifications
