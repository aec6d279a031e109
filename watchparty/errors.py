"""
Error taxonomy for room operations.

None of these are fatal: the dispatcher turns RoomNotFound and RoomFull into
events for the requesting connection, and drops NotHost and
UnrecognizedAction after logging them.
"""


class WatchPartyError(Exception):
    """Base class for all room operation errors"""


class RoomNotFound(WatchPartyError):
    def __init__(self, room_id):
        super().__init__(f"room {room_id!r} does not exist")
        self.room_id = room_id


class RoomFull(WatchPartyError):
    def __init__(self, room_id, capacity: int):
        super().__init__(f"room {room_id!r} is full ({capacity} participants)")
        self.room_id = room_id
        self.capacity = capacity


class NotHost(WatchPartyError):
    def __init__(self, room_id, connection_id):
        super().__init__(f"{connection_id} is not the host of room {room_id!r}")
        self.room_id = room_id
        self.connection_id = connection_id


class UnrecognizedAction(WatchPartyError):
    def __init__(self, action):
        super().__init__(f"unrecognized playback action {action!r}")
        self.action = action
