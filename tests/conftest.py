"""
Shared fixtures for the room engine and dispatcher tests.
"""
import pytest

from watchparty.dispatcher import ConnectionDispatcher
from watchparty.registry import RoomRegistry


def events_for(deliveries, connection_id):
    """(type, data) pairs delivered to one connection, in send order"""
    return [
        (d.message["type"], d.message["data"])
        for d in deliveries
        if connection_id in d.connection_ids
    ]


@pytest.fixture
def registry():
    return RoomRegistry(capacity=10)


@pytest.fixture
def dispatcher(registry):
    return ConnectionDispatcher(registry)


@pytest.fixture
def room_id(dispatcher):
    """A room created by connection `host` playing a.mp4"""
    deliveries = dispatcher.handle("host", "createRoom", {"mediaUrl": "a.mp4"})
    return deliveries[0].message["data"]["roomId"]
