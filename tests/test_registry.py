"""
Tests for RoomRegistry: unique IDs, lookup, deletion and the connection index.
"""
import pytest

from watchparty.errors import RoomNotFound
from watchparty.registry import RoomRegistry
from watchparty.state import MediaType
from watchparty.utils import generate_room_id


def scripted_ids(*ids):
    return iter(ids).__next__


class TestRoomRegistry:
    def test_create_registers_host(self, registry):
        room = registry.create("host", "a.mp4", MediaType.AUDIO)

        assert registry.get(room.id) is room
        assert room.id in registry
        assert room.host_connection_id == "host"
        assert room.media_type is MediaType.AUDIO
        assert registry.room_of("host") is room
        assert len(registry) == 1

    def test_regenerates_on_collision(self):
        registry = RoomRegistry(id_generator=scripted_ids("AAAAAA", "AAAAAA", "AAAAAA", "BBBBBB"))

        first = registry.create("c1")
        second = registry.create("c2")

        assert first.id == "AAAAAA"
        assert second.id == "BBBBBB"

    def test_ids_unique_over_many_rooms(self):
        # A 1-character alphabet of 36 symbols forces frequent collisions
        registry = RoomRegistry(id_generator=lambda: generate_room_id(1))
        ids = [registry.create(f"c{i}").id for i in range(36)]
        assert len(set(ids)) == 36

    def test_capacity_is_passed_to_rooms(self):
        registry = RoomRegistry(capacity=3)
        assert registry.create("c").capacity == 3

    def test_get_unknown(self, registry):
        assert registry.get("NOPE00") is None
        assert registry.get(None) is None
        assert registry.get(["list"]) is None

    def test_delete_unindexes_members(self, registry):
        room = registry.create("host")
        room.join("guest")
        registry.index("guest", room.id)

        registry.delete(room.id)

        assert room.id not in registry
        assert registry.room_of("host") is None
        assert registry.room_of("guest") is None
        assert registry.connection_count == 0

    def test_delete_unknown_is_noop(self, registry):
        registry.delete("NOPE00")
        assert len(registry) == 0

    def test_require_returns_room(self, registry):
        room = registry.create("host")
        assert registry.require(room.id) is room

    def test_require_unknown_raises(self, registry):
        with pytest.raises(RoomNotFound) as exc_info:
            registry.require("NOPE00")
        assert exc_info.value.room_id == "NOPE00"

    def test_connection_count_tracks_members(self, registry):
        room = registry.create("host")
        room.join("guest")
        registry.index("guest", room.id)
        assert registry.connection_count == 2

        registry.unindex("guest")
        assert registry.connection_count == 1
