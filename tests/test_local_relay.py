"""Tests for the in-process relay."""

import re

import pytest

from hexategy.models import GameConfig
from hexategy.protocol import MsgType
from hexategy.server.errors import RelayError
from hexategy.server.local_relay import LocalRelay
from hexategy.utils import GameRNG

ROOM_CODE = re.compile(r"^[A-HJ-NP-Z2-9]{3}-[A-HJ-NP-Z2-9]{3}$")
CLIENT_ID = re.compile(r"^[a-z0-9]{7}$")


@pytest.fixture
def relay():
    return LocalRelay(rng=GameRNG(42))


@pytest.fixture
def room(relay):
    code, host = relay.create_room("Host")
    guest = relay.join_room(code, "Guest")
    return code, host, guest


def types(relay, client_id):
    return [envelope["type"] for envelope in relay.messages(client_id)]


def errors(relay, client_id):
    return [e["payload"]["message"] for e in relay.messages(client_id, MsgType.RELAY_ERROR)]


class TestRooms:
    """Test room creation, joining and leaving."""

    def test_create_room(self, relay):
        code, host = relay.create_room("Host")

        assert ROOM_CODE.match(code)
        assert CLIENT_ID.match(host)
        assert types(relay, host) == [MsgType.ROOM_CREATED, MsgType.GAME_STATE]
        created = relay.messages(host)[0]
        assert created["payload"] == {"roomCode": code, "clientId": host}

    def test_join_room(self, relay, room):
        code, host, guest = room

        assert types(relay, guest) == [
            MsgType.ROOM_JOINED,
            MsgType.PLAYER_JOINED,
            MsgType.GAME_STATE,
        ]
        assert relay.messages(host, MsgType.PLAYER_JOINED)[0]["payload"] == {
            "id": guest,
            "name": "Guest",
        }
        players = relay.last_state(host)["players"]
        assert [p["id"] for p in players] == [host, guest]

    def test_broadcasts_carry_host_as_sender(self, relay, room):
        _, host, guest = room
        assert relay.messages(guest, MsgType.GAME_STATE)[-1]["from"] == host

    def test_join_is_case_insensitive(self, relay):
        code, _ = relay.create_room("Host")
        guest = relay.join_room(code.lower(), "Guest")
        assert types(relay, guest)[0] == MsgType.ROOM_JOINED

    def test_join_unknown_room(self, relay):
        with pytest.raises(RelayError, match="not found"):
            relay.join_room("ZZZ-999")

    def test_guest_leaves(self, relay, room):
        _, host, guest = room
        relay.leave(guest)

        left = relay.messages(host, MsgType.PLAYER_LEFT)[-1]["payload"]
        assert left == {"id": guest, "isAdmin": False}
        assert [p["id"] for p in relay.last_state(host)["players"]] == [host]

    def test_host_leaving_closes_room(self, relay, room):
        code, host, guest = room
        relay.leave(host)

        assert errors(relay, guest) == ["Host disconnected"]
        assert code not in relay.rooms
        relay.send(guest, MsgType.PLAYER_READY)
        assert errors(relay, guest)[-1] == "Not in a room"


class TestMessageChecks:
    """Test relay errors."""

    def test_unknown_type(self, relay, room):
        _, _, guest = room
        relay.send(guest, "player:dance")
        assert errors(relay, guest) == ["Unknown message type: player:dance"]

    def test_admin_command_from_guest(self, relay, room):
        _, host, guest = room
        relay.send(guest, MsgType.ADMIN_START)

        assert errors(relay, guest) == ["Only the host can send admin:start"]
        assert relay.last_state(host)["phase"] == "lobby"

    def test_invalid_admin_payload(self, relay, room):
        _, host, _ = room
        relay.send(host, MsgType.ADMIN_CONFIG, {"defenseAdvantage": 3})
        assert errors(relay, host)[-1].startswith("Invalid admin:config payload")

    def test_null_config_value(self, relay, room):
        _, host, guest = room
        relay.send(host, MsgType.ADMIN_CONFIG, {"roundDuration": None})
        assert errors(relay, host)[-1].startswith("Invalid admin:config payload")

        relay.send(host, MsgType.ADMIN_START)
        duration = GameConfig().round_duration
        assert relay.messages(guest, MsgType.ROUND_START)[-1]["payload"] == {
            "round": 1,
            "duration": duration,
        }
        relay.advance(duration + 2)
        assert relay.messages(guest, MsgType.ROUND_RESOLVE)

    def test_max_rounds_can_be_cleared(self, relay, room):
        _, host, _ = room
        relay.send(host, MsgType.ADMIN_CONFIG, {"maxRounds": 5})
        relay.send(host, MsgType.ADMIN_CONFIG, {"maxRounds": None})
        assert errors(relay, host) == []
        assert relay.last_state(host)["config"]["maxRounds"] is None

    def test_invalid_config_value(self, relay, room):
        _, host, _ = room
        relay.send(host, MsgType.ADMIN_CONFIG, {"victoryCondition": "annihilation"})
        assert "Invalid victory_condition" in errors(relay, host)[-1]

    def test_client_without_room(self, relay):
        relay.send("nobody1", MsgType.PLAYER_READY)
        assert errors(relay, "nobody1") == ["Not in a room"]


class TestGameFlow:
    """Test whole rounds through the relay."""

    def test_config_then_start(self, relay, room):
        _, host, guest = room
        relay.send(host, MsgType.ADMIN_CONFIG, {"roundDuration": 10, "mapSize": 3})
        assert relay.last_state(guest)["config"]["roundDuration"] == 10

        relay.send(host, MsgType.ADMIN_START)

        state = relay.last_state(guest)
        assert state["phase"] == "planning"
        assert len(state["regions"]) == 37
        assert relay.messages(guest, MsgType.ROUND_START)[-1]["payload"] == {
            "round": 1,
            "duration": 10,
        }

    def test_round_resolves_on_clock(self, relay, room):
        _, host, guest = room
        relay.send(host, MsgType.ADMIN_START)
        state = relay.last_state(guest)
        source = next(r for r in state["regions"] if r["ownerId"] == guest)
        by_id = {r["id"]: r for r in state["regions"]}
        target = next(n for n in source["neighbors"] if by_id[n]["ownerId"] is None)

        relay.send(
            guest,
            MsgType.PLAYER_ORDERS,
            {"orders": [{"fromRegionId": source["id"], "toRegionId": target, "troops": 4}]},
        )
        assert relay.advance(21) == 1

        resolve = relay.messages(host, MsgType.ROUND_RESOLVE)[-1]["payload"]
        assert resolve["round"] == 1
        captured = next(d for d in resolve["regionDeltas"] if d["regionId"] == target)
        assert captured["newOwnerId"] == guest
        assert captured["attackers"] == [{"playerId": guest, "troops": 4}]

        relay.advance(2.5)
        assert relay.messages(guest, MsgType.ROUND_START)[-1]["payload"]["round"] == 2

    def test_kick(self, relay, room):
        _, host, guest = room
        relay.send(host, MsgType.ADMIN_KICK, {"id": guest})

        assert relay.messages(guest, MsgType.PLAYER_KICK)[-1]["payload"] == {"id": guest}
        assert [p["id"] for p in relay.last_state(host)["players"]] == [host]

        received = len(relay.messages(host))
        relay.send(guest, MsgType.PLAYER_READY)
        assert len(relay.messages(host)) == received

    def test_rename(self, relay, room):
        _, host, guest = room
        relay.send(host, MsgType.ADMIN_RENAME, {"id": guest, "name": "Gus"})
        names = {p["id"]: p["name"] for p in relay.last_state(guest)["players"]}
        assert names[guest] == "Gus"

    def test_fog_is_applied_per_recipient(self, relay, room):
        _, host, guest = room
        relay.send(host, MsgType.ADMIN_CONFIG, {"visibilityMode": "fog_strict"})
        relay.send(host, MsgType.ADMIN_START)

        for viewer in (host, guest):
            regions = relay.last_state(viewer)["regions"]
            own = [r for r in regions if r["ownerId"] == viewer]
            hidden = [r for r in regions if not r["visible"]]
            assert len(own) == 1 and own[0]["visible"]
            assert hidden
            assert all(r["ownerId"] is None and r["troops"] is None for r in hidden)

    def test_late_joiner_gets_state(self, relay, room):
        code, host, _ = room
        relay.send(host, MsgType.ADMIN_START)
        late = relay.join_room(code, "Late")

        state = relay.last_state(late)
        assert state["phase"] == "planning"
        assert late not in {p["id"] for p in state["players"]}

    def test_rooms_are_independent(self, relay, room):
        code, host, _ = room
        other_code, other_host = relay.create_room("Other")
        relay.join_room(other_code, "Other guest")
        relay.send(host, MsgType.ADMIN_START)

        assert relay.last_state(other_host)["phase"] == "lobby"
        assert relay.rooms[code].orchestrator.phase == "planning"
