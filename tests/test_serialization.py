"""Tests for wire-format conversion."""

import json

from hexategy.models import (
    AttackContribution,
    GameConfig,
    GameSnapshot,
    HexCoord,
    PlayerInfo,
    Region,
    RegionDelta,
    RoundResult,
)
from hexategy.utils.serialization import (
    config_changes_from_wire,
    deserialize_region,
    parse_orders,
    serialize_config,
    serialize_order,
    serialize_round_result,
    serialize_snapshot,
)


def test_snapshot_payload():
    region = Region(id="r0", coord=HexCoord(0, 0), owner_id="p1", troops=3, neighbors=["r1"])
    player = PlayerInfo(id="p1", name="Ana", color="#e05c5c", is_admin=True)
    payload = serialize_snapshot(
        GameSnapshot(players=[player], regions=[region], round=2, phase="planning")
    )

    assert payload["round"] == 2
    assert payload["phase"] == "planning"
    assert payload["players"] == [
        {
            "id": "p1",
            "name": "Ana",
            "color": "#e05c5c",
            "isAdmin": True,
            "isReady": False,
            "isEliminated": False,
        }
    ]
    assert payload["regions"][0] == {
        "id": "r0",
        "coord": {"q": 0, "r": 0},
        "ownerId": "p1",
        "troops": 3,
        "neighbors": ["r1"],
    }


def test_region_from_wire():
    region = deserialize_region(
        {"id": "r4", "coord": {"q": 1, "r": -1}, "ownerId": None, "troops": 2, "neighbors": []}
    )
    assert region.coord == HexCoord(1, -1)
    assert region.owner_id is None


def test_config_uses_camel_case():
    wire = serialize_config(GameConfig(round_duration=30))
    assert wire["roundDuration"] == 30
    assert wire["defenseAdvantage"] == 0.55
    assert "round_duration" not in wire


def test_config_changes_from_wire():
    changes = config_changes_from_wire({"bonusTroops": 5, "mapSize": 7, "turbo": True})
    assert changes == {"bonus_troops": 5, "map_size": 7}


def test_round_result_payload():
    result = RoundResult(
        round=3,
        region_deltas=[
            RegionDelta(
                region_id="r2",
                new_owner_id="p2",
                new_troops=4,
                attackers=[AttackContribution(player_id="p2", troops=6)],
            )
        ],
        eliminated=["p1"],
        winner="p2",
    )
    assert serialize_round_result(result) == {
        "round": 3,
        "regionDeltas": [
            {
                "regionId": "r2",
                "newOwnerId": "p2",
                "newTroops": 4,
                "attackers": [{"playerId": "p2", "troops": 6}],
            }
        ],
        "eliminated": ["p1"],
        "winner": "p2",
    }


def test_parse_orders_drops_malformed_entries():
    raw = [
        {"fromRegionId": "r0", "toRegionId": "r1", "troops": 3},
        {"fromRegionId": "r0", "toRegionId": "r2", "troops": 2.9},
        {"fromRegionId": "r0", "troops": 1},
        {"fromRegionId": "r0", "toRegionId": "r1", "troops": "lots"},
        {"fromRegionId": "r0", "toRegionId": "r1", "troops": True},
        {"fromRegionId": "r0", "toRegionId": "r1", "troops": -4},
        {"fromRegionId": 7, "toRegionId": "r1", "troops": 1},
        "r0->r1",
    ]
    orders = parse_orders(raw)
    assert [serialize_order(o) for o in orders] == [
        {"fromRegionId": "r0", "toRegionId": "r1", "troops": 3},
        {"fromRegionId": "r0", "toRegionId": "r2", "troops": 2},
    ]


def test_parse_orders_drops_non_finite_troops():
    raw = json.loads(
        '[{"fromRegionId": "r0", "toRegionId": "r1", "troops": Infinity},'
        ' {"fromRegionId": "r0", "toRegionId": "r1", "troops": NaN},'
        ' {"fromRegionId": "r0", "toRegionId": "r2", "troops": 2}]'
    )
    orders = parse_orders(raw)
    assert [serialize_order(o) for o in orders] == [
        {"fromRegionId": "r0", "toRegionId": "r2", "troops": 2},
    ]


def test_parse_orders_rejects_non_list():
    assert parse_orders(None) == []
    assert parse_orders({"fromRegionId": "r0"}) == []
