"""Game state conversion to and from the JSON wire format.

Every message on the wire uses camelCase keys (``ownerId``, ``fromRegionId``)
so browser clients can consume payloads unchanged. Nothing is written to
disk: these helpers only build and parse message payloads.
"""

import logging
import math
from typing import Any

from ..models.config import GameConfig
from ..models.game import GameSnapshot
from ..models.order import MoveOrder
from ..models.player import PlayerInfo
from ..models.region import HexCoord, Region
from ..models.result import RoundResult

logger = logging.getLogger(__name__)

# GameConfig field name -> wire key
CONFIG_WIRE_KEYS = {
    "round_duration": "roundDuration",
    "max_rounds": "maxRounds",
    "base_production": "baseProduction",
    "production_per_neighbor": "productionPerNeighbor",
    "bonus_after_rounds": "bonusAfterRounds",
    "bonus_troops": "bonusTroops",
    "defense_advantage": "defenseAdvantage",
    "victory_condition": "victoryCondition",
    "victory_param": "victoryParam",
    "start_placement": "startPlacement",
    "start_regions": "startRegions",
    "visibility_mode": "visibilityMode",
    "map_size": "mapSize",
}
CONFIG_FIELD_NAMES = {wire: name for name, wire in CONFIG_WIRE_KEYS.items()}


def serialize_snapshot(snapshot: GameSnapshot) -> dict[str, Any]:
    """Build the ``game:state`` payload."""
    return {
        "players": [serialize_player(p) for p in snapshot.players],
        "regions": [serialize_region(r) for r in snapshot.regions],
        "config": serialize_config(snapshot.config),
        "round": snapshot.round,
        "phase": snapshot.phase,
    }


def serialize_region(region: Region) -> dict[str, Any]:
    """Convert Region to dictionary."""
    return {
        "id": region.id,
        "coord": {"q": region.coord.q, "r": region.coord.r},
        "ownerId": region.owner_id,
        "troops": region.troops,
        "neighbors": list(region.neighbors),
    }


def deserialize_region(data: dict[str, Any]) -> Region:
    """Reconstruct Region from dictionary."""
    return Region(
        id=data["id"],
        coord=HexCoord(q=data["coord"]["q"], r=data["coord"]["r"]),
        owner_id=data.get("ownerId"),
        troops=data.get("troops", 0),
        neighbors=list(data.get("neighbors", [])),
    )


def serialize_player(player: PlayerInfo) -> dict[str, Any]:
    """Convert PlayerInfo to dictionary."""
    return {
        "id": player.id,
        "name": player.name,
        "color": player.color,
        "isAdmin": player.is_admin,
        "isReady": player.is_ready,
        "isEliminated": player.is_eliminated,
    }


def serialize_config(config: GameConfig) -> dict[str, Any]:
    """Convert GameConfig to a camelCase dictionary."""
    return {CONFIG_WIRE_KEYS[name]: value for name, value in config.to_dict().items()}


def config_changes_from_wire(data: dict[str, Any]) -> dict[str, Any]:
    """Translate a partial camelCase config into GameConfig field names.

    Unknown keys are dropped with a debug log so that newer clients sending
    extra settings don't break older coordinators.
    """
    changes = {}
    for key, value in data.items():
        name = CONFIG_FIELD_NAMES.get(key)
        if name is None:
            logger.debug(f"Ignoring unknown config key: {key}")
            continue
        changes[name] = value
    return changes


def serialize_round_result(result: RoundResult) -> dict[str, Any]:
    """Build the ``round:resolve`` payload."""
    return {
        "round": result.round,
        "regionDeltas": [
            {
                "regionId": delta.region_id,
                "newOwnerId": delta.new_owner_id,
                "newTroops": delta.new_troops,
                "attackers": [
                    {"playerId": a.player_id, "troops": a.troops} for a in delta.attackers
                ],
            }
            for delta in result.region_deltas
        ],
        "eliminated": list(result.eliminated),
        "winner": result.winner,
    }


def serialize_order(order: MoveOrder) -> dict[str, Any]:
    """Convert MoveOrder to dictionary."""
    return {
        "fromRegionId": order.from_region_id,
        "toRegionId": order.to_region_id,
        "troops": order.troops,
    }


def deserialize_order(data: dict[str, Any]) -> MoveOrder:
    """Reconstruct MoveOrder from dictionary.

    Troop counts are coerced to int (clients may send floats from sliders).

    Raises:
        KeyError: If a required key is missing
        TypeError: If a value has the wrong type
        ValueError: If a value is out of range
    """
    troops = data["troops"]
    if isinstance(troops, bool) or not isinstance(troops, (int, float)):
        raise TypeError(f"troops must be a number, got {type(troops).__name__}")
    if isinstance(troops, float) and not math.isfinite(troops):
        raise ValueError(f"troops must be finite, got {troops}")
    from_id = data["fromRegionId"]
    to_id = data["toRegionId"]
    if not isinstance(from_id, str) or not isinstance(to_id, str):
        raise TypeError("region ids must be strings")
    return MoveOrder(from_region_id=from_id, to_region_id=to_id, troops=int(troops))


def parse_orders(raw_orders: Any) -> list[MoveOrder]:
    """Parse a ``player:orders`` list, silently dropping malformed entries.

    Args:
        raw_orders: Whatever arrived under the ``orders`` key

    Returns:
        Orders that could be parsed, in submission order
    """
    if not isinstance(raw_orders, list):
        logger.debug(f"Ignoring non-list orders payload: {type(raw_orders).__name__}")
        return []

    orders = []
    for i, raw in enumerate(raw_orders):
        if not isinstance(raw, dict):
            logger.debug(f"Dropping order {i}: not an object")
            continue
        try:
            orders.append(deserialize_order(raw))
        except (KeyError, TypeError, ValueError) as e:
            logger.debug(f"Dropping order {i}: {e}")
    return orders
