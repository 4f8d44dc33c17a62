"""Data models for HexaTegy."""

from .config import GameConfig
from .game import GameSnapshot
from .order import MoveOrder
from .player import PlayerInfo
from .region import HexCoord, Region
from .result import AttackContribution, RegionDelta, RoundResult

__all__ = [
    "AttackContribution",
    "GameConfig",
    "GameSnapshot",
    "HexCoord",
    "MoveOrder",
    "PlayerInfo",
    "Region",
    "RegionDelta",
    "RoundResult",
]
