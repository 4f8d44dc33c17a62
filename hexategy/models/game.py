"""Snapshot of the authoritative game state."""

from dataclasses import dataclass, field

from ..utils.constants import GAME_PHASES
from .config import GameConfig
from .player import PlayerInfo
from .region import Region


@dataclass
class GameSnapshot:
    """Everything a participant needs to mirror the game.

    This is the payload of every ``game:state`` broadcast. The orchestrator
    builds a fresh snapshot on each broadcast; the lists reference the live
    authoritative objects, so serialize before handing it to a transport.
    """

    players: list[PlayerInfo] = field(default_factory=list)
    regions: list[Region] = field(default_factory=list)
    config: GameConfig = field(default_factory=GameConfig)
    round: int = 0  # Current round (0 while in the lobby)
    phase: str = "lobby"  # "lobby", "planning", "resolving" or "ended"

    def __post_init__(self):
        """Validate snapshot data after initialization."""
        if self.round < 0:
            raise ValueError(f"Invalid round: {self.round} (must be >= 0)")
        if self.phase not in GAME_PHASES:
            raise ValueError(
                f"Invalid phase: {self.phase} (must be one of {', '.join(GAME_PHASES)})"
            )
