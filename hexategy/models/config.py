"""Game configuration tunables."""

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Optional

from ..utils.constants import (
    MAX_MAP_RADIUS,
    MIN_MAP_RADIUS,
    START_PLACEMENTS,
    VICTORY_CONDITIONS,
    VISIBILITY_MODES,
)


@dataclass(frozen=True)
class GameConfig:
    """Tunables for one game.

    The authority may replace the config while the room is in the lobby;
    once a game starts the config is fixed. Numeric ranges are assumed to be
    checked by the submitting UI, so the only correction applied here is
    clamping the map radius (see ``map_radius``).
    """

    round_duration: float = 20  # Seconds of planning per round
    max_rounds: Optional[int] = None  # Round cap for score_rounds, None = unlimited
    base_production: int = 2  # Troops per owned region per round
    production_per_neighbor: int = 1  # Extra troops per same-owner neighbor
    bonus_after_rounds: int = 3  # Consecutive rounds of control before the bonus
    bonus_troops: int = 3  # Bonus troops once the streak is reached
    defense_advantage: float = 0.55  # 0.0-1.0, share of the defender that survives
    victory_condition: str = "total_conquest"
    victory_param: int = 100  # Percent for map_percent, streak length for hill_control
    start_placement: str = "random"  # "random" or "clustered"
    start_regions: int = 1  # Regions per player at game start
    visibility_mode: str = "full"  # "full", "fog_of_war" or "fog_strict"
    map_size: int = 5  # Requested grid radius

    def __post_init__(self):
        """Validate enumerated settings after initialization."""
        if self.victory_condition not in VICTORY_CONDITIONS:
            raise ValueError(
                f"Invalid victory_condition: {self.victory_condition} "
                f"(must be one of {', '.join(VICTORY_CONDITIONS)})"
            )
        if self.start_placement not in START_PLACEMENTS:
            raise ValueError(
                f"Invalid start_placement: {self.start_placement} "
                f"(must be one of {', '.join(START_PLACEMENTS)})"
            )
        if self.visibility_mode not in VISIBILITY_MODES:
            raise ValueError(
                f"Invalid visibility_mode: {self.visibility_mode} "
                f"(must be one of {', '.join(VISIBILITY_MODES)})"
            )

    @property
    def map_radius(self) -> int:
        """Grid radius actually used: ``map_size`` clamped to [3, 8]."""
        return max(MIN_MAP_RADIUS, min(MAX_MAP_RADIUS, int(self.map_size)))

    def with_changes(self, **changes: Any) -> "GameConfig":
        """Return a copy with some fields replaced.

        Raises:
            ValueError: If a key is not a config field or a value is invalid
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ValueError(f"Unknown config fields: {', '.join(unknown)}")
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict of all fields (snake_case keys)."""
        return asdict(self)
