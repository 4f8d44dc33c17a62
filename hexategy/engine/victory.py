"""Victory condition checking.

Conditions:
- total_conquest: one player owns every region
- score_rounds: at the round cap, whoever owns the most regions
- map_percent: a player owns at least ``victory_param`` percent of the map
- hill_control: a player holds the center cell for ``victory_param``
  consecutive evaluations

Whatever the condition, a lone surviving player wins immediately.
"""

import logging
from typing import Dict, List, Optional

from ..models.config import GameConfig
from ..models.player import PlayerInfo
from ..models.region import Region
from ..utils.hex_math import CENTER

logger = logging.getLogger(__name__)


def count_regions(regions: List[Region]) -> Dict[str, int]:
    """Number of regions owned by each player."""
    counts: Dict[str, int] = {}
    for region in regions:
        if region.owner_id is not None:
            counts[region.owner_id] = counts.get(region.owner_id, 0) + 1
    return counts


class VictoryEvaluator:
    """Evaluates the configured win condition after each resolution.

    Holds the hill-control streaks, which must be reset at game start.
    """

    def __init__(self):
        self._hill_streaks: Dict[str, int] = {}

    def check(
        self,
        regions: List[Region],
        players: List[PlayerInfo],
        config: GameConfig,
        round: int,
    ) -> Optional[str]:
        """Return the winning player id, or None if the game continues.

        Args:
            regions: Authoritative region list
            players: Registered players, in registry order
            config: Game configuration (victory_condition, victory_param, max_rounds)
            round: Round that was just resolved

        Returns:
            Winner id or None
        """
        active = [p for p in players if not p.is_eliminated]
        if not active:
            return None
        if len(active) == 1:
            return active[0].id

        condition = config.victory_condition
        if condition == "total_conquest":
            return self._check_total_conquest(regions, active)
        if condition == "score_rounds":
            if config.max_rounds and round >= config.max_rounds:
                return self._leader(regions, active)
            return None
        if condition == "map_percent":
            return self._check_map_percent(regions, active, config.victory_param / 100)
        if condition == "hill_control":
            return self._check_hill_control(regions, active, config.victory_param)

        logger.warning(f"Unknown victory condition: {condition}")
        return None

    def hill_streak(self, player_id: str) -> int:
        """Consecutive evaluations the player has held the center."""
        return self._hill_streaks.get(player_id, 0)

    def reset_all(self) -> None:
        """Forget hill-control streaks (new game)."""
        self._hill_streaks.clear()

    def _check_total_conquest(
        self, regions: List[Region], active: List[PlayerInfo]
    ) -> Optional[str]:
        counts = count_regions(regions)
        for player in active:
            if counts.get(player.id, 0) == len(regions):
                return player.id
        return None

    def _check_map_percent(
        self, regions: List[Region], active: List[PlayerInfo], target: float
    ) -> Optional[str]:
        if not regions:
            return None
        counts = count_regions(regions)
        for player in active:
            if counts.get(player.id, 0) / len(regions) >= target:
                return player.id
        return None

    def _leader(self, regions: List[Region], active: List[PlayerInfo]) -> Optional[str]:
        """Player with the most regions; ties go to the earliest in the list."""
        counts = count_regions(regions)
        leader = None
        best = -1
        for player in active:
            owned = counts.get(player.id, 0)
            if owned > best:
                best = owned
                leader = player.id
        return leader

    def _check_hill_control(
        self, regions: List[Region], active: List[PlayerInfo], required: int
    ) -> Optional[str]:
        """Advance hill streaks and report a winner once one is long enough.

        The holder's streak grows by one per call; every other active player
        drops back to 0. A neutral (or missing) center changes nothing.
        """
        hill = next((r for r in regions if r.coord == CENTER), None)
        if hill is None or hill.owner_id is None:
            return None

        holder = hill.owner_id
        self._hill_streaks[holder] = self._hill_streaks.get(holder, 0) + 1
        for player in active:
            if player.id != holder:
                self._hill_streaks[player.id] = 0

        # A kicked player can keep the hill, but only registered players win
        if self._hill_streaks[holder] >= required and any(p.id == holder for p in active):
            return holder
        return None
