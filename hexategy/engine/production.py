"""Per-round troop production.

Every owned region produces:
- ``base_production``
- plus ``production_per_neighbor`` for each neighbor with the same owner
- plus ``bonus_troops`` once the owner has held it for
  ``bonus_after_rounds`` consecutive rounds

Regions captured in the round just resolved keep counting their streak but
produce nothing, so a fresh conquest can't inflate before its owner has held
it through a planning phase.
"""

import logging
from dataclasses import dataclass
from typing import AbstractSet, Dict, List

from ..models.config import GameConfig
from ..models.region import Region

logger = logging.getLogger(__name__)


@dataclass
class ControlStreak:
    """Consecutive rounds a region has stayed with the same owner."""

    owner_id: str
    rounds: int


class ProductionEngine:
    """Applies production and tracks control streaks for one game.

    Each orchestrator owns its own engine, so rooms never share streaks.
    """

    def __init__(self):
        self._streaks: Dict[str, ControlStreak] = {}

    def apply(
        self,
        regions: List[Region],
        config: GameConfig,
        skip: AbstractSet[str] = frozenset(),
    ) -> Dict[str, int]:
        """Add one round of production to every owned region.

        Args:
            regions: Authoritative region list (mutated)
            config: Game configuration
            skip: Region ids that changed owner in the previous resolution;
                their streak is updated but they receive no troops

        Returns:
            Region id -> troops added (skipped regions are absent)
        """
        region_by_id = {region.id: region for region in regions}
        produced: Dict[str, int] = {}

        for region in regions:
            if region.owner_id is None:
                self._streaks.pop(region.id, None)
                continue

            owned_neighbors = sum(
                1
                for neighbor_id in region.neighbors
                if region_by_id[neighbor_id].owner_id == region.owner_id
            )
            production = config.base_production + owned_neighbors * config.production_per_neighbor

            streak = self._update_streak(region)
            if streak.rounds >= config.bonus_after_rounds:
                production += config.bonus_troops

            if region.id in skip:
                continue

            region.troops += production
            produced[region.id] = production

        logger.debug(f"Production applied to {len(produced)} regions, skipped {len(skip)}")
        return produced

    def streak_for(self, region_id: str) -> int:
        """Current streak length for a region (0 if never owned)."""
        streak = self._streaks.get(region_id)
        return streak.rounds if streak else 0

    def reset_all(self) -> None:
        """Forget every streak (new game)."""
        self._streaks.clear()

    def _update_streak(self, region: Region) -> ControlStreak:
        """Extend the region's streak, or restart it after an owner change."""
        streak = self._streaks.get(region.id)
        if streak is not None and streak.owner_id == region.owner_id:
            streak.rounds += 1
        else:
            streak = ControlStreak(owner_id=region.owner_id, rounds=1)
            self._streaks[region.id] = streak
        return streak
