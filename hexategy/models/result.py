"""Round resolution results broadcast to every participant."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class AttackContribution:
    """Troops one attacking order committed against a target."""

    player_id: str
    troops: int


@dataclass
class RegionDelta:
    """New state of a region after resolution.

    Attributes:
        region_id: Region that changed
        new_owner_id: Owner after resolution (None for neutral)
        new_troops: Troop count after resolution
        attackers: Attacking contributions, in submission order. Informational
            only (clients animate them); empty for reinforcements and sources.
    """

    region_id: str
    new_owner_id: Optional[str]
    new_troops: int
    attackers: List[AttackContribution] = field(default_factory=list)


@dataclass
class RoundResult:
    """Outcome of one resolving phase."""

    round: int  # Round number (filled in by the orchestrator)
    region_deltas: List[RegionDelta] = field(default_factory=list)
    eliminated: List[str] = field(default_factory=list)  # Players eliminated this round
    winner: Optional[str] = None  # Set when this round ended the game

    def delta_for(self, region_id: str) -> Optional[RegionDelta]:
        """Find the delta for a region, if it changed this round."""
        for delta in self.region_deltas:
            if delta.region_id == region_id:
                return delta
        return None
