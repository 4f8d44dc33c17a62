"""Region data model for cells of the hex map."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class HexCoord:
    """Axial coordinate of a grid cell."""

    q: int  # Column axis
    r: int  # Diagonal row axis


@dataclass
class Region:
    """A single conquerable cell of the hex map.

    Regions are created once at map generation. Their position and adjacency
    never change during a game; only ``owner_id`` and ``troops`` mutate as
    rounds resolve. A region without an owner is neutral.
    """

    id: str  # Unique identifier (e.g., "r0", "r17")
    coord: HexCoord  # Axial position on the grid
    owner_id: Optional[str]  # Player id, or None for neutral
    troops: int  # Troops stationed here (>= 0)
    neighbors: List[str] = field(default_factory=list)  # Adjacent region ids

    def __post_init__(self):
        """Validate region data after initialization."""
        if not self.id:
            raise ValueError("Region id cannot be empty")
        if self.troops < 0:
            raise ValueError(f"Invalid troops: {self.troops} (must be >= 0)")
        if self.id in self.neighbors:
            raise ValueError(f"Region {self.id} cannot neighbor itself")

    def is_adjacent(self, other_id: str) -> bool:
        """Whether ``other_id`` is one of this region's neighbors."""
        return other_id in self.neighbors
