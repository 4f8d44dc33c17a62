"""Order data model for player movement commands."""

from dataclasses import dataclass


@dataclass(frozen=True)
class MoveOrder:
    """A request to move troops from one region to an adjacent one.

    Orders are submitted during the planning phase and resolved all at once
    when the round deadline expires. Moving into a region the submitter
    already owns is a reinforcement; anything else is an attack.

    Orders with out-of-range values are not rejected here beyond basic shape:
    the combat resolver clamps or drops them so that a single bad order never
    invalidates a whole submission.
    """

    from_region_id: str  # Origin region ID
    to_region_id: str  # Destination region ID
    troops: int  # Troops requested (>= 0)

    def __post_init__(self):
        """Validate order data after initialization."""
        if self.troops < 0:
            raise ValueError(f"Invalid troops: {self.troops} (must be >= 0)")
        if not self.from_region_id:
            raise ValueError("from_region_id cannot be empty")
        if not self.to_region_id:
            raise ValueError("to_region_id cannot be empty")
