"""Player registry entry."""

from dataclasses import dataclass


@dataclass
class PlayerInfo:
    """A participant in a room.

    The authority (room creator) is registered when the coordinator is built;
    everyone else when the transport reports them joining. Entries are
    removed on kick or disconnect.
    """

    id: str  # Transport client id
    name: str  # Display name (<= 20 chars)
    color: str  # Hex color assigned in join order
    is_admin: bool = False
    is_ready: bool = False
    is_eliminated: bool = False

    def __post_init__(self):
        """Validate player data after initialization."""
        if not self.id:
            raise ValueError("Player id cannot be empty")
        if not self.color.startswith("#"):
            raise ValueError(f"Invalid color: {self.color} (must be a hex color)")
