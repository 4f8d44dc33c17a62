"""Utility functions and constants for HexaTegy."""

from .constants import (
    CLUSTER_RING_FRACTION,
    DEFAULT_ADMIN_NAME,
    DEFAULT_PLAYER_NAME,
    GAME_PHASES,
    MAX_MAP_RADIUS,
    MAX_NAME_LENGTH,
    MIN_MAP_RADIUS,
    PLAYER_COLORS,
    RESOLUTION_PAUSE_SECONDS,
    RESOLVE_GRACE_SECONDS,
    START_PLACEMENTS,
    START_TROOPS,
    VICTORY_CONDITIONS,
    VISIBILITY_MODES,
)
from .rng import GameRNG

__all__ = [
    "CLUSTER_RING_FRACTION",
    "DEFAULT_ADMIN_NAME",
    "DEFAULT_PLAYER_NAME",
    "GAME_PHASES",
    "MAX_MAP_RADIUS",
    "MAX_NAME_LENGTH",
    "MIN_MAP_RADIUS",
    "PLAYER_COLORS",
    "RESOLUTION_PAUSE_SECONDS",
    "RESOLVE_GRACE_SECONDS",
    "START_PLACEMENTS",
    "START_TROOPS",
    "VICTORY_CONDITIONS",
    "VISIBILITY_MODES",
    "GameRNG",
]
