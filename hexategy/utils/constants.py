"""Game configuration constants."""

# Map generation
MIN_MAP_RADIUS = 3
MAX_MAP_RADIUS = 8
START_TROOPS = 3
CLUSTER_RING_FRACTION = 0.6  # Clustered starts use the outer 40% of the radius

# Players
PLAYER_COLORS = (
    "#e05c5c",
    "#5c9ee0",
    "#5ce07a",
    "#e0c45c",
    "#c45ce0",
    "#5ce0d4",
    "#e08c5c",
    "#a0e05c",
)
MAX_NAME_LENGTH = 20
DEFAULT_ADMIN_NAME = "Admin"
DEFAULT_PLAYER_NAME = "Player"

# Round timing (seconds)
RESOLVE_GRACE_SECONDS = 1.0  # Extra wait after the countdown for late orders
RESOLUTION_PAUSE_SECONDS = 2.5  # Pause for the client-side resolution animation

# Allowed values for string-typed settings
VICTORY_CONDITIONS = ("total_conquest", "score_rounds", "map_percent", "hill_control")
START_PLACEMENTS = ("random", "clustered")
VISIBILITY_MODES = ("full", "fog_of_war", "fog_strict")
GAME_PHASES = ("lobby", "planning", "resolving", "ended")
