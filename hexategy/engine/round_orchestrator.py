"""Authoritative round lifecycle for one room.

The orchestrator owns the game state of a room and is the only writer of
it. Everyone else mirrors what it broadcasts.

Phases:
    lobby -> planning -> resolving -> planning -> ... -> ended

- lobby: players join, leave, ready up; the authority edits the config,
  renames or kicks players, and starts the game
- planning: production runs, state and ``round:start`` are broadcast, and
  orders are collected until the deadline (round duration plus a grace
  period for late deliveries)
- resolving: orders are resolved, eliminations marked, the result
  broadcast and victory checked; after a short pause the next round starts
- ended: terminal; a new game needs a new orchestrator

The orchestrator is transport-agnostic: it emits messages through the
``send`` callable and arms timers through a scheduler. Its methods must be
called one at a time (a room actor serializes them), so no locking is done.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..models.config import GameConfig
from ..models.game import GameSnapshot
from ..models.order import MoveOrder
from ..models.player import PlayerInfo
from ..models.region import Region
from ..models.result import RoundResult
from ..protocol import MsgType
from ..utils import (
    DEFAULT_ADMIN_NAME,
    DEFAULT_PLAYER_NAME,
    MAX_NAME_LENGTH,
    PLAYER_COLORS,
    RESOLUTION_PAUSE_SECONDS,
    RESOLVE_GRACE_SECONDS,
    GameRNG,
)
from ..utils.scheduling import Scheduler, TimerHandle
from ..utils.serialization import (
    config_changes_from_wire,
    parse_orders,
    serialize_round_result,
    serialize_snapshot,
)
from .combat import resolve_round
from .map_generator import generate_map
from .production import ProductionEngine
from .victory import VictoryEvaluator, count_regions

logger = logging.getLogger(__name__)

SendFn = Callable[[str, Dict[str, Any]], None]


class RoundOrchestrator:
    """State machine driving one game from lobby to victory.

    Args:
        authority_id: Client id of the room creator; registered as the admin
            player immediately
        send: Called as ``send(msg_type, payload)`` for every broadcast
        scheduler: Arms the planning deadline and post-resolution pause
        config: Initial configuration (defaults if omitted)
        rng: Random source for map generation
        authority_name: Display name of the admin player
        resolve_grace: Seconds added to each round's deadline
        resolution_pause: Seconds between a resolution and the next round
    """

    def __init__(
        self,
        authority_id: str,
        send: SendFn,
        scheduler: Scheduler,
        config: Optional[GameConfig] = None,
        rng: Optional[GameRNG] = None,
        authority_name: str = DEFAULT_ADMIN_NAME,
        resolve_grace: float = RESOLVE_GRACE_SECONDS,
        resolution_pause: float = RESOLUTION_PAUSE_SECONDS,
    ):
        self.authority_id = authority_id
        self.send = send
        self.scheduler = scheduler
        self.config = config or GameConfig()
        self.rng = rng or GameRNG()
        self.resolve_grace = resolve_grace
        self.resolution_pause = resolution_pause

        self.players: Dict[str, PlayerInfo] = {}
        self.regions: List[Region] = []
        self.round = 0
        self.phase = "lobby"
        self.winner_id: Optional[str] = None
        self.pending_orders: Dict[str, List[MoveOrder]] = {}

        self.production = ProductionEngine()
        self.victory = VictoryEvaluator()

        self._timer: Optional[TimerHandle] = None
        self._color_index = 0
        self._destroyed = False

        self._register_player(authority_id, authority_name, is_admin=True)
        self.players[authority_id].is_ready = True
        self._broadcast_state()

    # =========================================================================
    # INBOUND MESSAGES
    # =========================================================================

    def handle_message(
        self, msg_type: str, sender_id: Optional[str], payload: Dict[str, Any]
    ) -> None:
        """Dispatch one inbound protocol message.

        Unknown message types are ignored. Admin messages from anyone but the
        authority are ignored with a warning.

        Raises:
            ValueError: If an admin message carries an invalid payload
        """
        if self._destroyed:
            return

        if msg_type == MsgType.PLAYER_JOINED:
            self.player_joined(payload.get("id"), payload.get("name"))
        elif msg_type == MsgType.PLAYER_LEFT:
            self.player_left(payload.get("id"))
        elif msg_type == MsgType.PLAYER_READY:
            self.player_ready(sender_id)
        elif msg_type == MsgType.PLAYER_ORDERS:
            self.submit_orders(sender_id, payload.get("orders"))
        elif msg_type == MsgType.PLAYER_CANCEL:
            logger.debug(
                f"Player {sender_id} cancelled "
                f"{payload.get('fromRegionId')} -> {payload.get('toRegionId')}"
            )
        elif msg_type.startswith("admin:"):
            if sender_id != self.authority_id:
                logger.warning(f"Ignoring {msg_type} from non-authority {sender_id}")
                return
            self._handle_admin(msg_type, payload)
        else:
            logger.debug(f"Ignoring message type {msg_type}")

    def player_joined(self, player_id: Optional[str], name: Optional[str]) -> bool:
        """Register a new participant (lobby only).

        Returns:
            True if the player was added
        """
        if not player_id or player_id in self.players:
            return False
        if self.phase != "lobby":
            logger.info(f"Player {player_id} joined after start; watching only")
            return False

        self._register_player(player_id, name or DEFAULT_PLAYER_NAME, is_admin=False)
        logger.info(f"Player {player_id} joined as {self.players[player_id].name}")
        self._broadcast_state()
        return True

    def player_left(self, player_id: Optional[str]) -> bool:
        """Drop a disconnected participant.

        Their regions stay on the map, uncommanded, until someone conquers
        them. They contribute no orders from now on.

        Returns:
            True if the player was registered
        """
        if player_id == self.authority_id:
            # The room tears the coordinator down when the authority leaves
            return False
        if player_id not in self.players:
            return False

        del self.players[player_id]
        self.pending_orders.pop(player_id, None)
        logger.info(f"Player {player_id} left (phase={self.phase})")
        self._broadcast_state()
        return True

    def player_ready(self, player_id: Optional[str]) -> None:
        """Mark the sender as ready."""
        player = self.players.get(player_id or "")
        if player is None or player.is_ready:
            return
        player.is_ready = True
        self._broadcast_state()

    def submit_orders(self, player_id: Optional[str], orders: Any) -> int:
        """Store a player's orders for the current round.

        A new submission replaces the player's previous one entirely. Raw
        wire lists are parsed and malformed entries dropped; range problems
        are left for the resolver to clamp.

        Args:
            player_id: Submitting player
            orders: List of MoveOrder, or the raw ``orders`` list of a message

        Returns:
            Number of orders stored (0 if the submission was ignored)
        """
        if self.phase != "planning":
            logger.debug(f"Ignoring orders from {player_id} during {self.phase}")
            return 0
        player = self.players.get(player_id or "")
        if player is None or player.is_eliminated:
            logger.debug(f"Ignoring orders from inactive player {player_id}")
            return 0

        if isinstance(orders, list) and all(isinstance(o, MoveOrder) for o in orders):
            parsed = list(orders)
        else:
            parsed = parse_orders(orders)

        self.pending_orders[player.id] = parsed
        return len(parsed)

    # =========================================================================
    # AUTHORITY CONTROLS
    # =========================================================================

    def update_config(self, **changes: Any) -> bool:
        """Replace config fields (lobby only) and re-broadcast.

        Raises:
            ValueError: If a field is unknown or a value invalid
        """
        if self.phase != "lobby":
            logger.warning(f"Config change ignored during {self.phase}")
            return False
        self.config = self.config.with_changes(**changes)
        logger.info(f"Config updated: {sorted(changes)}")
        self._broadcast_state()
        return True

    def kick_player(self, player_id: str) -> bool:
        """Remove a participant and tell the room.

        Like a disconnect, this leaves the player's regions untouched.
        """
        if player_id == self.authority_id or player_id not in self.players:
            return False
        del self.players[player_id]
        self.pending_orders.pop(player_id, None)
        logger.info(f"Player {player_id} kicked")
        self.send(MsgType.PLAYER_KICK, {"id": player_id})
        self._broadcast_state()
        return True

    def rename_player(self, player_id: str, name: str) -> bool:
        """Rename a player; names are trimmed to 20 characters.

        A blank name keeps the current one.
        """
        player = self.players.get(player_id)
        if player is None:
            return False
        player.name = (name or "").strip()[:MAX_NAME_LENGTH] or player.name
        self._broadcast_state()
        return True

    def start_game(self) -> bool:
        """Generate the map and begin round 1.

        Requires the lobby phase and at least one player besides the
        authority.

        Returns:
            True if the game started
        """
        if self.phase != "lobby" or self._destroyed:
            return False
        if not any(pid != self.authority_id for pid in self.players):
            logger.warning("Cannot start: no players besides the authority")
            return False

        authority = self.players[self.authority_id]
        authority.is_admin = True
        authority.is_ready = True

        self.production.reset_all()
        self.victory.reset_all()

        player_ids = list(self.players)
        self.regions = generate_map(player_ids, self.config, self.rng)
        logger.info(f"Game started with {len(player_ids)} players")
        self._start_round(frozenset())
        return True

    # =========================================================================
    # ROUND LIFECYCLE
    # =========================================================================

    def _start_round(self, skip_production: frozenset) -> None:
        """Enter planning: produce, broadcast, arm the deadline."""
        self.round += 1
        self.phase = "planning"
        self.pending_orders.clear()

        self.production.apply(self.regions, self.config, skip_production)
        self._broadcast_state()
        self.send(
            MsgType.ROUND_START,
            {"round": self.round, "duration": self.config.round_duration},
        )

        round_number = self.round
        self._arm(
            self.config.round_duration + self.resolve_grace,
            lambda: self._on_deadline(round_number),
        )
        logger.info(f"Round {self.round} planning started ({self.config.round_duration}s)")

    def _on_deadline(self, round_number: int) -> None:
        self._timer = None
        if self._destroyed or self.phase != "planning" or round_number != self.round:
            return
        self.resolve_current_round()

    def resolve_current_round(self) -> RoundResult:
        """Resolve the orders collected this round.

        Normally triggered by the deadline timer; also callable directly.
        """
        if self.phase != "planning":
            raise RuntimeError(f"Cannot resolve during {self.phase}")
        self._cancel_timer()
        self.phase = "resolving"

        all_orders = [
            (player_id, order)
            for player_id, orders in self.pending_orders.items()
            for order in orders
        ]
        owner_before = {region.id: region.owner_id for region in self.regions}

        result = resolve_round(self.regions, all_orders, self.config)
        result.round = self.round

        newly_conquered = frozenset(
            region.id
            for region in self.regions
            if region.owner_id is not None and region.owner_id != owner_before[region.id]
        )

        self._mark_eliminated(result)

        winner = self.victory.check(
            self.regions, list(self.players.values()), self.config, self.round
        )
        result.winner = winner

        logger.info(
            f"Round {self.round} resolved: {len(all_orders)} orders, "
            f"{len(newly_conquered)} captures, eliminated={result.eliminated}"
        )

        self.send(MsgType.ROUND_RESOLVE, serialize_round_result(result))

        if winner is not None:
            self.phase = "ended"
            self.winner_id = winner
            logger.info(f"Game over after round {self.round}: winner = {winner}")
            self._broadcast_state()
            self.send(MsgType.GAME_OVER, {"winnerId": winner, "round": self.round})
            return result

        self._broadcast_state()
        self._arm(self.resolution_pause, lambda: self._on_pause_elapsed(newly_conquered))
        return result

    def _on_pause_elapsed(self, newly_conquered: frozenset) -> None:
        self._timer = None
        if self._destroyed or self.phase != "resolving":
            return
        self._start_round(newly_conquered)

    def _mark_eliminated(self, result: RoundResult) -> None:
        """Flag players who own nothing after resolution.

        Keeps ``is_eliminated`` true exactly for registered players with zero
        regions, adding any not already reported to the result.
        """
        counts = count_regions(self.regions)
        for player in self.players.values():
            was_eliminated = player.is_eliminated
            player.is_eliminated = counts.get(player.id, 0) == 0
            if (
                player.is_eliminated
                and not was_eliminated
                and player.id not in result.eliminated
            ):
                result.eliminated.append(player.id)

    # =========================================================================
    # BROADCASTING & TEARDOWN
    # =========================================================================

    def snapshot(self) -> GameSnapshot:
        """Current state as a GameSnapshot."""
        return GameSnapshot(
            players=list(self.players.values()),
            regions=self.regions,
            config=self.config,
            round=self.round,
            phase=self.phase,
        )

    def sync_state(self) -> None:
        """Re-broadcast the current state (for late listeners)."""
        self._broadcast_state()

    def destroy(self) -> None:
        """Cancel pending timers; the orchestrator ignores everything after."""
        self._destroyed = True
        self._cancel_timer()
        logger.info(f"Coordinator for {self.authority_id} destroyed in phase {self.phase}")

    def _broadcast_state(self) -> None:
        if self._destroyed:
            return
        self.send(MsgType.GAME_STATE, serialize_snapshot(self.snapshot()))

    # =========================================================================
    # INTERNAL HELPERS
    # =========================================================================

    def _handle_admin(self, msg_type: str, payload: Dict[str, Any]) -> None:
        if msg_type == MsgType.ADMIN_CONFIG:
            self.update_config(**config_changes_from_wire(payload))
        elif msg_type == MsgType.ADMIN_START:
            self.start_game()
        elif msg_type == MsgType.ADMIN_KICK:
            self.kick_player(str(payload.get("id", "")))
        elif msg_type == MsgType.ADMIN_RENAME:
            self.rename_player(str(payload.get("id", "")), str(payload.get("name", "")))
        else:
            logger.debug(f"Ignoring admin message {msg_type}")

    def _register_player(self, player_id: str, name: str, is_admin: bool) -> None:
        color = PLAYER_COLORS[self._color_index % len(PLAYER_COLORS)]
        self._color_index += 1
        self.players[player_id] = PlayerInfo(
            id=player_id,
            name=name.strip()[:MAX_NAME_LENGTH] or DEFAULT_PLAYER_NAME,
            color=color,
            is_admin=is_admin,
        )

    def _arm(self, delay: float, callback: Callable[[], None]) -> None:
        self._cancel_timer()
        self._timer = self.scheduler.call_later(delay, callback)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
