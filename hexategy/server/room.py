"""Rooms: one authoritative coordinator per group of connected clients.

A room is split in two layers:

- ``RoomState`` holds membership and the ``RoundOrchestrator`` and turns
  everything the coordinator says into per-recipient envelopes in an
  outbox. It does no I/O, so the in-process ``LocalRelay`` reuses it.
- ``Room`` is the asyncio actor around it. Inbound messages, joins, leaves
  and timer expiries are queued on one inbox and handled strictly one at a
  time; after each event the outbox is delivered over the WebSockets.
"""

import asyncio
import contextlib
import logging
import random
import string
from typing import Any, Callable, Dict, List, Optional, Protocol, Set, Tuple

from pydantic import ValidationError

from ..engine.round_orchestrator import RoundOrchestrator
from ..engine.visibility import project_message
from ..models.config import GameConfig
from ..protocol import ADMIN_TYPES, PARTICIPANT_TYPES, MsgType
from ..utils import (
    DEFAULT_ADMIN_NAME,
    DEFAULT_PLAYER_NAME,
    MAX_NAME_LENGTH,
    RESOLUTION_PAUSE_SECONDS,
    RESOLVE_GRACE_SECONDS,
    GameRNG,
)
from ..utils.scheduling import AsyncioScheduler, Scheduler
from .errors import RelayError
from .schemas.requests import ConfigUpdateRequest, KickRequest, RenameRequest

logger = logging.getLogger(__name__)

# No 0/O or 1/I, so codes survive being read out loud
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CLIENT_ID_ALPHABET = string.ascii_lowercase + string.digits
CLIENT_ID_LENGTH = 7

# (recipient client id, envelope)
Outbound = Tuple[str, Dict[str, Any]]


def generate_room_code(rng: Any = None) -> str:
    """Random ``XXX-XXX`` room code."""
    rng = rng or random
    chars = "".join(rng.choice(ROOM_CODE_ALPHABET) for _ in range(6))
    return f"{chars[:3]}-{chars[3:]}"


def generate_client_id(rng: Any = None) -> str:
    """Random 7-character lowercase alphanumeric client id."""
    rng = rng or random
    return "".join(rng.choice(CLIENT_ID_ALPHABET) for _ in range(CLIENT_ID_LENGTH))


def normalize_room_code(code: str) -> str:
    return code.strip().upper()


def clean_name(name: Optional[str], default: str) -> str:
    """Trim a display name to 20 characters, falling back to ``default``."""
    return (name or "").strip()[:MAX_NAME_LENGTH] or default


def validate_client_message(
    authority_id: str, client_id: str, msg_type: str, payload: Dict[str, Any]
) -> Dict[str, Any]:
    """Check a message from a room member before it reaches the coordinator.

    Args:
        authority_id: Client id of the room's host
        client_id: Sender
        msg_type: Envelope type
        payload: Envelope payload

    Returns:
        Payload to forward; admin payloads are validated and normalized

    Raises:
        RelayError: Unknown type, admin command from a non-host, or an
            invalid admin payload
    """
    if msg_type in PARTICIPANT_TYPES:
        return payload
    if msg_type not in ADMIN_TYPES:
        raise RelayError(f"Unknown message type: {msg_type}")
    if client_id != authority_id:
        raise RelayError(f"Only the host can send {msg_type}")

    try:
        if msg_type == MsgType.ADMIN_CONFIG:
            return ConfigUpdateRequest.model_validate(payload).changes()
        if msg_type == MsgType.ADMIN_KICK:
            return KickRequest.model_validate(payload).model_dump()
        if msg_type == MsgType.ADMIN_RENAME:
            return RenameRequest.model_validate(payload).model_dump()
    except ValidationError as e:
        raise RelayError(f"Invalid {msg_type} payload ({e.error_count()} errors)") from e
    return {}


class RoomState:
    """Membership, coordinator and outbox of one room, without any I/O.

    Every method runs synchronously and appends what must be delivered to
    the outbox; the owner drains it with ``drain()`` and delivers it.

    Args:
        code: Room code
        authority_id: Client id of the creator, who hosts the coordinator
        authority_name: Display name of the creator
        scheduler: Timer source handed to the orchestrator
        config: Initial game configuration
        rng: Random source for map generation
    """

    def __init__(
        self,
        code: str,
        authority_id: str,
        authority_name: Optional[str],
        scheduler: Scheduler,
        config: Optional[GameConfig] = None,
        rng: Optional[GameRNG] = None,
        resolve_grace: float = RESOLVE_GRACE_SECONDS,
        resolution_pause: float = RESOLUTION_PAUSE_SECONDS,
    ):
        self.code = code
        self.authority_id = authority_id
        self.members: Dict[str, str] = {
            authority_id: clean_name(authority_name, DEFAULT_ADMIN_NAME)
        }
        self.outbox: List[Outbound] = []
        self.orchestrator: Optional[RoundOrchestrator] = None

        self.direct(
            authority_id, MsgType.ROOM_CREATED, {"roomCode": code, "clientId": authority_id}
        )
        self.orchestrator = RoundOrchestrator(
            authority_id,
            self._on_coordinator_message,
            scheduler,
            config=config,
            rng=rng,
            authority_name=self.members[authority_id],
            resolve_grace=resolve_grace,
            resolution_pause=resolution_pause,
        )

    # =========================================================================
    # MEMBERSHIP
    # =========================================================================

    def add_member(self, client_id: str, name: Optional[str]) -> None:
        """Admit a client: confirm to it, announce it, register it."""
        name = clean_name(name, DEFAULT_PLAYER_NAME)
        self.members[client_id] = name
        self.direct(client_id, MsgType.ROOM_JOINED, {"roomCode": self.code, "clientId": client_id})

        payload = {"id": client_id, "name": name}
        self.broadcast(MsgType.PLAYER_JOINED, payload)
        self.orchestrator.handle_message(MsgType.PLAYER_JOINED, self.authority_id, payload)
        if client_id not in self.orchestrator.players:
            # Joined mid-game: watch only, but needs the current state
            self.orchestrator.sync_state()
        logger.info(f"Room {self.code}: {client_id} joined as {name}")

    def remove_member(self, client_id: str) -> bool:
        """Drop a client that disconnected."""
        if self.members.pop(client_id, None) is None:
            return False
        self.broadcast(
            MsgType.PLAYER_LEFT,
            {"id": client_id, "isAdmin": client_id == self.authority_id},
        )
        self.orchestrator.handle_message(
            MsgType.PLAYER_LEFT, self.authority_id, {"id": client_id}
        )
        logger.info(f"Room {self.code}: {client_id} left")
        return True

    def handle(self, client_id: str, msg_type: str, payload: Dict[str, Any]) -> None:
        """Hand a validated member message to the coordinator."""
        if client_id not in self.members:
            return
        try:
            self.orchestrator.handle_message(msg_type, client_id, payload)
        except ValueError as e:
            logger.info(f"Room {self.code}: rejected {msg_type} from {client_id}: {e}")
            self.direct(client_id, MsgType.RELAY_ERROR, {"message": str(e)})

    def close(self, reason: str) -> None:
        """Stop the coordinator and tell everyone but the host."""
        self.orchestrator.destroy()
        for client_id in self.members:
            if client_id != self.authority_id:
                self.direct(client_id, MsgType.RELAY_ERROR, {"message": reason})
        logger.info(f"Room {self.code} closed: {reason}")

    # =========================================================================
    # OUTBOUND
    # =========================================================================

    def broadcast(self, msg_type: str, payload: Dict[str, Any]) -> None:
        """Queue a message from the host to every member, redacted per member."""
        mode = "full"
        regions = []
        if self.orchestrator is not None:
            mode = self.orchestrator.config.visibility_mode
            regions = self.orchestrator.regions

        for member_id in self.members:
            body = project_message(msg_type, payload, regions, member_id, mode)
            self.outbox.append(
                (member_id, {"type": msg_type, "from": self.authority_id, "payload": body})
            )

    def direct(self, client_id: str, msg_type: str, payload: Dict[str, Any]) -> None:
        """Queue a relay message for a single client."""
        self.outbox.append((client_id, {"type": msg_type, "payload": payload}))

    def drain(self) -> List[Outbound]:
        """Take everything queued so far."""
        outbound, self.outbox = self.outbox, []
        return outbound

    def summary(self) -> Dict[str, Any]:
        """Public view of the room for the HTTP API."""
        snapshot = self.orchestrator.snapshot()
        return {
            "roomCode": self.code,
            "authorityId": self.authority_id,
            "phase": snapshot.phase,
            "round": snapshot.round,
            "members": len(self.members),
            "players": [
                {"id": p.id, "name": p.name, "isAdmin": p.is_admin} for p in snapshot.players
            ],
        }

    def _on_coordinator_message(self, msg_type: str, payload: Dict[str, Any]) -> None:
        self.broadcast(msg_type, payload)
        if msg_type == MsgType.PLAYER_KICK:
            # The kick notice is already queued for the kicked client
            self.members.pop(payload.get("id"), None)


class Connection(Protocol):
    """Anything that can push JSON to a client (a FastAPI WebSocket)."""

    async def send_json(self, data: Any) -> None: ...


class Room:
    """Actor owning one room: single task, single inbox, no locks.

    Args:
        code: Room code
        authority_id: Client id of the creator
        connection: The creator's connection
        authority_name: The creator's display name
    """

    def __init__(
        self,
        code: str,
        authority_id: str,
        connection: Connection,
        authority_name: Optional[str] = None,
        config: Optional[GameConfig] = None,
        rng: Optional[GameRNG] = None,
        resolve_grace: float = RESOLVE_GRACE_SECONDS,
        resolution_pause: float = RESOLUTION_PAUSE_SECONDS,
    ):
        self.inbox: asyncio.Queue[Callable[[], None]] = asyncio.Queue()
        self.connections: Dict[str, Connection] = {authority_id: connection}
        self.closed = False
        self._task: Optional[asyncio.Task] = None
        self.state = RoomState(
            code,
            authority_id,
            authority_name,
            AsyncioScheduler(dispatch=self.inbox.put_nowait),
            config=config,
            rng=rng,
            resolve_grace=resolve_grace,
            resolution_pause=resolution_pause,
        )

    @property
    def code(self) -> str:
        return self.state.code

    @property
    def authority_id(self) -> str:
        return self.state.authority_id

    def start(self) -> None:
        """Spawn the actor task on the running loop."""
        self._task = asyncio.create_task(self._run(), name=f"room-{self.code}")

    # Everything below only enqueues; the actor applies it in order

    def join(self, client_id: str, connection: Connection, name: Optional[str]) -> None:
        def admit():
            self.connections[client_id] = connection
            self.state.add_member(client_id, name)

        self.inbox.put_nowait(admit)

    def submit(self, client_id: str, msg_type: str, payload: Dict[str, Any]) -> None:
        self.inbox.put_nowait(lambda: self.state.handle(client_id, msg_type, payload))

    def leave(self, client_id: str) -> None:
        self.inbox.put_nowait(lambda: self.state.remove_member(client_id))

    async def close(self, reason: str) -> None:
        """Tear the room down: stop the actor, notify the remaining members."""
        if self.closed:
            return
        self.closed = True
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
        self.connections.pop(self.authority_id, None)
        self.state.close(reason)
        await self._flush()

    async def _run(self) -> None:
        await self._flush()
        while True:
            action = await self.inbox.get()
            try:
                action()
            except Exception as e:
                logger.error(f"Room {self.code}: event failed: {e}", exc_info=True)
            await self._flush()

    async def _flush(self) -> None:
        for recipient, envelope in self.state.drain():
            connection = self.connections.get(recipient)
            if connection is None:
                continue
            try:
                await connection.send_json(envelope)
            except Exception as e:
                logger.warning(f"Room {self.code}: failed to send to {recipient}: {e}")

        for client_id in list(self.connections):
            if client_id not in self.state.members:
                del self.connections[client_id]


class RoomManager:
    """All active rooms of this server, keyed by room code.

    In-memory only; rooms vanish with the process.
    """

    def __init__(
        self,
        resolve_grace: float = RESOLVE_GRACE_SECONDS,
        resolution_pause: float = RESOLUTION_PAUSE_SECONDS,
    ):
        self.rooms: Dict[str, Room] = {}
        self.client_ids: Set[str] = set()
        self.resolve_grace = resolve_grace
        self.resolution_pause = resolution_pause

    def register_client(self, rng: Any = None) -> str:
        """Allocate a client id not held by any connected client."""
        client_id = generate_client_id(rng)
        while client_id in self.client_ids:
            client_id = generate_client_id(rng)
        self.client_ids.add(client_id)
        return client_id

    def release_client(self, client_id: str) -> None:
        self.client_ids.discard(client_id)

    def create_room(
        self,
        authority_id: str,
        connection: Connection,
        name: Optional[str] = None,
        config: Optional[GameConfig] = None,
        rng: Optional[GameRNG] = None,
    ) -> Room:
        """Create and start a room hosted by ``authority_id``.

        Must be called from a running event loop.
        """
        code = generate_room_code()
        while code in self.rooms:
            code = generate_room_code()

        room = Room(
            code,
            authority_id,
            connection,
            authority_name=name,
            config=config,
            rng=rng,
            resolve_grace=self.resolve_grace,
            resolution_pause=self.resolution_pause,
        )
        self.rooms[code] = room
        room.start()
        logger.info(f"Created room {code} for {authority_id}")
        return room

    def get(self, code: str) -> Optional[Room]:
        """Get a room by code (case-insensitive)."""
        return self.rooms.get(normalize_room_code(code))

    async def delete(self, code: str, reason: str = "Room closed") -> bool:
        """Close and forget a room.

        Returns:
            True if deleted, False if not found
        """
        room = self.rooms.pop(normalize_room_code(code), None)
        if room is None:
            return False
        await room.close(reason)
        logger.info(f"Deleted room {room.code}")
        return True

    async def cleanup_all(self) -> None:
        """Close every room (called on shutdown)."""
        logger.info(f"Cleaning up {len(self.rooms)} rooms")
        for code in list(self.rooms):
            await self.delete(code, "Server shutting down")
