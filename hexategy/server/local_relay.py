"""In-process relay for hot-seat play and tests.

Same room semantics as the WebSocket relay, without a network or an event
loop: messages are delivered synchronously into per-client inbox lists, and
round timers run on a ``ManualScheduler`` that only moves when ``advance()``
is called.

Example:
    relay = LocalRelay(rng=GameRNG(42))
    code, host = relay.create_room("Host")
    guest = relay.join_room(code, "Guest")
    relay.send(host, "admin:start")
    relay.advance(21)
    relay.messages(guest, "round:resolve")
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..models.config import GameConfig
from ..protocol import MsgType
from ..utils import RESOLUTION_PAUSE_SECONDS, RESOLVE_GRACE_SECONDS, GameRNG
from ..utils.scheduling import ManualScheduler
from .errors import RelayError
from .room import (
    RoomState,
    generate_client_id,
    generate_room_code,
    normalize_room_code,
    validate_client_message,
)

logger = logging.getLogger(__name__)


class LocalRelay:
    """Synchronous hub holding any number of rooms in one process.

    Args:
        rng: Random source for room codes, client ids and maps
        scheduler: Shared timer source (a fresh ManualScheduler by default)
        resolve_grace: Seconds added to each round's deadline
        resolution_pause: Seconds between a resolution and the next round
    """

    def __init__(
        self,
        rng: Optional[GameRNG] = None,
        scheduler: Optional[ManualScheduler] = None,
        resolve_grace: float = RESOLVE_GRACE_SECONDS,
        resolution_pause: float = RESOLUTION_PAUSE_SECONDS,
    ):
        self.rng = rng or GameRNG()
        self.scheduler = scheduler or ManualScheduler()
        self.resolve_grace = resolve_grace
        self.resolution_pause = resolution_pause
        self.rooms: Dict[str, RoomState] = {}
        self.inboxes: Dict[str, List[Dict[str, Any]]] = {}
        self._client_rooms: Dict[str, str] = {}

    def create_room(
        self, name: Optional[str] = None, config: Optional[GameConfig] = None
    ) -> Tuple[str, str]:
        """Open a room hosted by a new client.

        Returns:
            (room code, host client id)
        """
        client_id = self._new_client()
        code = generate_room_code(self.rng)
        while code in self.rooms:
            code = generate_room_code(self.rng)

        room = RoomState(
            code,
            client_id,
            name,
            self.scheduler,
            config=config,
            rng=self.rng,
            resolve_grace=self.resolve_grace,
            resolution_pause=self.resolution_pause,
        )
        self.rooms[code] = room
        self._client_rooms[client_id] = code
        self._deliver(room)
        logger.info(f"Local room {code} created by {client_id}")
        return code, client_id

    def join_room(self, code: str, name: Optional[str] = None) -> str:
        """Join an existing room as a new client.

        Returns:
            The new client id

        Raises:
            RelayError: If the room does not exist
        """
        room = self.rooms.get(normalize_room_code(code))
        if room is None:
            raise RelayError(f"Room {code} not found")
        client_id = self._new_client()
        self._client_rooms[client_id] = room.code
        room.add_member(client_id, name)
        self._deliver(room)
        return client_id

    def send(
        self, client_id: str, msg_type: str, payload: Optional[Dict[str, Any]] = None
    ) -> None:
        """Send one message from a client to its room.

        Refused messages land in the sender's inbox as ``relay:error``.
        """
        room = self._room_of(client_id)
        try:
            if room is None:
                raise RelayError("Not in a room")
            checked = validate_client_message(
                room.authority_id, client_id, msg_type, payload or {}
            )
        except RelayError as e:
            self.inboxes.setdefault(client_id, []).append(e.to_envelope())
            return
        room.handle(client_id, msg_type, checked)
        self._deliver(room)

    def leave(self, client_id: str) -> None:
        """Disconnect a client; a host leaving closes its room."""
        room = self._room_of(client_id)
        self._client_rooms.pop(client_id, None)
        if room is None:
            return
        if client_id == room.authority_id:
            room.close("Host disconnected")
            self._deliver(room)
            del self.rooms[room.code]
            for member_id in room.members:
                self._client_rooms.pop(member_id, None)
        else:
            room.remove_member(client_id)
            self._deliver(room)

    def advance(self, seconds: float) -> int:
        """Move the virtual clock, firing due round timers.

        Returns:
            Number of timers fired
        """
        fired = self.scheduler.advance(seconds)
        for room in list(self.rooms.values()):
            self._deliver(room)
        return fired

    def messages(self, client_id: str, msg_type: Optional[str] = None) -> List[Dict[str, Any]]:
        """Envelopes received by a client, optionally of one type."""
        inbox = self.inboxes.get(client_id, [])
        if msg_type is None:
            return list(inbox)
        return [envelope for envelope in inbox if envelope["type"] == msg_type]

    def last_state(self, client_id: str) -> Optional[Dict[str, Any]]:
        """Payload of the latest ``game:state`` a client received."""
        states = self.messages(client_id, MsgType.GAME_STATE)
        return states[-1]["payload"] if states else None

    def _new_client(self) -> str:
        client_id = generate_client_id(self.rng)
        while client_id in self.inboxes:
            client_id = generate_client_id(self.rng)
        self.inboxes[client_id] = []
        return client_id

    def _room_of(self, client_id: str) -> Optional[RoomState]:
        code = self._client_rooms.get(client_id)
        return self.rooms.get(code) if code else None

    def _deliver(self, room: RoomState) -> None:
        for recipient, envelope in room.drain():
            self.inboxes.setdefault(recipient, []).append(envelope)
