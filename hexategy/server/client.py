"""Per-connection message handling for the WebSocket relay."""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..protocol import MsgType
from .errors import RelayError
from .room import Connection, Room, RoomManager, validate_client_message
from .schemas.requests import Envelope, RoomRequest

logger = logging.getLogger(__name__)


class ClientSession:
    """One connected client: which room it is in and what it may send.

    ``handle_text`` raises RelayError for anything the relay refuses; the
    caller reports it back to this client only.
    """

    def __init__(self, client_id: str, connection: Connection, manager: RoomManager):
        self.client_id = client_id
        self.connection = connection
        self.manager = manager
        self.room: Optional[Room] = None

    def handle_text(self, raw: str) -> None:
        """Parse and route one raw message from the client.

        Raises:
            RelayError: If the message is malformed or not allowed
        """
        try:
            envelope = Envelope.model_validate_json(raw)
        except ValidationError as e:
            if any(error["type"] == "json_invalid" for error in e.errors()):
                raise RelayError("Invalid JSON") from e
            raise RelayError("Invalid message envelope") from e

        payload = envelope.payload or {}
        if envelope.type == MsgType.ROOM_CREATE:
            self._create_room(payload)
        elif envelope.type == MsgType.ROOM_JOIN:
            self._join_room(payload)
        else:
            self._forward(envelope.type, payload)

    async def disconnect(self) -> None:
        """Leave the current room; a host leaving closes it."""
        room, self.room = self.room, None
        if room is None or room.closed:
            return
        if self.client_id == room.authority_id:
            await self.manager.delete(room.code, "Host disconnected")
        else:
            room.leave(self.client_id)

    def _create_room(self, payload: Dict[str, Any]) -> None:
        if self.room is not None and not self.room.closed:
            raise RelayError("Already in a room")
        request = self._room_request(payload)
        self.room = self.manager.create_room(self.client_id, self.connection, request.name)

    def _join_room(self, payload: Dict[str, Any]) -> None:
        if self.room is not None and not self.room.closed:
            raise RelayError("Already in a room")
        request = self._room_request(payload)
        if not request.roomCode:
            raise RelayError("Missing room code")
        room = self.manager.get(request.roomCode)
        if room is None or room.closed:
            raise RelayError(f"Room {request.roomCode} not found")
        room.join(self.client_id, self.connection, request.name)
        self.room = room

    def _forward(self, msg_type: str, payload: Dict[str, Any]) -> None:
        room = self.room
        if room is None or room.closed:
            raise RelayError("Not in a room")
        payload = validate_client_message(room.authority_id, self.client_id, msg_type, payload)
        room.submit(self.client_id, msg_type, payload)

    @staticmethod
    def _room_request(payload: Dict[str, Any]) -> RoomRequest:
        try:
            return RoomRequest.model_validate(payload)
        except ValidationError as e:
            raise RelayError("Invalid room request") from e
