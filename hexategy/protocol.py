"""Message types of the HexaTegy wire protocol.

Every message is a JSON envelope ``{type, from?, payload}``. The transport
fills in ``from`` with the sender's client id when it forwards a message.
"""


class MsgType:
    """Envelope ``type`` values."""

    # Transport -> participant
    ROOM_CREATED = "room:created"
    ROOM_JOINED = "room:joined"
    RELAY_ERROR = "relay:error"

    # Participant -> transport
    ROOM_CREATE = "room:create"
    ROOM_JOIN = "room:join"

    # Authority -> room
    GAME_STATE = "game:state"
    ROUND_START = "round:start"
    ROUND_RESOLVE = "round:resolve"
    GAME_OVER = "game:over"
    PLAYER_KICK = "player:kick"

    # Transport/authority -> room
    PLAYER_JOINED = "player:joined"
    PLAYER_LEFT = "player:left"

    # Participant -> authority
    PLAYER_READY = "player:ready"
    PLAYER_ORDERS = "player:orders"
    PLAYER_CANCEL = "player:cancel"

    # Authority's own client -> coordinator
    ADMIN_CONFIG = "admin:config"
    ADMIN_START = "admin:start"
    ADMIN_KICK = "admin:kick"
    ADMIN_RENAME = "admin:rename"


PARTICIPANT_TYPES = frozenset(
    {MsgType.PLAYER_READY, MsgType.PLAYER_ORDERS, MsgType.PLAYER_CANCEL}
)
ADMIN_TYPES = frozenset(
    {MsgType.ADMIN_CONFIG, MsgType.ADMIN_START, MsgType.ADMIN_KICK, MsgType.ADMIN_RENAME}
)
