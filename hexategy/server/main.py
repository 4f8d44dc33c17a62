"""FastAPI relay server for HexaTegy.

Clients connect to ``/ws``, create or join a room by code, and exchange
``{type, from, payload}`` envelopes. Each room runs its own authoritative
coordinator on the server.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import get_settings
from .client import ClientSession
from .errors import RelayError
from .room import RoomManager
from .schemas.responses import HealthResponse, RoomSummaryResponse

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global room manager
rooms = RoomManager(
    resolve_grace=settings.resolve_grace_seconds,
    resolution_pause=settings.resolution_pause_seconds,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown."""
    logger.info("HexaTegy relay starting...")
    yield
    logger.info("HexaTegy relay shutting down...")
    await rooms.cleanup_all()


app = FastAPI(
    title="HexaTegy Relay",
    description="Room relay and authoritative coordinator for HexaTegy",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================
# API ENDPOINTS
# ============================================


@app.get("/api", response_model=HealthResponse)
async def api_root():
    """API root endpoint - server health check."""
    return HealthResponse(service="HexaTegy", status="operational", activeRooms=len(rooms.rooms))


@app.get("/api/rooms/{room_code}", response_model=RoomSummaryResponse)
async def get_room(room_code: str):
    """Summary of one room.

    Example:
        GET /api/rooms/ABC-234
    """
    room = rooms.get(room_code)
    if not room or room.closed:
        raise HTTPException(status_code=404, detail="Room not found")
    return RoomSummaryResponse(**room.state.summary())


# ============================================
# WEBSOCKET ENDPOINT
# ============================================


@app.websocket("/ws")
async def relay_endpoint(websocket: WebSocket):
    """Relay connection.

    The first message is ``room:create`` or ``room:join``; the server answers
    with ``room:created`` / ``room:joined`` carrying the client id. After
    that, game messages flow both ways. Refused messages are answered with
    ``relay:error`` and the connection stays open.
    """
    await websocket.accept()
    session = ClientSession(rooms.register_client(), websocket, rooms)
    logger.info(f"Client {session.client_id} connected")

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                session.handle_text(raw)
            except RelayError as e:
                logger.debug(f"Client {session.client_id}: {e.message}")
                await websocket.send_json(e.to_envelope())

    except WebSocketDisconnect:
        logger.info(f"Client {session.client_id} disconnected")
    except Exception as e:
        logger.error(f"WebSocket error for client {session.client_id}: {e}", exc_info=True)
    finally:
        await session.disconnect()
        rooms.release_client(session.client_id)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)
