"""Pydantic response schemas for API endpoints."""

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response of the health check endpoint."""

    service: str
    status: str
    activeRooms: int  # noqa: N815


class RoomSummaryResponse(BaseModel):
    """Public summary of one room."""

    roomCode: str  # noqa: N815
    authorityId: str  # noqa: N815
    phase: str
    round: int
    members: int
    players: list[dict] = Field(default_factory=list)
