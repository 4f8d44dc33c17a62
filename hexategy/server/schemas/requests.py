"""Pydantic schemas for inbound relay messages."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Envelope(BaseModel):
    """Every relay message: ``{type, from?, payload}``."""

    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(min_length=1, description="Message type, e.g. 'player:orders'")
    sender: str | None = Field(default=None, alias="from", description="Sender client id")
    payload: dict[str, Any] | None = Field(default=None, description="Type-specific body")


class RoomRequest(BaseModel):
    """Payload of ``room:create`` and ``room:join``."""

    roomCode: str | None = Field(  # noqa: N815
        default=None, description="Code of the room to join (XXX-XXX)"
    )
    name: str | None = Field(default=None, description="Display name")


class ConfigUpdateRequest(BaseModel):
    """Payload of ``admin:config``: any subset of the game configuration."""

    model_config = ConfigDict(extra="ignore")

    roundDuration: int | None = Field(default=None, gt=0)  # noqa: N815
    maxRounds: int | None = Field(default=None, gt=0)  # noqa: N815
    baseProduction: int | None = Field(default=None, ge=0)  # noqa: N815
    productionPerNeighbor: int | None = Field(default=None, ge=0)  # noqa: N815
    bonusAfterRounds: int | None = Field(default=None, ge=0)  # noqa: N815
    bonusTroops: int | None = Field(default=None, ge=0)  # noqa: N815
    defenseAdvantage: float | None = Field(default=None, ge=0.0, le=1.0)  # noqa: N815
    victoryCondition: str | None = None  # noqa: N815
    victoryParam: int | None = Field(default=None, ge=0)  # noqa: N815
    startPlacement: str | None = None  # noqa: N815
    startRegions: int | None = Field(default=None, ge=1)  # noqa: N815
    visibilityMode: str | None = None  # noqa: N815
    mapSize: int | None = None  # noqa: N815

    @field_validator(
        "roundDuration",
        "baseProduction",
        "productionPerNeighbor",
        "bonusAfterRounds",
        "bonusTroops",
        "defenseAdvantage",
        "victoryCondition",
        "victoryParam",
        "startPlacement",
        "startRegions",
        "visibilityMode",
        "mapSize",
    )
    @classmethod
    def reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("may not be null")
        return value

    def changes(self) -> dict[str, Any]:
        """Only the keys the client actually sent, in wire form.

        ``maxRounds`` may be sent as null to clear the round limit.
        """
        return self.model_dump(exclude_unset=True)


class KickRequest(BaseModel):
    """Payload of ``admin:kick``."""

    id: str = Field(min_length=1, description="Client id of the player to remove")


class RenameRequest(BaseModel):
    """Payload of ``admin:rename``."""

    id: str = Field(min_length=1, description="Client id of the player to rename")
    name: str = Field(description="New display name")
