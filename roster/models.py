from typing import Dict

from pydantic import BaseModel, ConfigDict, Field

from roster.repositories.schema import BIGINT_MAX, BIGINT_MIN, NAME_MAX_LENGTH


class PlayerRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str | None = Field(
        None,
        max_length=NAME_MAX_LENGTH,
        description="Player name, unique within a team",
    )
    points_earned: int | None = Field(
        None,
        ge=0,
        le=BIGINT_MAX,
        alias="pointsEarned",
        description="Points earned so far",
    )
    team: int | None = Field(
        None,
        ge=BIGINT_MIN,
        le=BIGINT_MAX,
        description="ID of the team the player belongs to",
    )


class PlayerResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(..., description="Unique player identifier")
    name: str = Field(..., description="Player name")
    points_earned: int = Field(0, alias="pointsEarned", description="Points earned")
    team: int | None = Field(None, description="ID of the player's team")

    @classmethod
    def from_row(cls, row: Dict) -> "PlayerResponse":
        return cls(
            id=row["id"],
            name=row["name"],
            points_earned=row["points_earned"],
            team=row.get("team_id"),
        )


class TeamPlayerCount(BaseModel):
    team: int
    count: int


class ErrorResponse(BaseModel):
    status: int
    message: str
    path: str
