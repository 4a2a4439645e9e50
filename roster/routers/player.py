from fastapi import APIRouter, HTTPException, Request, Response, status

from roster.models import PlayerRequest, PlayerResponse, TeamPlayerCount
from roster.services.player import (
    UNSET,
    InvalidPlayerNameError,
    PlayerAlreadyExistsError,
    PlayerNotFoundError,
    PlayerService,
    TeamNotFoundError,
)


def _player_not_found(player_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Player with ID {player_id} not found",
    )


def _duplicate(name: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Player with name '{name}' already exists in this team",
    )


def make_player_router(player_service: PlayerService) -> APIRouter:
    router = APIRouter(prefix="/players", tags=["players"])

    @router.get("", response_model=list[PlayerResponse], summary="List all players")
    async def list_players():
        players = await player_service.list_players()
        return [PlayerResponse.from_row(p) for p in players]

    @router.get(
        "/team/{team_id}",
        response_model=list[PlayerResponse],
        summary="List the players of a team",
    )
    async def list_team_players(team_id: int):
        try:
            players = await player_service.list_team_players(team_id)
        except TeamNotFoundError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Team with ID {team_id} not found",
            )
        return [PlayerResponse.from_row(p) for p in players]

    @router.get(
        "/team/{team_id}/count",
        response_model=TeamPlayerCount,
        summary="Count the players of a team",
    )
    async def count_team_players(team_id: int):
        try:
            count = await player_service.count_team_players(team_id)
        except TeamNotFoundError:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Team with ID {team_id} not found",
            )
        return TeamPlayerCount(team=team_id, count=count)

    @router.get("/{player_id}", response_model=PlayerResponse, summary="Get a player")
    async def get_player(player_id: int):
        try:
            return PlayerResponse.from_row(await player_service.get_player(player_id))
        except PlayerNotFoundError:
            raise _player_not_found(player_id)

    @router.post(
        "",
        response_model=PlayerResponse,
        status_code=status.HTTP_201_CREATED,
        summary="Create a player",
    )
    async def create_player(data: PlayerRequest, request: Request, response: Response):
        try:
            player = await player_service.create_player(
                name=data.name, team_id=data.team, points_earned=data.points_earned
            )
        except InvalidPlayerNameError:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Player name must not be empty",
            )
        except TeamNotFoundError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Team with ID {e.team_id} not found",
            )
        except PlayerAlreadyExistsError as e:
            raise _duplicate(e.name)

        response.headers["Location"] = str(
            request.url_for("get_player", player_id=player["id"])
        )
        return PlayerResponse.from_row(player)

    @router.put(
        "/{player_id}", response_model=PlayerResponse, summary="Update a player"
    )
    async def update_player(player_id: int, data: PlayerRequest):
        team_id = data.team if "team" in data.model_fields_set else UNSET
        try:
            player = await player_service.update_player(
                player_id,
                name=data.name,
                team_id=team_id,
                points_earned=data.points_earned,
            )
        except PlayerNotFoundError:
            raise _player_not_found(player_id)
        except TeamNotFoundError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Team with ID {e.team_id} not found",
            )
        except PlayerAlreadyExistsError as e:
            raise _duplicate(e.name)
        return PlayerResponse.from_row(player)

    @router.delete(
        "/{player_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        response_class=Response,
        summary="Delete a player",
    )
    async def delete_player(player_id: int):
        try:
            await player_service.delete_player(player_id)
        except PlayerNotFoundError:
            raise _player_not_found(player_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router
