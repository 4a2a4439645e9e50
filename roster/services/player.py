import logging
from typing import Dict, List, Optional

from roster.repositories.errors import DuplicatePlayerError, TeamReferenceError
from roster.repositories.player import PlayerRepository
from roster.repositories.team import TeamRepository

log: logging.Logger = logging.getLogger(__name__)

# Marks a field that was not present in the request at all.
UNSET = object()

OMITTED_TEAM_CLEAR = "clear"
OMITTED_TEAM_KEEP = "keep"


class InvalidPlayerNameError(Exception):
    pass


class PlayerNotFoundError(Exception):
    pass


class TeamNotFoundError(Exception):
    def __init__(self, team_id: int):
        super().__init__(team_id)
        self.team_id = team_id


class PlayerAlreadyExistsError(Exception):
    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


def _is_blank(name: Optional[str]) -> bool:
    return name is None or not name.strip()


class PlayerService:
    def __init__(
        self,
        player_repository: PlayerRepository,
        team_repository: TeamRepository,
        omitted_team: str = OMITTED_TEAM_CLEAR,
    ):
        if omitted_team not in (OMITTED_TEAM_CLEAR, OMITTED_TEAM_KEEP):
            raise ValueError(f"Unknown omitted team policy: {omitted_team}")
        self.player_repository = player_repository
        self.team_repository = team_repository
        self.omitted_team = omitted_team

    async def _resolve_team(self, team_id: Optional[int]) -> Optional[int]:
        if team_id is None:
            return None
        team = await self.team_repository.get_by_id(team_id)
        if not team:
            raise TeamNotFoundError(team_id)
        return team["id"]

    async def list_players(self) -> List[Dict]:
        return await self.player_repository.list_all()

    async def get_player(self, player_id: int) -> Dict:
        player = await self.player_repository.get_by_id(player_id)
        if not player:
            raise PlayerNotFoundError
        return player

    async def list_team_players(self, team_id: int) -> List[Dict]:
        await self._resolve_team(team_id)
        return await self.player_repository.list_by_team(team_id)

    async def count_team_players(self, team_id: int) -> int:
        await self._resolve_team(team_id)
        return await self.player_repository.count_by_team(team_id)

    async def create_player(
        self,
        name: Optional[str],
        team_id: Optional[int] = None,
        points_earned: Optional[int] = None,
    ) -> Dict:
        if _is_blank(name):
            raise InvalidPlayerNameError
        team_id = await self._resolve_team(team_id)

        existing = await self.player_repository.get_by_name_and_team(name, team_id)
        if existing:
            log.info(f"Rejected duplicate player '{name}' in team {team_id}")
            raise PlayerAlreadyExistsError(name)

        try:
            return await self.player_repository.create(
                {
                    "name": name,
                    "team_id": team_id,
                    "points_earned": points_earned if points_earned is not None else 0,
                }
            )
        except DuplicatePlayerError:
            log.info(f"Lost uniqueness race creating '{name}' in team {team_id}")
            raise PlayerAlreadyExistsError(name)
        except TeamReferenceError:
            raise TeamNotFoundError(team_id)

    async def update_player(
        self,
        player_id: int,
        name: Optional[str] = None,
        team_id=UNSET,
        points_earned: Optional[int] = None,
    ) -> Dict:
        """Apply a partial update to a player.

        ``team_id`` is ``UNSET`` when the request had no team field. An omitted
        team is cleared or kept according to the service's ``omitted_team``
        policy, while an explicit ``None`` always clears it.
        """
        player = await self.player_repository.get_by_id(player_id)
        if not player:
            raise PlayerNotFoundError

        if team_id is UNSET:
            target_team = (
                player["team_id"] if self.omitted_team == OMITTED_TEAM_KEEP else None
            )
        else:
            target_team = await self._resolve_team(team_id)

        new_name = player["name"]
        if not _is_blank(name):
            existing = await self.player_repository.get_by_name_and_team(
                name, target_team
            )
            if existing and existing["id"] != player_id:
                log.info(f"Rejected rename of {player_id} to '{name}'")
                raise PlayerAlreadyExistsError(name)
            new_name = name

        updated = dict(player)
        updated["name"] = new_name
        updated["team_id"] = target_team
        if points_earned is not None:
            updated["points_earned"] = points_earned

        try:
            result = await self.player_repository.update(updated)
        except DuplicatePlayerError:
            raise PlayerAlreadyExistsError(new_name)
        except TeamReferenceError:
            raise TeamNotFoundError(target_team)
        if not result:
            raise PlayerNotFoundError
        return result

    async def delete_player(self, player_id: int) -> None:
        player = await self.player_repository.get_by_id(player_id)
        if not player:
            raise PlayerNotFoundError
        if not await self.player_repository.delete(player_id):
            raise PlayerNotFoundError


def make_player_service(
    player_repository: PlayerRepository,
    team_repository: TeamRepository,
    omitted_team: str = OMITTED_TEAM_CLEAR,
) -> PlayerService:
    return PlayerService(
        player_repository=player_repository,
        team_repository=team_repository,
        omitted_team=omitted_team,
    )
