import logging
from typing import Dict, List, Optional

import asyncpg

from roster.repositories.errors import acquire
from roster.repositories.schema import fits_bigint

log: logging.Logger = logging.getLogger(__name__)

PLAYER_COLUMNS = "id, name, points_earned, team_id, created_at, updated_at"


class PlayerRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool: asyncpg.Pool = pool

    async def list_all(self) -> List[Dict]:
        query = f"""
        SELECT {PLAYER_COLUMNS}
        FROM players
        ORDER BY name ASC, id ASC
        """
        async with acquire(self.pool) as conn:
            rows = await conn.fetch(query)
        results = [dict(row) for row in rows]
        log.info(f"Loaded {len(results)} players")
        return results

    async def get_by_id(self, player_id: int) -> Optional[Dict]:
        # ids beyond BIGINT cannot exist in the table
        if not fits_bigint(player_id):
            return None
        query = f"""
        SELECT {PLAYER_COLUMNS}
        FROM players
        WHERE id = $1
        """
        async with acquire(self.pool) as conn:
            row = await conn.fetchrow(query, player_id)
        if row:
            return dict(row)
        log.info(f"Player with id {player_id} not found")
        return None

    async def get_by_name(self, name: str) -> Optional[Dict]:
        """First player with this name in any team, ignoring case."""
        query = f"""
        SELECT {PLAYER_COLUMNS}
        FROM players
        WHERE lower(name) = lower($1)
        ORDER BY id ASC
        LIMIT 1
        """
        async with acquire(self.pool) as conn:
            row = await conn.fetchrow(query, name)
        return dict(row) if row else None

    async def get_by_name_and_team(
        self, name: str, team_id: Optional[int]
    ) -> Optional[Dict]:
        if team_id is not None and not fits_bigint(team_id):
            return None
        if team_id is None:
            query = f"""
            SELECT {PLAYER_COLUMNS}
            FROM players
            WHERE lower(name) = lower($1) AND team_id IS NULL
            LIMIT 1
            """
            args = (name,)
        else:
            query = f"""
            SELECT {PLAYER_COLUMNS}
            FROM players
            WHERE lower(name) = lower($1) AND team_id = $2
            LIMIT 1
            """
            args = (name, team_id)
        async with acquire(self.pool) as conn:
            row = await conn.fetchrow(query, *args)
        return dict(row) if row else None

    async def list_by_team(self, team_id: int) -> List[Dict]:
        if not fits_bigint(team_id):
            return []
        query = f"""
        SELECT {PLAYER_COLUMNS}
        FROM players
        WHERE team_id = $1
        ORDER BY name ASC, id ASC
        """
        async with acquire(self.pool) as conn:
            rows = await conn.fetch(query, team_id)
        results = [dict(row) for row in rows]
        log.info(f"Loaded {len(results)} players of team {team_id}")
        return results

    async def count_by_team(self, team_id: int) -> int:
        if not fits_bigint(team_id):
            return 0
        query = "SELECT count(*) FROM players WHERE team_id = $1"
        async with acquire(self.pool) as conn:
            return await conn.fetchval(query, team_id)

    async def create(self, player: Dict) -> Dict:
        query = f"""
        INSERT INTO players (name, points_earned, team_id, created_at, updated_at)
        VALUES ($1, $2, $3, NOW(), NOW())
        RETURNING {PLAYER_COLUMNS}
        """
        async with acquire(self.pool) as conn:
            row = await conn.fetchrow(
                query,
                player["name"],
                player.get("points_earned", 0),
                player.get("team_id"),
            )
        log.info(f"Created player {row['id']} ({row['name']})")
        return dict(row)

    async def update(self, player: Dict) -> Optional[Dict]:
        query = f"""
        UPDATE players
        SET name = $2,
            points_earned = $3,
            team_id = $4,
            updated_at = NOW()
        WHERE id = $1
        RETURNING {PLAYER_COLUMNS}
        """
        async with acquire(self.pool) as conn:
            row = await conn.fetchrow(
                query,
                player["id"],
                player["name"],
                player["points_earned"],
                player.get("team_id"),
            )
        if not row:
            log.warning(f"Player {player['id']} vanished before update")
            return None
        log.info(f"Updated player {row['id']}")
        return dict(row)

    async def delete(self, player_id: int) -> bool:
        if not fits_bigint(player_id):
            return False
        async with acquire(self.pool) as conn:
            status = await conn.execute("DELETE FROM players WHERE id = $1", player_id)
        deleted = status == "DELETE 1"
        if deleted:
            log.info(f"Deleted player {player_id}")
        return deleted

    async def delete_all(self) -> int:
        async with acquire(self.pool) as conn:
            status = await conn.execute("DELETE FROM players")
        count = int(status.split()[-1])
        log.warning(f"Deleted all players ({count})")
        return count


def make_player_repository(pool: asyncpg.Pool) -> PlayerRepository:
    return PlayerRepository(pool)
