import logging
from typing import Dict, Optional

import asyncpg

from roster.repositories.errors import acquire
from roster.repositories.schema import fits_bigint

log: logging.Logger = logging.getLogger(__name__)


class TeamRepository:
    def __init__(self, pool: asyncpg.Pool) -> None:
        self.pool: asyncpg.Pool = pool

    async def get_by_id(self, team_id: int) -> Optional[Dict]:
        # ids beyond BIGINT cannot exist in the table
        if not fits_bigint(team_id):
            return None
        query = """
        SELECT id, position, created_at
        FROM teams
        WHERE id = $1
        """
        async with acquire(self.pool) as conn:
            row = await conn.fetchrow(query, team_id)
        if row:
            return dict(row)
        log.info(f"Team with id {team_id} not found")
        return None


def make_team_repository(pool: asyncpg.Pool) -> TeamRepository:
    return TeamRepository(pool)
