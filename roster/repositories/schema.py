import logging

import asyncpg

log: logging.Logger = logging.getLogger(__name__)

BIGINT_MIN = -(2**63)
BIGINT_MAX = 2**63 - 1
NAME_MAX_LENGTH = 255

SCHEMA_SQL = f"""
CREATE TABLE IF NOT EXISTS teams (
    id BIGSERIAL PRIMARY KEY,
    position INT NOT NULL DEFAULT 0,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS players (
    id BIGSERIAL PRIMARY KEY,
    name VARCHAR({NAME_MAX_LENGTH}) NOT NULL CHECK (btrim(name) <> ''),
    points_earned BIGINT NOT NULL DEFAULT 0 CHECK (points_earned >= 0),
    team_id BIGINT REFERENCES teams (id),
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

-- team-less players share the -1 partition
CREATE UNIQUE INDEX IF NOT EXISTS players_name_team_key
    ON players (lower(name), COALESCE(team_id, -1));

CREATE INDEX IF NOT EXISTS players_team_id_idx ON players (team_id);
"""


async def create_schema(pool: asyncpg.Pool) -> None:
    async with pool.acquire() as conn:
        await conn.execute(SCHEMA_SQL)
    log.info("Schema for teams/players is ready")


def fits_bigint(value: int) -> bool:
    return BIGINT_MIN <= value <= BIGINT_MAX
