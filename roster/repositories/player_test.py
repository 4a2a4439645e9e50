import logging

import asyncpg
import pytest
import pytest_asyncio
from testcontainers.postgres import PostgresContainer

from roster.repositories.errors import (
    DuplicatePlayerError,
    StorageUnavailableError,
    TeamReferenceError,
)
from roster.repositories.player import PlayerRepository, make_player_repository
from roster.repositories.schema import create_schema
from roster.repositories.team import make_team_repository

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s"
)
logger = logging.getLogger(__name__)

pytestmark = pytest.mark.asyncio(loop_scope="module")


# ------------------------
# PostgreSQL container fixture
# ------------------------
@pytest_asyncio.fixture(scope="module", loop_scope="module")
async def postgres_pool():
    logger.info("Starting PostgreSQL container...")
    container = PostgresContainer("postgres:16-alpine")
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")
    dsn = container.get_connection_url().replace("+psycopg2", "")
    logger.info(f"PostgreSQL container DSN: {dsn}")

    pool = await asyncpg.create_pool(dsn=dsn, min_size=1, max_size=5)
    await create_schema(pool)
    # a second run must be a no-op
    await create_schema(pool)

    yield pool

    logger.info("Closing PostgreSQL pool...")
    await pool.close()
    container.stop()


@pytest_asyncio.fixture(loop_scope="module")
async def team_ids(postgres_pool: asyncpg.Pool):
    async with postgres_pool.acquire() as conn:
        rows = await conn.fetch(
            "INSERT INTO teams (position) VALUES (0), (1) RETURNING id"
        )
    return [row["id"] for row in rows]


@pytest_asyncio.fixture(loop_scope="module")
async def player_repo(postgres_pool: asyncpg.Pool):
    repo = make_player_repository(pool=postgres_pool)
    yield repo
    logger.info("Cleaning up 'players' table after test...")
    await repo.delete_all()


# ------------------------
# Tests
# ------------------------
async def test_create_and_find(player_repo: PlayerRepository, team_ids):
    team = team_ids[0]
    created = await player_repo.create({"name": "Alice", "team_id": team})

    assert created["points_earned"] == 0
    assert created["team_id"] == team

    assert (await player_repo.get_by_id(created["id"]))["name"] == "Alice"
    found = await player_repo.get_by_name_and_team("ALICE", team)
    assert found["id"] == created["id"]
    assert await player_repo.get_by_name_and_team("Alice", None) is None
    assert await player_repo.get_by_name_and_team("Alice", team_ids[1]) is None
    assert await player_repo.get_by_id(created["id"] + 1000) is None


async def test_list_all_ordered_by_name(player_repo: PlayerRepository, team_ids):
    for name in ["Charlie", "Alice", "Bob"]:
        await player_repo.create({"name": name, "team_id": None})

    names = [p["name"] for p in await player_repo.list_all()]
    assert names == ["Alice", "Bob", "Charlie"]


async def test_list_and_count_by_team(player_repo: PlayerRepository, team_ids):
    first, second = team_ids
    await player_repo.create({"name": "Alice", "team_id": first})
    await player_repo.create({"name": "Bob", "team_id": first})
    await player_repo.create({"name": "Carol", "team_id": second})
    await player_repo.create({"name": "Dave", "team_id": None})

    assert [p["name"] for p in await player_repo.list_by_team(first)] == [
        "Alice",
        "Bob",
    ]
    assert await player_repo.count_by_team(first) == 2
    assert await player_repo.count_by_team(second) == 1


async def test_unique_index_per_team(player_repo: PlayerRepository, team_ids):
    team = team_ids[0]
    await player_repo.create({"name": "Alice", "team_id": team})
    await player_repo.create({"name": "Alice", "team_id": None})

    with pytest.raises(DuplicatePlayerError):
        await player_repo.create({"name": "alice", "team_id": team})
    with pytest.raises(DuplicatePlayerError):
        await player_repo.create({"name": "ALICE", "team_id": None})


async def test_update_into_taken_scope(player_repo: PlayerRepository, team_ids):
    team = team_ids[0]
    await player_repo.create({"name": "Alice", "team_id": None})
    moved = await player_repo.create({"name": "Alice", "team_id": team})

    moved["team_id"] = None
    with pytest.raises(DuplicatePlayerError):
        await player_repo.update(moved)


async def test_update_and_delete(player_repo: PlayerRepository, team_ids):
    player = await player_repo.create(
        {"name": "Alice", "team_id": team_ids[0], "points_earned": 3}
    )
    player.update(name="Alicia", team_id=None, points_earned=9)

    updated = await player_repo.update(player)
    assert updated["name"] == "Alicia"
    assert updated["team_id"] is None
    assert updated["points_earned"] == 9

    assert await player_repo.delete(player["id"]) is True
    assert await player_repo.delete(player["id"]) is False
    assert await player_repo.update(player) is None


async def test_unknown_team_reference(player_repo: PlayerRepository):
    with pytest.raises(TeamReferenceError):
        await player_repo.create({"name": "Ghost", "team_id": 987654})


async def test_negative_points_rejected(player_repo: PlayerRepository):
    with pytest.raises(StorageUnavailableError):
        await player_repo.create({"name": "Neg", "team_id": None, "points_earned": -1})


async def test_team_repository(postgres_pool: asyncpg.Pool, team_ids):
    team_repo = make_team_repository(postgres_pool)

    team = await team_repo.get_by_id(team_ids[0])
    assert team["id"] == team_ids[0]
    assert await team_repo.get_by_id(987654) is None


async def test_get_by_name_across_teams(player_repo: PlayerRepository, team_ids):
    first = await player_repo.create({"name": "Alice", "team_id": team_ids[0]})
    await player_repo.create({"name": "alice", "team_id": None})

    found = await player_repo.get_by_name("ALICE")
    assert found["id"] == first["id"]
    assert await player_repo.get_by_name("Zoe") is None
