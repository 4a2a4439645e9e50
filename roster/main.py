import logging
from contextlib import asynccontextmanager

import asyncpg
import uvicorn
from fastapi import FastAPI

from roster.config import Settings, get_settings
from roster.errors import register_error_handlers
from roster.middlewares.logging import LoggingMiddleware
from roster.repositories.player import make_player_repository
from roster.repositories.schema import create_schema
from roster.repositories.team import make_team_repository
from roster.routers.player import make_player_router
from roster.services.player import make_player_service


# ------------------ App Factory ------------------
def create_app(settings: Settings) -> FastAPI:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    log = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ---------- STARTUP ----------
        pool = await asyncpg.create_pool(
            dsn=settings.POSTGRES_DSN,
            min_size=settings.POSTGRES_POOL_MIN_SIZE,
            max_size=settings.POSTGRES_POOL_MAX_SIZE,
            max_inactive_connection_lifetime=settings.POSTGRES_POOL_MAX_IDLE,
        )
        app.state.db_pool = pool
        log.info(
            f"Connected to Postgres at {settings.POSTGRES_HOST}:{settings.POSTGRES_PORT}"
        )

        if settings.DB_CREATE_SCHEMA:
            await create_schema(pool)

        player_service = make_player_service(
            player_repository=make_player_repository(pool),
            team_repository=make_team_repository(pool),
            omitted_team=settings.PLAYER_UPDATE_OMITTED_TEAM,
        )
        app.include_router(
            make_player_router(player_service), prefix=settings.API_PREFIX
        )

        try:
            yield
        finally:
            # ---------- SHUTDOWN ----------
            await pool.close()
            log.info("Postgres pool closed")

    app = FastAPI(title=settings.APP_TITLE, lifespan=lifespan)
    app.add_middleware(LoggingMiddleware)
    register_error_handlers(app)

    @app.get("/health")
    async def health():
        try:
            async with app.state.db_pool.acquire() as conn:
                await conn.execute("SELECT 1")
            return {"status": "ok"}
        except (asyncpg.PostgresError, asyncpg.InterfaceError, OSError) as e:
            log.warning(f"Health check failed: {e}")
            return {"status": "fail"}

    return app


def app_factory() -> FastAPI:
    return create_app(get_settings())


# ------------------ Uvicorn Runner ------------------
def run_uvicorn(settings: Settings):
    # reload needs an import string, so uvicorn builds the app itself
    uvicorn.run(
        "roster.main:app_factory",
        factory=True,
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        log_level=settings.LOG_LEVEL.lower(),
        reload=settings.APP_RELOAD,
    )


# ------------------ Main ------------------
def main():
    run_uvicorn(get_settings())


if __name__ == "__main__":
    main()
