"""FastAPI application factory."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI

from streakboard.competition.router import router as leaderboard_router
from streakboard.config import get_settings
from streakboard.database import close_db, create_tables, init_db
from streakboard.gamification.router import router as achievements_router
from streakboard.health.router import router as health_router
from streakboard.middleware import setup_middleware
from streakboard.progress.router import router as progress_router
from streakboard.redis_client import close_redis, init_redis
from streakboard.stats.router import router as stats_router
from streakboard.users.router import router as users_router

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup and shutdown lifecycle."""
    settings = get_settings()
    await init_db(settings.database_url)
    await create_tables()
    await init_redis(settings.redis_url)
    logger.info("startup_complete", environment=settings.environment, version=settings.app_version)

    yield

    await close_db()
    await close_redis()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Streakboard API",
        description="Daily habit challenge backend: progress, achievements, statistics and leaderboards",
        version=settings.app_version,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    setup_middleware(app, settings)
    app.include_router(health_router, tags=["Health"])
    app.include_router(users_router)
    app.include_router(progress_router)
    app.include_router(achievements_router)
    app.include_router(stats_router)
    app.include_router(leaderboard_router)

    return app


app = create_app()
