"""
Travel Planner - FastAPI Application Entry Point.

Feature-based modular architecture:
  Each feature in travel_planner/features/ has its own schemas, service, router and tools.
  Adding a new feature = adding a new folder, no existing code changes needed.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from travel_planner.config import get_settings

# ── Feature Routers ──────────────────────────────────────
from travel_planner.features.timezone.router import router as timezone_router
from travel_planner.features.trip.router import router as trip_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup & shutdown."""
    settings = get_settings()
    print(f"🚀 {settings.APP_NAME} v{settings.APP_VERSION} starting...")
    print(f"🏠 Home timezone: {settings.HOME_TIMEZONE}")
    print(f"🕐 Business hours: {settings.BUSINESS_HOURS_START}-{settings.BUSINESS_HOURS_END} "
          f"({settings.BUSINESS_HOURS_GOVERNED_BY} clock)")
    yield
    print("👋 Shutting down...")


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Conversational travel planning with timezone conflict reasoning",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Register Feature Routers ─────────────────────────
    app.include_router(timezone_router, prefix="/api/timezone", tags=["Timezone"])
    app.include_router(trip_router, prefix="/api/trip", tags=["Trip"])

    # ── Health Check ─────────────────────────────────────
    @app.get("/health", tags=["System"])
    async def health_check():
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    return app


app = create_app()
