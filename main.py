"""
Interview Engine - timed mock-interview session service

Main application entry point.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from interview_engine.api.dependencies import build_orchestrator
from interview_engine.api.router import api_router
from interview_engine.config.settings import Settings, get_settings
from interview_engine.core.interview_orchestrator import InterviewOrchestrator
from interview_engine.core.timer_engine import TimerScheduler

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def create_app(
    settings: Settings | None = None,
    orchestrator: InterviewOrchestrator | None = None,
    start_scheduler: bool = True,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (defaults to cached settings)
        orchestrator: Prebuilt orchestrator, mainly for tests
        start_scheduler: Run the ~1 Hz tick loop during the app lifespan
    """
    settings = settings or get_settings()
    configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        # Startup
        logger.info(f"Starting {settings.app_name}...")
        logger.info(f"Running in {'debug' if settings.debug else 'production'} mode")
        scheduler = TimerScheduler(
            app.state.orchestrator.tick_timer,
            interval_seconds=settings.tick_interval_seconds,
        )
        if start_scheduler:
            scheduler.start()

        yield

        # Shutdown
        logger.info(f"Shutting down {settings.app_name}...")
        await scheduler.stop()
        await app.state.orchestrator.close()

    app = FastAPI(
        title=settings.app_name,
        description="Timed mock-interview session engine",
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator or build_orchestrator(settings)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router, prefix="/api")

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": settings.app_version,
            "stage": app.state.orchestrator.snapshot().stage.value,
        }

    return app


# ============================================================================
# RUN SERVER
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    app_settings = get_settings()
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=app_settings.host,
        port=app_settings.port,
        reload=app_settings.debug,
    )
