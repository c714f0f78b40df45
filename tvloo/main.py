from contextlib import asynccontextmanager
import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from tvloo import __version__
from tvloo.config import ConfigurationError, CustomSettings, get_settings, setup_logging
from tvloo.routers import main_router
from tvloo.services.addon_service import AddonService, build_manifest
from tvloo.services.scheduler_service import CacheRefreshScheduler
from tvloo.services.sources import DataSources, build_sources


logger = logging.getLogger(__name__)


def create_app(settings: CustomSettings | None = None, sources: DataSources | None = None) -> FastAPI:
    """
    Build the addon application

    Args:
        settings: Loaded settings (read from the environment when omitted)
        sources: Pre-built data sources (built from settings when omitted)

    Returns:
        Configured FastAPI application

    Raises:
        ConfigurationError: If the environment configuration is invalid
    """
    settings = settings or get_settings()
    sources = sources or build_sources(settings)
    scheduler = CacheRefreshScheduler(sources, settings.cache_refresh_cron)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan context manager for startup and shutdown events"""
        logger.info("Starting TVLoo addon...")
        scheduler.start()
        logger.info("TVLoo addon started successfully")

        yield

        logger.info("Shutting down TVLoo addon...")
        try:
            scheduler.shutdown()
        except Exception as e:
            logger.error(f"Error during scheduler shutdown: {e}", exc_info=True)
        logger.info("TVLoo addon stopped")

    app = FastAPI(
        title="TVLoo",
        version=__version__,
        lifespan=lifespan
    )

    app.state.manifest = build_manifest(settings.catalog_name)
    app.state.addon_service = AddonService(sources, display_timezone=settings.display_timezone)

    # Stremio clients may come from any origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.include_router(main_router)

    return app


def run() -> None:
    """Console entry point: load configuration and serve the addon"""
    setup_logging()
    try:
        settings = get_settings()
    except ConfigurationError as e:
        logger.error(f"Cannot start TVLoo: {e}")
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level)
    settings.log_summary()

    app = create_app(settings)
    logger.info(f"Serving on http://{settings.host}:{settings.port}/manifest.json")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
