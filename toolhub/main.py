"""FastAPI application entrypoint."""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI

from toolhub import __version__
from toolhub.routers import health, tools, preferences, recommendations
from toolhub.settings import settings
from toolhub.startup import run_startup_validation
from toolhub.middleware import RequestLoggingMiddleware, setup_logging

# Configure logging before anything else
setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan with startup validation.

    Validates settings, storage and the catalog before accepting traffic.
    Fails fast with clear error messages if anything is invalid.
    """
    logger.info(f"Starting application in {settings.ENV} environment")

    try:
        app.state.services = run_startup_validation(settings)
    except Exception as e:
        logger.error(f"Startup validation failed: {e}")
        logger.error("Application will not start")
        raise

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title="AI Tools Directory",
    description="Browse AI tools and get personalized recommendations",
    version=__version__,
    lifespan=lifespan
)

app.add_middleware(RequestLoggingMiddleware, user_id_header=settings.USER_ID_HEADER)

app.include_router(health.router)
app.include_router(tools.router)
app.include_router(preferences.router)
app.include_router(recommendations.router)
