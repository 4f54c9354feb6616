# backend/thrive/main.py
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
from typing import AsyncGenerator, Dict

from fastapi import APIRouter, FastAPI

from .core.config import is_running_tests, settings
from .errors import register_error_handlers
from .routes import prometheus
from .routes.v1 import bookings as bookings_v1, sessions as sessions_v1

API_TITLE = "Thrive Booking API"
API_VERSION = "1.0.0"

# Configure logging
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{API_TITLE} starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    if settings.is_sqlite and settings.environment == "development":
        # Local SQLite has no migrations; build the schema on first start.
        from . import models  # noqa: F401
        from .database import Base, engine

        Base.metadata.create_all(bind=engine)

    yield

    logger.info(f"{API_TITLE} shutting down...")


def create_app() -> FastAPI:
    app = FastAPI(title=API_TITLE, version=API_VERSION, lifespan=app_lifespan)
    register_error_handlers(app)

    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(bookings_v1.router, prefix="/bookings")
    api_v1.include_router(sessions_v1.router, prefix="/sessions")
    app.include_router(api_v1)
    app.include_router(prometheus.router)

    @app.get("/health", include_in_schema=False)
    def health_check() -> Dict[str, str]:
        return {
            "status": "healthy",
            "version": API_VERSION,
            "environment": settings.environment,
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        }

    return app


app = create_app()
