import logging

from dotenv import load_dotenv
load_dotenv()  # Load .env file before importing settings

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded

from core.config import settings
from core.errors import SchedulingError, scheduling_error_handler
from core.rate_limiter import limiter, rate_limit_exceeded_handler, RateLimits

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    # Settings validation is done automatically in core/config.py on import

    app = FastAPI(
        title="Intercity Scheduling API",
        description="Schedules, calendars and on-demand trip projection for intercity bus operators",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL] if settings.is_production else ["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # Domain errors -> 404 / 422 / 409 / 400
    app.add_exception_handler(SchedulingError, scheduling_error_handler)

    # Register routers
    from adapters.http.api.scheduling.routers import (
        calendar_router,
        schedule_router,
        trip_router,
        driver_router,
    )
    app.include_router(calendar_router, prefix="/api/v1")
    app.include_router(schedule_router, prefix="/api/v1")
    app.include_router(trip_router, prefix="/api/v1")
    app.include_router(driver_router, prefix="/api/v1")

    @app.get("/health")
    @limiter.limit(RateLimits.HEALTH)
    async def health_check(request: Request):
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
        }

    logger.info(f"Application created ({settings.ENVIRONMENT})")
    return app


app = create_app()
