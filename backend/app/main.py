# backend/app/main.py
"""
Salon scheduling API.

Booking management, interactive calendar edits and last-minute openings
for independent beauty professionals.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Awaitable, Callable

from fastapi import APIRouter, FastAPI, Request, Response
import ulid

from . import models  # noqa: F401  registers every table on Base.metadata
from .core.config import settings
from .core.logging import setup_logging
from .core.request_context import reset_request_id, set_request_id
from .database import Base, engine
from .errors import register_error_handlers
from .routes.v1 import (
    availability as availability_v1,
    bookings as bookings_v1,
    calendar as calendar_v1,
    client_bookings as client_bookings_v1,
    health as health_v1,
    last_minute as last_minute_v1,
    professional as professional_v1,
    prometheus as prometheus_v1,
)

logger = logging.getLogger(__name__)

API_TITLE = "Salon Scheduling API"
API_VERSION = "1.0.0"
REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    setup_logging()
    logger.info(f"{API_TITLE} starting up (environment={settings.environment})")

    if engine.dialect.name == "sqlite":
        # Local and test databases have no migrations
        Base.metadata.create_all(bind=engine)

    yield

    logger.info(f"{API_TITLE} shutting down")
    engine.dispose()


app = FastAPI(
    title=API_TITLE,
    version=API_VERSION,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
    lifespan=app_lifespan,
)

# Register unified error envelope handlers
register_error_handlers(app)


@app.middleware("http")
async def attach_request_id(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    request_id = request.headers.get(REQUEST_ID_HEADER) or str(ulid.ULID())
    token = set_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        reset_request_id(token)
    response.headers[REQUEST_ID_HEADER] = request_id
    return response


# Create API v1 router
api_v1 = APIRouter(prefix=settings.api_prefix)

api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(client_bookings_v1.router, prefix="/client/bookings")
api_v1.include_router(calendar_v1.router, prefix="/calendar")
api_v1.include_router(professional_v1.router, prefix="/professional")
api_v1.include_router(last_minute_v1.router, prefix="/last-minute")
api_v1.include_router(availability_v1.router, prefix="/availability")

app.include_router(api_v1)
app.include_router(health_v1.router, prefix="/health")
app.include_router(prometheus_v1.router, prefix="/metrics")
