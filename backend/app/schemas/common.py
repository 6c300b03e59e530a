"""Shared schema types for consistent API contracts."""

from typing import Any, Dict, Optional

from ._strict_base import StrictModel


class ErrorResponse(StrictModel):
    """Body of every non-2xx response."""

    error_code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class HealthResponse(StrictModel):
    status: str
    environment: str
    database: str
