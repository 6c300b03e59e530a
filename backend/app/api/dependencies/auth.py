# backend/app/api/dependencies/auth.py
"""
Caller identity dependencies.

Authentication happens upstream; the session layer forwards the
authenticated profile id in a header. These dependencies only resolve
that id to a profile row.
"""

import logging

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from ...database import with_db_retry
from ...models.professional import ClientProfile, ProfessionalProfile
from ...repositories import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)

PROFESSIONAL_HEADER = "X-Professional-Id"
CLIENT_HEADER = "X-Client-Id"


def _unauthorized(header: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=f"Missing or unknown {header}",
    )


def get_current_professional(
    professional_id: str | None = Header(None, alias=PROFESSIONAL_HEADER),
    db: Session = Depends(get_db),
) -> ProfessionalProfile:
    """
    Get the professional making the request.

    Raises:
        HTTPException: 401 when the header is missing or names no profile
    """
    if not professional_id:
        raise _unauthorized(PROFESSIONAL_HEADER)
    repository = RepositoryFactory.create_professional_profile_repository(db)
    professional = with_db_retry(
        "get_current_professional",
        lambda: repository.get_by_id(professional_id.strip(), load_relationships=False),
    )
    if professional is None:
        logger.warning(f"Rejected request for unknown professional {professional_id}")
        raise _unauthorized(PROFESSIONAL_HEADER)
    return professional


def get_current_client(
    client_id: str | None = Header(None, alias=CLIENT_HEADER),
    db: Session = Depends(get_db),
) -> ClientProfile:
    if not client_id:
        raise _unauthorized(CLIENT_HEADER)
    repository = RepositoryFactory.create_client_profile_repository(db)
    client = with_db_retry(
        "get_current_client",
        lambda: repository.get_by_id(client_id.strip(), load_relationships=False),
    )
    if client is None:
        raise _unauthorized(CLIENT_HEADER)
    return client
