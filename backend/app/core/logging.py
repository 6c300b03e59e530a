"""Process-wide logging setup."""

import logging
from typing import Optional

from .config import settings
from .request_context import RequestIdFilter

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"


def setup_logging(level: Optional[str] = None) -> None:
    """Configure the root logger once and tag every record with the request id."""
    root = logging.getLogger()
    resolved = getattr(logging, (level or settings.log_level).upper(), logging.INFO)

    if not any(getattr(h, "_salon_handler", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RequestIdFilter())
        handler._salon_handler = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    root.setLevel(resolved)
    # SQL echo is noisy at INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
