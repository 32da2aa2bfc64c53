"""Process-wide logging setup for the ward API."""

from __future__ import annotations

import logging

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(*, level: str) -> None:
    """Configure root logging once, falling back to INFO for unknown level names."""

    normalized_level = level.strip().upper() or "INFO"
    resolved_level = logging.getLevelName(normalized_level)
    if not isinstance(resolved_level, int):
        resolved_level = logging.INFO

    logging.basicConfig(
        level=resolved_level,
        format=_LOG_FORMAT,
    )
    # Per-statement SQL echo is too noisy at INFO.
    logging.getLogger("sqlalchemy.engine").setLevel(max(resolved_level, logging.WARNING))
