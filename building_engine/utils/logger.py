"""Structured logging utilities."""

from __future__ import annotations

import logging
import sys
from typing import Any, Optional

from building_engine.utils.config import get_settings


_LOGGER_INITIALIZED = False
_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging once.

    The engine is imported by a host application that may already have
    configured the root logger; ``basicConfig`` is a no-op in that case.
    """

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    resolved_level = (level or get_settings().log_level).upper()
    logging.basicConfig(level=resolved_level, format=_LOG_FORMAT, stream=sys.stdout)
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    """Return a configured logger for the requested module."""
    configure_logging()
    return logging.getLogger(name)


def format_fields(**fields: Any) -> str:
    """Render ``key=value`` pairs in the pipe-separated log style."""
    return " | ".join(f"{key}={value}" for key, value in fields.items())


def log_degraded_record(
    logger: logging.Logger,
    record_kind: str,
    reason: str,
    **fields: Any,
) -> None:
    """Record that an input was downgraded to a safe default instead of raising."""
    suffix = format_fields(**fields)
    if suffix:
        logger.warning("Degraded %s record | reason=%s | %s", record_kind, reason, suffix)
    else:
        logger.warning("Degraded %s record | reason=%s", record_kind, reason)
