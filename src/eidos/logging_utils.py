"""Runtime logging helpers."""

from __future__ import annotations

import os
import sys

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {name}:{function}:{line} | {extra[issue]} | {message}"
_CONFIGURED_LEVEL: str | None = None


def _stderr_sink(message: str) -> None:
    # Resolve at write time so redirected stderr (CliRunner, Actions) is honored.
    sys.stderr.write(message)


def configure_logging(level: str | None = None) -> None:
    """Configure process-level logging once per level."""

    global _CONFIGURED_LEVEL
    resolved = (level or os.getenv("EIDOS_LOG_LEVEL", "INFO")).upper()
    if resolved == _CONFIGURED_LEVEL:
        return

    logger.remove()
    logger.configure(extra={"issue": "-"})
    logger.add(
        _stderr_sink,
        level=resolved,
        format=LOG_FORMAT,
        backtrace=False,
        diagnose=False,
    )
    _CONFIGURED_LEVEL = resolved
