"""Loguru logging configuration.

Human-readable lines on stderr; optionally a rotating log file when a
``log_dir`` is provided.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

_LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} | {message}"


def setup_logging(log_level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """Configure Loguru.

    Args:
        log_level: Minimum log level to emit.
        log_dir: Optional directory for log files. When set, a file sink is
            added (rotated at 50 MB, retained 14 days).
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level.upper(),
        format=_LOG_FORMAT,
    )

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path / "ec-harmonize.log",
            level=log_level.upper(),
            format=_LOG_FORMAT,
            encoding="utf-8",
            rotation="50 MB",
            retention="14 days",
        )
