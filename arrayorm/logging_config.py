"""
Logging setup for arrayorm.

The library logs through loguru but stays silent until an application
opts in: the package disables its own logger namespace on import, and
``configure_logging`` turns it back on with a single sink.
"""

from __future__ import annotations

import sys
from typing import Optional

from loguru import logger
from pydantic import BaseModel, field_validator


LOGGER_NAME = "arrayorm"

VALID_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")


class LogConfig(BaseModel):
    """
    Where and how arrayorm log records are written.

    ``sink`` is "stderr", "stdout", or a file path. ``rotation`` and
    ``retention`` only apply to file sinks.
    """
    level: str = "INFO"
    sink: str = "stderr"
    format: str = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {name} | {message}"
    rotation: Optional[str] = None
    retention: Optional[str] = None

    @field_validator("level")
    @classmethod
    def _check_level(cls, value: str) -> str:
        level = value.upper()
        if level not in VALID_LEVELS:
            raise ValueError(f"level must be one of {', '.join(VALID_LEVELS)}")
        return level


_sink_id: Optional[int] = None


def configure_logging(config: Optional[LogConfig] = None) -> int:
    """
    Route arrayorm logs to the configured sink.

    Only the sink added by an earlier call is replaced; sinks the host
    application added are left alone. Returns the new sink id.
    """
    global _sink_id
    config = config or LogConfig()

    _remove_sink()

    if config.sink in ("stderr", "stdout"):
        stream = sys.stderr if config.sink == "stderr" else sys.stdout
        _sink_id = logger.add(stream, level=config.level, format=config.format)
    else:
        _sink_id = logger.add(
            config.sink,
            level=config.level,
            format=config.format,
            rotation=config.rotation,
            retention=config.retention,
        )

    logger.enable(LOGGER_NAME)
    logger.debug("arrayorm logging enabled at {}", config.level)
    return _sink_id


def disable_logging() -> None:
    """Silence arrayorm log records again and drop the arrayorm sink."""
    logger.disable(LOGGER_NAME)
    _remove_sink()


def _remove_sink() -> None:
    global _sink_id
    if _sink_id is not None:
        logger.remove(_sink_id)
        _sink_id = None
