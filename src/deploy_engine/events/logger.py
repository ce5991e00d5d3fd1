"""Leveled engine logging on top of loguru."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Any

from loguru import logger

from deploy_engine.events.details import EventDetails

if TYPE_CHECKING:
    from deploy_engine.errors import EngineError

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[execution_id]}</cyan> "
    "<magenta>{extra[stage]}</magenta> - "
    "<level>{message}</level>"
)


def configure_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Replace loguru's sinks with a single stderr sink.

    Args:
        level: Minimum level to emit
        json_output: Serialize records as JSON instead of the text format
    """
    logger.remove()
    logger.configure(extra={"execution_id": "-", "stage": "-"})
    if json_output:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, level=level, format=LOG_FORMAT)


class EngineLogger:
    """Logger sink accepting Info, Error and Debug engine events.

    Every record is bound with the flattened ``EventDetails`` so that log
    lines can be filtered by organization, cluster, execution or stage.
    """

    def __init__(self, base: Any = logger) -> None:
        self._logger = base

    def info(self, details: EventDetails, message: str) -> None:
        self._logger.bind(**details.as_log_context()).info(message)

    def debug(self, details: EventDetails, message: str) -> None:
        self._logger.bind(**details.as_log_context()).debug(message)

    def error(self, error: EngineError, message: str | None = None) -> None:
        bound = self._logger.bind(
            **error.event_details.as_log_context(),
            error_category=error.category.name,
        )
        if message:
            bound.error(f"{message}: {error.to_safe_message()}")
        else:
            bound.error(error.to_safe_message())
        if error.underlying_error is not None and error.underlying_error.full_details:
            bound.debug(error.underlying_error.full_details)
