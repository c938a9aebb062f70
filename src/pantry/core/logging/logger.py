"""
Structured Logging Module using structlog

This module configures structured logging for the caching engine:
- Stage identifiers for engine steps (see pantry.core.config.constants.Stage)
- Model name correlation through context variables
- JSON formatting for log aggregation, console formatting for development

Logging is opt-in: the library never configures logging on import, the host
application calls setup_logging() once at startup.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import Enum

import structlog
from structlog.types import EventDict, WrappedLogger

from pantry.core.config.settings import PantrySettings

# Context variable for the stocked model currently being served
model_ctx: ContextVar[str | None] = ContextVar("pantry_model", default=None)


def add_model_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add the current stocked model name to the log event.

    Explicit model=... arguments win over the context value.
    """
    model = model_ctx.get()
    if model and "model" not in event_dict:
        event_dict["model"] = model
    return event_dict


def add_timestamp(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add ISO timestamp to log event."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    return event_dict


def add_log_level_name(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Uppercase the log level name."""
    if "level" in event_dict:
        event_dict["level"] = event_dict["level"].upper()
    return event_dict


def setup_logging(
    settings: PantrySettings | None = None,
    log_level: str | None = None,
    log_format: str | None = None,
) -> None:
    """
    Setup structured logging with structlog.

    Args:
        settings: Settings to read LOG_LEVEL / LOG_FORMAT from
        log_level: Logging level, overrides settings
        log_format: 'json' or 'console', overrides settings
    """
    settings = settings or PantrySettings()

    log_level = log_level or settings.LOG_LEVEL
    log_format = log_format or settings.LOG_FORMAT

    logging.basicConfig(
        format="%(message)s", stream=sys.stdout, level=getattr(logging, log_level.upper())
    )

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_model_name,
            add_timestamp,
            structlog.stdlib.add_log_level,
            add_log_level_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance.

    Usage:
        logger = get_logger(__name__)
        logger.debug("Primary cache hit", stage=Stage.PRIMARY_FETCH, hits=3)
    """
    return structlog.get_logger(name)


def set_model_name(model: str) -> None:
    """Set the stocked model name for log entries in the current context."""
    model_ctx.set(model)


def get_model_name() -> str | None:
    return model_ctx.get()


def clear_model_name() -> None:
    model_ctx.set(None)


@contextmanager
def model_context(model: str):
    """
    Attribute every log entry inside the block to model.

    Restores the previous model name on exit, so blocks nest.
    """
    token = model_ctx.set(model)
    try:
        yield
    finally:
        model_ctx.reset(token)


def log_stage(
    logger: structlog.stdlib.BoundLogger, stage: str, message: str, level: str = "info", **kwargs
) -> None:
    """
    Log a message with stage information.

    Args:
        logger: Logger instance
        stage: Stage identifier (e.g., Stage.INDEX_POPULATE)
        message: Log message
        level: Log level (debug, info, warning, error, critical)
        **kwargs: Additional fields to log

    Usage:
        log_stage(logger, Stage.RESTOCK, "Restocked model", level="debug", count=12)
    """
    if isinstance(stage, Enum):
        stage = stage.value
    log_func = getattr(logger, level.lower())
    log_func(message, stage=stage, **kwargs)
