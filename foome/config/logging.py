"""structlog configuration for the API process."""

import logging
import sys

import structlog

# Libraries that are chatty at INFO
_NOISY_LOGGERS = ("sqlalchemy.engine", "aiobotocore", "botocore", "uvicorn.access")


def setup_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Route structlog and stdlib logging to stdout.

    JSON lines in production; a console renderer when ``json_output`` is off
    (debug) or stdout is a terminal.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer: structlog.types.Processor
    if not json_output or sys.stdout.isatty():
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    logging.getLogger().setLevel(level)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
