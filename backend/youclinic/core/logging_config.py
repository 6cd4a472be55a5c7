"""
Logging setup.

Applies LOG_LEVEL and LOG_FORMAT to the root logger. ``json`` renders every
stdlib record through structlog's JSONRenderer, one object per line for log
shippers; ``text`` is for local development.
"""

import logging
import sys

import structlog

from .config import settings


TEXT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Applied to records coming from stdlib loggers before rendering.
PRE_CHAIN = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.TimeStamper(fmt="iso"),
]


def json_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        foreign_pre_chain=PRE_CHAIN,
    )


def configure_logging() -> None:
    handler = logging.StreamHandler(sys.stdout)
    if settings.log_format == "json":
        handler.setFormatter(json_formatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    logging.basicConfig(
        level=settings.log_level,
        handlers=[handler],
        force=True,
    )
