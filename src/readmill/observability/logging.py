"""
structlog setup for readmill.

Library code only ever calls ``structlog.get_logger``; applications (and the
``readmill`` CLI) call :func:`configure_logging` once to decide where events
go. Events bound inside ``ContentExtractor.extract_content`` carry an
``extraction_id`` through the contextvars processor.
"""

from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING, Any, List

import structlog

if TYPE_CHECKING:
    from readmill.config.config import MonitoringConfig


def _shared_processors() -> List[Any]:
    """Processors applied to structlog events and foreign stdlib records alike."""
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]


def _build_handler(config: MonitoringConfig) -> logging.Handler:
    renderer: Any
    handler: logging.Handler
    if config.log_file:
        renderer = structlog.processors.JSONRenderer()
        handler = logging.FileHandler(config.log_file, encoding="utf-8")
    else:
        # stdout is reserved for extracted content.
        renderer = structlog.dev.ConsoleRenderer(colors=False)
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
            foreign_pre_chain=_shared_processors(),
        )
    )
    return handler


def configure_logging(config: MonitoringConfig) -> None:
    """Route structlog and stdlib logging through one handler at the configured level."""
    root_logger = logging.getLogger()
    root_logger.handlers = [_build_handler(config)]
    root_logger.setLevel(config.log_level)

    structlog.configure(
        processors=[
            *_shared_processors(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    structlog.get_logger("readmill.logging").debug(
        "Logging configured", level=config.log_level, output=config.log_file or "stderr"
    )
