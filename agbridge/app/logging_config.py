############################################################
#
# agbridge - Multi-format Chat Request Translator
#
# logging_config.py: Structured logging configuration using structlog
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Structured logging for the translator.

Translator modules log per-item anomalies (dropped tool definitions,
correlation misses, ...) as structlog events through ``get_logger``. The
embedding proxy calls ``setup_logging`` once at startup; until then
structlog's defaults apply. Each translation binds its target model and
flags through ``bind_request_context`` so that every event it emits can
be tied back to the request.
"""

import logging
import sys
from typing import Any, List, Mapping, Optional

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from agbridge.app.settings import Settings, get_settings


class _ServiceStamp:
    """Processor adding the service name and version to every event."""

    def __init__(self, settings: Settings) -> None:
        self.service = settings.app_name
        self.version = settings.app_version

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", self.service)
        event_dict.setdefault("version", self.version)
        return event_dict


def _log_level(settings: Settings) -> int:
    if settings.debug:
        return logging.DEBUG
    return getattr(logging, settings.log_level.upper(), logging.INFO)


def _renderer(settings: Settings) -> Processor:
    if settings.log_format == "console":
        return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    return structlog.processors.JSONRenderer()


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Route structlog events through stdlib logging.

    Args:
        settings: Settings override (defaults to get_settings())
    """
    settings = settings or get_settings()
    level = _log_level(settings)

    shared_processors: List[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _ServiceStamp(settings),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            _renderer(settings),
        ],
    )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_file:
        handlers.append(logging.FileHandler(settings.log_file))
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(level)

    root_logger = logging.getLogger()
    root_logger.handlers = handlers
    root_logger.setLevel(level)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def bind_request_context(**kwargs: Any) -> Mapping[str, Any]:
    """Bind translation context to all events logged in this context.

    Returns:
        Reset tokens to hand to ``clear_request_context``
    """
    return structlog.contextvars.bind_contextvars(**kwargs)


def clear_request_context(tokens: Mapping[str, Any]) -> None:
    """Undo one ``bind_request_context`` call.

    Only the keys bound by that call are restored, so context bound by the
    embedding proxy (a request id, for example) survives a translation.
    """
    structlog.contextvars.reset_contextvars(**tokens)
