"""
Structured logging for the SQLite driver.

Library modules only call :func:`get_logger` and emit key-value events
(``query_executed``, ``connection_closed``, ...). Output format is the
application's choice: call :func:`configure_logging` or
:func:`configure_from_settings` once at startup. Nothing is configured on
import, so an unconfigured application gets structlog's defaults.

Architecture:
    ::

        configure_logging(level, json_format, service)
            │
            ├── merge_contextvars          caller-bound context
            ├── add_log_level / logger name
            ├── TimeStamper(iso)           optional
            ├── ServiceName(service)       "service.name"
            ├── ecs_field_names            JSON only
            └── JSONRenderer | ConsoleRenderer

Examples:
    >>> from spine_sqlite.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> get_logger(__name__).debug("query_executed", kind="read", params=0)

Tags:
    logging, structlog, json-logging
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from spine_sqlite.errors import ConfigError
from spine_sqlite.settings import DriverSettings, get_settings

DEFAULT_SERVICE = "spine-sqlite"

_ECS_RENAMES = {"timestamp": "@timestamp", "level": "log.level"}


class ServiceName:
    """Processor stamping each event with the emitting service."""

    def __init__(self, service: str):
        self.service = service

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service.name", self.service)
        return event_dict


def ecs_field_names(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Rename structlog's standard keys to their ECS equivalents."""
    for key, ecs_key in _ECS_RENAMES.items():
        if key in event_dict:
            event_dict[ecs_key] = event_dict.pop(key)
    return event_dict


def _numeric_level(level: str) -> int:
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int) or value == logging.NOTSET:
        raise ConfigError(f"Unknown log level: {level}")
    return value


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = DEFAULT_SERVICE,
    add_timestamp: bool = True,
) -> None:
    """Install the structlog processor chain used by this package.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL (any case).
        json_format: JSON when true, console when false; ``None`` picks JSON
            unless stdout is a terminal.
        service: Value of the ``service.name`` field.
        add_timestamp: Stamp events with an ISO timestamp.

    Raises:
        ConfigError: ``level`` is not a known log level.
    """
    numeric_level = _numeric_level(level)
    if json_format is None:
        json_format = not sys.stdout.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    if add_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))
    processors.append(ServiceName(service))

    if json_format:
        processors += [
            structlog.processors.format_exc_info,
            ecs_field_names,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=numeric_level)


def configure_from_settings(settings: DriverSettings | None = None) -> None:
    """Apply ``SPINE_SQLITE_LOG_LEVEL`` and ``SPINE_SQLITE_LOG_FORMAT``."""
    settings = settings or get_settings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


__all__ = [
    "DEFAULT_SERVICE",
    "ServiceName",
    "configure_from_settings",
    "configure_logging",
    "ecs_field_names",
    "get_logger",
]
