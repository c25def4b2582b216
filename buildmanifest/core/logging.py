"""Structured logging — structlog events rendered through stdlib logging.

Everything goes to stderr; stdout carries the CLI's own report.

Environment:
    BUILDMANIFEST_LOG_LEVEL  — DEBUG | INFO | WARNING | ERROR (overrides ``-v``)
    BUILDMANIFEST_LOG_FORMAT — console | json (default: console)
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

import structlog

ENV_LOG_LEVEL = "BUILDMANIFEST_LOG_LEVEL"
ENV_LOG_FORMAT = "BUILDMANIFEST_LOG_FORMAT"

_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def resolve_level(verbose: bool = False) -> str:
    """Level name from the environment, else DEBUG/INFO by *verbose*.

    An unknown name in the environment falls back to the flag-based default.
    """
    default = "DEBUG" if verbose else "INFO"
    level = os.environ.get(ENV_LOG_LEVEL, "").strip().upper()
    return level if level in _LEVELS else default


def _pre_chain() -> list[structlog.types.Processor]:
    # Applied to structlog events and to records from plain stdlib loggers.
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def _renderer(stream: IO[str]) -> structlog.types.Processor:
    if os.environ.get(ENV_LOG_FORMAT, "console").strip().lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def setup_logging(verbose: bool = False, stream: IO[str] | None = None) -> None:
    """Route structlog through a single stdlib handler on the root logger."""
    stream = stream or sys.stderr
    level = resolve_level(verbose)
    pre_chain = _pre_chain()

    structlog.configure(
        processors=pre_chain + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(stream),
            ],
        )
    )

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("buildmanifest").setLevel(level)
