"""
Structured logging: one JSON object per line with event_type and request_id.

LOG_LEVEL filters (default INFO); LOG_FORMAT=json (default) or console for
local runs. Every request's lines carry the request_id bound by the API
middleware.

Imports only structlog and the stdlib so any module can log without
circular imports.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()


def _rename_event(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog's 'event' key becomes event_type in JSON output."""
    event_dict["event_type"] = event_dict.pop("event", None)
    return event_dict


def configure_structlog() -> None:
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
    ]
    if LOG_FORMAT == "json":
        processors += [_rename_event, structlog.processors.JSONRenderer()]
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, LOG_LEVEL, logging.INFO)),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Logger bound to a module name. Log a snake_case event with keyword context:

        logger.info("ledger_recomputed", token=addr, holders=12, events=340)
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_request(request_id: str) -> None:
    """Bind request_id into contextvars so every log line of the request carries it."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)
