"""
ga4gh_identity.observability.logging

Structured logging configuration for the gate services.

Responsibilities:
- Configure `structlog` for JSON logs in deployed environments and readable
  console output for local development.
- Provide a small wrapper for obtaining bound loggers.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(*, service_name: str, level: str, json_logs: bool = True) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    renderer: Any = (
        structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _add_service_name(service_name),
            _drop_credentials,
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _add_service_name(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


_CREDENTIAL_KEYS = frozenset({"auth", "authorization", "token", "access_token", "key"})


def _drop_credentials(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    # Bearer values and minted credentials must never reach log sinks.
    for k in _CREDENTIAL_KEYS.intersection(event_dict):
        event_dict[k] = "[redacted]"
    return event_dict


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# Request id, method and path are bound by `observability.middleware`; the
# subject and issuer by `api.deps.require_identity`.
