"""Structured logging for keygate.

All modules log through structlog via ``get_logger(__name__)``. Every line
emitted while a request is in flight carries that request's ``request_id``
(set by the request-id middleware in keygate/main.py).

Call sites log the credential ``id``, never a bearer token or stored secret.
``redact_secrets`` backs that up in the pipeline: any event key that names a
credential value is masked before rendering, at every level.
"""

import logging
import sys
from contextvars import ContextVar
from typing import Optional

import structlog
from structlog.types import EventDict, Processor

from keygate.constants import REDACTED_LOG_KEYS

REDACTED = "[REDACTED]"

# Per-task request id; each request runs in its own task so values never leak
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def add_request_id(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add request_id to the event if a request is in flight."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def redact_secrets(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask values whose key names a credential (secret, bearer_key, authorization...).

    Matching is on the lower-cased key, so ``Authorization`` copied from a
    header mapping is caught too. Empty values are left alone.
    """
    for key in event_dict:
        if key.lower() in REDACTED_LOG_KEYS and event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def build_processors(json_output: bool = True) -> list[Processor]:
    """The processor chain, renderer last. Redaction runs before anything formats."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        redact_secrets,
        add_request_id,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    return processors


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structlog for the process.

    Args:
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        json_output: JSON lines when True, console output otherwise.
    """
    structlog.configure(
        processors=build_processors(json_output),
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = "keygate") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def clear_request_id() -> None:
    request_id_var.set(None)


# Defaults until keygate/main.py reconfigures from the environment
configure_logging()
