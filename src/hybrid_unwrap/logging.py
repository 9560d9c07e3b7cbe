"""Structured logging for the unwrap client.

Records are JSON lines carrying ``ts``, ``level``, ``component`` and ``msg``.
Credentials and key material never reach the renderer: fields with those names
are masked by :func:`_redact_secrets` whatever the caller passes in.

Importing the package installs :func:`configure_library_defaults`, which routes
structlog through the stdlib ``logging`` tree without attaching handlers, so an
embedding application decides where records go. The CLI calls
:func:`configure_logging` to send them to stderr, keeping stdout for plaintext.
"""
from __future__ import annotations

import logging
import sys
from typing import IO, Dict, FrozenSet

import structlog

_DEFAULT_LEVEL = "info"
_REDACTED = "***"

SECRET_FIELDS: FrozenSet[str] = frozenset(
    {
        "authorization",
        "bearer_token",
        "token",
        "key",
        "session_key",
        "wrapped_key",
        "private_key",
        "plaintext",
    }
)


def _redact_secrets(
    _logger: object, _name: str, event_dict: dict[str, object]
) -> dict[str, object]:
    for field in list(event_dict):
        if field.lower() in SECRET_FIELDS:
            event_dict[field] = _REDACTED
    return event_dict


def _component_processor(
    logger: object, _name: str, event_dict: dict[str, object]
) -> dict[str, object]:
    if event_dict.get("component") is None:
        event_dict["component"] = getattr(logger, "name", None) or "hybrid_unwrap"
    return event_dict


def _rename_event_to_msg(
    _logger: object, _name: str, event_dict: dict[str, object]
) -> dict[str, object]:
    if "msg" not in event_dict:
        event_dict["msg"] = event_dict.pop("event", "")
    return event_dict


def _processors() -> list:
    return [
        structlog.stdlib.filter_by_level,
        structlog.processors.TimeStamper(fmt="iso", key="ts"),
        structlog.stdlib.add_log_level,
        _redact_secrets,
        _component_processor,
        _rename_event_to_msg,
        structlog.processors.format_exc_info,
        structlog.processors.JSONRenderer(),
    ]


def _apply(wrapper_class: type) -> None:
    # Uncached so a later configure_logging() reaches module-level loggers.
    structlog.configure(
        processors=_processors(),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=wrapper_class,
        cache_logger_on_first_use=False,
    )


def configure_library_defaults() -> None:
    """Route structlog through stdlib logging unless the host already configured it."""
    if not structlog.is_configured():
        _apply(structlog.stdlib.BoundLogger)


def configure_logging(level: str | None = None, stream: IO[str] | None = None) -> None:
    """Send JSON log lines at ``level`` and above to ``stream`` (stderr by default)."""
    numeric_level = _level_from_str((level or _DEFAULT_LEVEL).lower())
    logging.basicConfig(
        level=numeric_level,
        handlers=[logging.StreamHandler(stream or sys.stderr)],
        format="%(message)s",
        force=True,
    )
    _apply(structlog.make_filtering_bound_logger(numeric_level))


def _level_from_str(level: str) -> int:
    mapping: Dict[str, int] = {
        "critical": logging.CRITICAL,
        "error": logging.ERROR,
        "warning": logging.WARNING,
        "info": logging.INFO,
        "debug": logging.DEBUG,
    }
    return mapping.get(level, logging.INFO)


__all__ = ["SECRET_FIELDS", "configure_library_defaults", "configure_logging"]
