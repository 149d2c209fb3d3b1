"""
Logging configuration using structlog for structured, JSON-based logging.

Release runs execute in CI, so logs default to one JSON object per line. Any
event key that names a credential is masked before rendering. Logs go to
stderr; stdout carries only command output (release variables, notes).
"""

import sys
from typing import Any

import structlog

REDACTED = "***"
SECRET_KEY_PARTS = ("password", "token", "private_key", "secret")


def redact_secrets(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Mask values of event keys that look like credentials."""
    for key in event_dict:
        if any(part in key.lower() for part in SECRET_KEY_PARTS) and event_dict[key]:
            event_dict[key] = REDACTED
    return event_dict


def configure_logging(log_level: str = "INFO", json_output: bool = True) -> None:
    """Configure structured logging.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: Render JSON lines; when False use the console renderer
    """
    renderer: Any = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level.upper()),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> Any:
    """Get a logger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("stage_started", stage="checkout_branch")
    """
    return structlog.get_logger(name)
