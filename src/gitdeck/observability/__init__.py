"""Observability: structured JSON-lines logging for gitdeck sessions."""

from gitdeck.observability.logging import (
    LoggingConfig,
    StructuredLoggingHandle,
    correlation_scope,
    default_log_redactor,
    get_active_logging_handle,
    new_session_id,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "StructuredLoggingHandle",
    "correlation_scope",
    "default_log_redactor",
    "get_active_logging_handle",
    "new_session_id",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
