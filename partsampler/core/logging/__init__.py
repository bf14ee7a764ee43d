"""Logging system for partsampler.

Usage:
    >>> from partsampler.core.logging import get_logger, configure_logging, LogContext
    >>>
    >>> configure_logging(verbose=1)
    >>> logger = get_logger(__name__)
    >>>
    >>> with LogContext("stratified", seed=42):
    ...     logger.info("Doing stratified sampling")

Retries of distributed steps are only observable through these messages.
"""

from .config import (
    ROOT_LOGGER_NAME,
    ConsoleFormatter,
    ContextFilter,
    FileFormatter,
    LoggingConfig,
    configure_logging,
    get_config,
    get_logger,
    is_configured,
    reset_logging,
)
from .context import (
    AttemptContext,
    LogContext,
    OperationState,
    get_current_state,
    inject_context,
)

__all__ = [
    # Main API
    "get_logger",
    "configure_logging",
    "LogContext",
    # Configuration
    "LoggingConfig",
    "get_config",
    "is_configured",
    "reset_logging",
    "ROOT_LOGGER_NAME",
    # Context
    "get_current_state",
    "inject_context",
    "OperationState",
    "AttemptContext",
    # Formatting
    "ContextFilter",
    "ConsoleFormatter",
    "FileFormatter",
]
