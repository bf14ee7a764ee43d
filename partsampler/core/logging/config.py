"""Logging configuration for partsampler.

All modules obtain their logger through :func:`get_logger`, which returns a
child of the ``partsampler`` root logger. Nothing is printed until the
application calls :func:`configure_logging`; library users who configure the
standard :mod:`logging` module themselves get the records as usual.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

from .context import inject_context

ROOT_LOGGER_NAME = "partsampler"

# verbose level -> logging level
_VERBOSE_LEVELS = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}

@dataclass
class LoggingConfig:
    """Active logging configuration.

    Attributes:
        verbose: Verbosity level (0 = warnings, 1 = info, 2 = debug).
        log_file: Optional path of a plain-text log file.
        use_color: Colorize the level name on the console.
    """

    verbose: int = 1
    log_file: Path | None = None
    use_color: bool = False

    @property
    def level(self) -> int:
        return _VERBOSE_LEVELS[min(max(self.verbose, 0), 2)]

_config: LoggingConfig | None = None
_handlers: list[logging.Handler] = []

class ContextFilter(logging.Filter):
    """Filter that adds the current operation context to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        inject_context(record)
        return True

class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter with an operation/attempt prefix."""

    COLORS = {
        logging.DEBUG: "\033[2m",
        logging.INFO: "",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
    }
    RESET = "\033[0m"

    def __init__(self, use_color: bool = False) -> None:
        super().__init__()
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        prefix = ""
        operation = getattr(record, "operation", None)
        if operation:
            prefix = f"[{operation}"
            attempt = getattr(record, "attempt", None)
            if attempt:
                prefix += f" #{attempt}"
            prefix += "] "

        level = record.levelname
        if self.use_color:
            color = self.COLORS.get(record.levelno, "")
            if color:
                level = f"{color}{level}{self.RESET}"

        message = f"{level:<7} {prefix}{record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message

class FileFormatter(logging.Formatter):
    """Machine-parseable formatter for log files."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(operation_id)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "operation_id"):
            record.operation_id = "-"
        return super().format(record)

def get_logger(name: str) -> logging.Logger:
    """Get a logger below the partsampler root logger.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        Logger instance.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)

def configure_logging(
    verbose: int = 1,
    log_file: str | Path | None = None,
    use_color: bool = False,
) -> LoggingConfig:
    """Configure console (and optional file) output for partsampler.

    Calling it again replaces the previous configuration.

    Args:
        verbose: 0 = warnings only, 1 = info, 2 = debug.
        log_file: Optional log file path; parent directories are created.
        use_color: Colorize level names on the console.

    Returns:
        The active LoggingConfig.
    """
    global _config

    reset_logging()
    config = LoggingConfig(
        verbose=verbose,
        log_file=Path(log_file) if log_file is not None else None,
        use_color=use_color,
    )

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(config.level)
    context_filter = ContextFilter()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ConsoleFormatter(use_color=use_color))
    console.addFilter(context_filter)
    _handlers.append(console)

    if config.log_file is not None:
        config.log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
        file_handler.setFormatter(FileFormatter())
        file_handler.addFilter(context_filter)
        _handlers.append(file_handler)

    for handler in _handlers:
        root.addHandler(handler)
    root.propagate = False

    _config = config
    return config

def reset_logging() -> None:
    """Remove handlers installed by :func:`configure_logging`."""
    global _config

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()
    root.setLevel(logging.NOTSET)
    root.propagate = True
    _config = None

def is_configured() -> bool:
    """Check whether :func:`configure_logging` has been called."""
    return _config is not None

def get_config() -> LoggingConfig | None:
    """Get the active logging configuration, if any."""
    return _config
