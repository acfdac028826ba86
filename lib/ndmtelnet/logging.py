"""Structured logging for the NDM telnet client."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

LOGGER_NAME = "lib.ndmtelnet"

# Default logger
_logger: logging.Logger | None = None

# Fields passed through ``extra`` that formatters know about
_EXTRA_FIELDS = ("address", "command", "duration")


def setup_logging(
    level: int = logging.WARNING,
    json_output: bool = False,
    log_file: str | None = None,
) -> None:
    """Set up logging configuration.

    Log records go to stderr; stdout carries command output only.

    Parameters
    ----------
    level : int, optional
        Logging level, by default logging.WARNING
    json_output : bool, optional
        Enable JSON output format, by default False
    log_file : str | None, optional
        Additional log file path, by default None
    """
    global _logger

    _logger = logging.getLogger(LOGGER_NAME)
    _logger.setLevel(level)
    _logger.handlers.clear()
    _logger.propagate = False

    formatter: logging.Formatter = JsonFormatter() if json_output else TextFormatter()

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    _logger.addHandler(handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        _logger.addHandler(file_handler)


def get_logger() -> logging.Logger:
    """Get the client logger.

    Returns
    -------
    logging.Logger
        Logger instance
    """
    global _logger

    if _logger is None:
        # Not configured by the CLI: stay silent unless the host application
        # configures logging itself
        _logger = logging.getLogger(LOGGER_NAME)
        _logger.addHandler(logging.NullHandler())

    return _logger


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Parameters
        ----------
        record : logging.LogRecord
            Log record

        Returns
        -------
        str
            JSON-formatted log entry
        """
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                log_data[name] = getattr(record, name)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class TextFormatter(logging.Formatter):
    """Plain text formatter with an address prefix."""

    def __init__(self) -> None:
        super().__init__(
            fmt="[%(asctime)s] [%(levelname)s] %(prefix)s%(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        address = getattr(record, "address", None)
        record.prefix = f"[{address}] " if address else ""
        return super().format(record)


def _log(level: int, message: str, address: str | None, **kwargs: Any) -> None:
    logger = get_logger()
    extra = kwargs.copy()
    if address:
        extra["address"] = address
    logger.log(level, message, extra=extra)


def log_debug(message: str, address: str | None = None, **kwargs: Any) -> None:
    """Log debug message.

    Parameters
    ----------
    message : str
        Log message
    address : str | None, optional
        Device address, by default None
    **kwargs : Any
        Additional log fields
    """
    _log(logging.DEBUG, message, address, **kwargs)


def log_info(message: str, address: str | None = None, **kwargs: Any) -> None:
    """Log info message."""
    _log(logging.INFO, message, address, **kwargs)


def log_warn(message: str, address: str | None = None, **kwargs: Any) -> None:
    """Log warning message."""
    _log(logging.WARNING, message, address, **kwargs)


def log_error(message: str, address: str | None = None, **kwargs: Any) -> None:
    """Log error message."""
    _log(logging.ERROR, message, address, **kwargs)
