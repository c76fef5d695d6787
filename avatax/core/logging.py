"""Structured logging for the AvaTax client.

This module configures Loguru for applications that use the client and want
readable call logs without wiring their own sinks. The library itself never
configures logging on import; call ``setup_logging`` from the application
entry point.

Features:
- **Structured logging**: JSON output with consistent schema
- **Context display**: Correlation ids, status codes and durations inline
- **Standard library integration**: Captures logs from httpx and other modules
- **Redaction**: Sensitive extra fields are masked in console output

Formatter types:
- **console**: Human-readable with inline context (development)
- **json**: Generic structured format (log shippers)
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Final, Protocol, cast

from loguru import logger

from avatax.core.config import LogConfig
from avatax.core.constants import REDACTED


class _LoggingState:
    """State holder for the configured flag and the console redaction list."""

    def __init__(self) -> None:
        self.configured = False
        self.sensitive_fields: list[str] = LogConfig().sensitive_fields


_state = _LoggingState()


class SettingsProtocol(Protocol):
    """Protocol for settings objects that setup_logging can accept."""

    @property
    def log_config(self) -> LogConfigProtocol:
        """Log configuration."""
        ...


class LogConfigProtocol(Protocol):
    """Protocol for log configuration objects."""

    @property
    def log_level(self) -> str:
        """Logging level."""
        ...

    @property
    def log_formatter_type(self) -> str | None:
        """Log formatter type."""
        ...

    @property
    def sensitive_fields(self) -> list[str]:
        """Field names masked in console output."""
        ...


DEFAULT_LOG_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)
CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100

PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "http_method",
    "request_uri",
    "status_code",
    "duration_ms",
)


def _escape(value: object) -> str:
    """Escape format braces and markup tags in a value embedded in the template."""
    text = str(value).replace("<", r"\<")
    if text.endswith("\\"):
        # A trailing backslash would escape the closing color tag
        text += " "
    return text.replace("{", "{{").replace("}", "}}")


def _format_priority_field(field: str, value: object) -> str | None:
    """Format a priority field for display.

    Args:
        field: The field name.
        value: The field value.

    Returns:
        str | None: Formatted value or None if formatting fails.
    """
    try:
        if (
            field == "correlation_id"
            and value
            and len(str(value)) > CORRELATION_ID_DISPLAY_LENGTH
        ):
            value = str(value)[:CORRELATION_ID_DISPLAY_LENGTH]
        elif field == "duration_ms":
            value = f"{value}ms"
        elif field == "status_code":
            status_str = _escape(value)
            if status_str.startswith("2"):
                return f"<green>{status_str}</green>"
            if status_str.startswith("4"):
                return f"<red>{status_str}</red>"
            if status_str.startswith("5"):
                return f"<red><bold>{status_str}</bold></red>"
        return _escape(value)
    except (AttributeError, TypeError, ValueError) as e:
        logger.trace(f"Failed to format priority field {field}: {e}")
        return None


def _format_extra_field(key: str, value: object) -> str | None:
    """Format an extra field for display.

    Args:
        key: The field name.
        value: The field value.

    Returns:
        str | None: Formatted field or None if formatting fails.
    """
    try:
        str_value = str(value)

        if key in _state.sensitive_fields:
            str_value = REDACTED
        elif len(str_value) > MAX_FIELD_VALUE_LENGTH:
            str_value = str_value[: MAX_FIELD_VALUE_LENGTH - 3] + "..."

        return f"{_escape(key)}={_escape(str_value)}"
    except (AttributeError, TypeError, ValueError) as e:
        logger.trace(f"Failed to format extra field {key}: {e}")
        return None


def _format_context_fields(extra: dict[str, Any]) -> list[str]:
    """Format all context fields from extra data.

    Args:
        extra: Extra fields from the log record.

    Returns:
        list[str]: List of formatted context parts.
    """
    context_parts = []

    for field in PRIORITY_FIELDS:
        if extra.get(field) is not None:
            formatted = _format_priority_field(field, extra[field])
            if formatted:
                context_parts.append(f"<yellow>{formatted}</yellow>")

    for key, value in extra.items():
        if key not in PRIORITY_FIELDS and not key.startswith("_") and value is not None:
            formatted = _format_extra_field(key, value)
            if formatted:
                context_parts.append(f"<dim>{formatted}</dim>")

    return context_parts


def format_console_with_context(record: dict[str, Any]) -> str:
    """Format log record for console with all context fields visible.

    Args:
        record: Loguru record to format.

    Returns:
        str: Formatted log string with context.
    """
    try:
        parts = [
            "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green>",
            "<level>{level: <8}</level>",
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan>",
        ]

        context_parts = _format_context_fields(record.get("extra", {}))
        if context_parts:
            parts.append(" ".join(f"[{part}]" for part in context_parts))

        # The message is substituted by Loguru, not interpolated here
        parts.append("{message}")

        if record.get("exception"):
            parts.append("\n{exception}")

        return " | ".join(parts) + "\n"
    except (AttributeError, TypeError, ValueError, KeyError) as e:
        logger.trace(f"Failed to format log record: {e}")
        return DEFAULT_LOG_FORMAT + "\n"


class InterceptHandler(logging.Handler):
    """Intercept standard logging and redirect to Loguru.

    httpx and httpcore log through the standard library; this handler
    forwards those records so all output shares one format.
    """

    def emit(self, record: logging.LogRecord) -> None:
        """Forward log record to Loguru.

        Args:
            record: Standard library LogRecord to forward.
        """
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def serialize_for_json(record: dict[str, Any]) -> str:
    """Format log record as generic JSON.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    log_entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "module": record["module"],
        "line": record["line"],
    }

    if extra := record.get("extra", {}):
        filtered_extra = {k: v for k, v in extra.items() if not k.startswith("_")}
        if filtered_extra:
            log_entry.update(filtered_extra)

    if exc := record.get("exception"):
        log_entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }

    return json.dumps(log_entry, default=str) + "\n"


# Type for formatter functions
type FormatterFunc = Any  # Callable[[dict[str, Any]], str]

LOG_FORMATTERS: dict[str, FormatterFunc | None] = {
    "console": None,
    "json": serialize_for_json,
}


def setup_logging(settings: SettingsProtocol) -> None:
    """Configure Loguru with the configured formatter.

    Args:
        settings: Client settings containing log configuration.

    Note:
        This function ensures it's only called once using module state.
    """
    if _state.configured:
        return

    logger.remove()
    _state.sensitive_fields = list(settings.log_config.sensitive_fields)

    formatter_type = settings.log_config.log_formatter_type or "console"
    formatter = LOG_FORMATTERS.get(formatter_type)

    if formatter is None:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=settings.log_config.log_level,
            colorize=True,
        )
    else:

        def structured_sink(message: object) -> None:
            """Custom sink that formats and writes structured logs."""
            if hasattr(message, "record"):
                sys.stdout.write(formatter(message.record))
                sys.stdout.flush()

        logger.add(
            structured_sink,
            level=settings.log_config.log_level,
            diagnose=False,
            backtrace=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # httpcore logs every socket event at DEBUG
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        formatter_type=formatter_type,
        log_level=settings.log_config.log_level,
    )

    _state.configured = True


def get_logger(name: str) -> Any:  # noqa: ANN401 - loguru's Logger type is private
    """Get a logger instance bound with the given name.

    Args:
        name: Logger name, typically __name__.

    Returns:
        Loguru logger bound with ``logger_name``.
    """
    return logger.bind(logger_name=name)
