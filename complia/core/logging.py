"""Loguru configuration with console and JSON formatters.

Formatter types:
- **console**: Human-readable with inline context (development)
- **json**: One JSON object per line (staging, production)

Scheduling code logs through ``loguru.logger`` with keyword context such as
``entity_id`` or ``compliance_id``; the console formatter shows those fields
first so a generation run can be followed by eye.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import TYPE_CHECKING, Any, Final, cast

from loguru import logger

if TYPE_CHECKING:
    from complia.core.config import Settings


class _LoggingState:
    """Tracks whether logging has been configured."""

    def __init__(self) -> None:
        self.configured = False


_state = _LoggingState()

PRIORITY_FIELDS: Final[tuple[str, ...]] = (
    "correlation_id",
    "tenant_id",
    "entity_id",
    "compliance_id",
    "year",
    "method",
    "path",
    "status_code",
    "duration_ms",
)
CORRELATION_ID_DISPLAY_LENGTH: Final[int] = 8
MAX_FIELD_VALUE_LENGTH: Final[int] = 100
FALLBACK_FORMAT: Final[str] = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}\n"
)


def _escape(value: object) -> str:
    """Escape braces so loguru does not treat values as format fields."""
    return str(value).replace("{", "{{").replace("}", "}}")


def _format_field(key: str, value: object) -> str:
    text = str(value)
    if key == "correlation_id":
        text = text[:CORRELATION_ID_DISPLAY_LENGTH]
    elif key == "duration_ms":
        text = f"{text}ms"
    elif len(text) > MAX_FIELD_VALUE_LENGTH:
        text = text[: MAX_FIELD_VALUE_LENGTH - 3] + "..."
    return f"{_escape(key)}={_escape(text)}"


def format_console_with_context(record: dict[str, Any]) -> str:
    """Format a record for the console with every context field visible.

    Args:
        record: Loguru record to format.

    Returns:
        str: Loguru format string for this record.
    """
    try:
        extra: dict[str, Any] = record.get("extra", {})
        parts = [
            f"<green>{record['time'].strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]}</green>",
            f"<level>{record['level'].name: <8}</level>",
            f"<cyan>{record['name']}:{record['function']}:{record['line']}</cyan>",
        ]

        context = [
            f"<yellow>{_format_field(key, extra[key])}</yellow>"
            for key in PRIORITY_FIELDS
            if extra.get(key) is not None
        ]
        context.extend(
            f"<dim>{_format_field(key, value)}</dim>"
            for key, value in extra.items()
            if key not in PRIORITY_FIELDS
            and not key.startswith("_")
            and value is not None
        )
        if context:
            parts.append(" ".join(f"[{item}]" for item in context))

        parts.append(_escape(record["message"]))
        line = " | ".join(parts)
        if record.get("exception"):
            line += "\n{exception}"
    except (AttributeError, TypeError, ValueError, KeyError):
        return FALLBACK_FORMAT
    else:
        return line + "\n"


def serialize_for_json(record: dict[str, Any]) -> str:
    """Render a record as a single JSON line.

    Args:
        record: Loguru record to format.

    Returns:
        str: JSON-formatted log entry with newline.
    """
    entry: dict[str, Any] = {
        "timestamp": record["time"].isoformat(),
        "level": record["level"].name,
        "message": record["message"],
        "logger": record["name"],
        "function": record["function"],
        "line": record["line"],
    }
    entry.update(
        {k: v for k, v in record.get("extra", {}).items() if not k.startswith("_")}
    )
    if exc := record.get("exception"):
        entry["exception"] = {
            "type": exc.type.__name__ if exc.type else None,
            "value": str(exc.value) if exc.value else None,
        }
    return json.dumps(entry, default=str) + "\n"


class InterceptHandler(logging.Handler):
    """Redirect standard library logging (uvicorn, SQLAlchemy) to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        """Forward a stdlib record to Loguru, keeping the caller's frame."""
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


def setup_logging(settings: Settings) -> None:
    """Configure Loguru once for the process.

    Args:
        settings: Application settings containing log configuration.
    """
    if _state.configured:
        return

    logger.remove()
    formatter_type = settings.log_config.log_formatter_type or "console"
    level = settings.log_config.log_level

    if formatter_type == "json":

        def json_sink(message: object) -> None:
            """Write each record as one JSON line."""
            sys.stdout.write(serialize_for_json(cast("Any", message).record))
            sys.stdout.flush()

        logger.add(json_sink, level=level, enqueue=True, diagnose=False)
    else:
        logger.add(
            sys.stdout,
            format=cast("Any", format_console_with_context),
            level=level,
            enqueue=True,
            colorize=True,
            diagnose=settings.debug,
            backtrace=settings.debug,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        std_logger = logging.getLogger(name)
        std_logger.handlers = [InterceptHandler()]
        std_logger.propagate = False

    logger.info(
        "Logging configured with {} formatter",
        formatter_type,
        log_level=level,
    )
    _state.configured = True
