"""Logging configuration."""

from __future__ import annotations

import json
import linecache
import logging
import sys
import traceback
from datetime import UTC, datetime
from pathlib import Path
from types import TracebackType
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from structlog.types import EventDict

# Type for exception info tuple (from sys.exc_info())
ExcInfo = tuple[type[BaseException] | None, BaseException | None, TracebackType | None]

# Type for traceback frame information
TracebackFrame = dict[str, str | int | None]

# Type for structured exception details
ExceptionDetails = dict[
    str,
    None | str | list[TracebackFrame],
]

APP_LOG_FILE = "corsarr.json.log"
HTTP_LOG_FILE = "corsarr.http.json.log"

# Loggers of the HTTP client stack, routed away from the application log
HTTP_LOGGERS = ("httpx", "httpcore", "httpcore.connection", "httpcore.http11")
SERVER_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error")


def format_exception_for_json(
    exc_info: ExcInfo | None,
) -> ExceptionDetails:
    """Format exception information for JSON logging.

    Extracts exception details into a structured format that's easier to read
    in JSON logs than a raw traceback string.

    Args:
        exc_info: Exception info tuple from sys.exc_info() or None

    Returns:
        Dictionary with exception details:
        - exception_type: Exception class name (str or None)
        - exception_message: Exception message (str or None)
        - exception_module: Module where exception occurred (str or None)
        - traceback_frames: List of traceback frames
        - traceback_text: Full traceback as text (for reference)
    """
    if exc_info is None or exc_info == (None, None, None):
        return {}

    exc_type, exc_value, exc_tb = exc_info

    exception_details: ExceptionDetails = {
        "exception_type": exc_type.__name__ if exc_type else None,
        "exception_message": str(exc_value) if exc_value else None,
        "exception_module": exc_type.__module__ if exc_type else None,
    }

    if exc_tb:
        tb_frames: list[TracebackFrame] = []
        current_tb: TracebackType | None = exc_tb

        while current_tb is not None:
            frame = current_tb.tb_frame
            frame_info: TracebackFrame = {
                "filename": frame.f_code.co_filename,
                "lineno": current_tb.tb_lineno,
                "function": frame.f_code.co_name,
            }

            line = linecache.getline(frame.f_code.co_filename, current_tb.tb_lineno)
            if line:
                frame_info["source_line"] = line.strip()

            tb_frames.append(frame_info)
            current_tb = current_tb.tb_next

        exception_details["traceback_frames"] = tb_frames
        exception_details["traceback_text"] = "".join(
            traceback.format_exception(exc_type, exc_value, exc_tb)
        )

    return exception_details


def exception_processor(
    logger: structlog.BoundLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """Render exceptions as structured fields instead of a traceback string.

    Handles ``exc_info=True`` (from ``logger.exception()``), explicit exc_info
    tuples and exception instances passed as ``exception=``. Indexer errors
    carrying a raw payload also get an ``exception_payload`` excerpt.
    """
    exc_info = event_dict.pop("exc_info", None)  # type: ignore[assignment]

    if exc_info is True:
        exc_info = sys.exc_info()  # type: ignore[assignment]
    elif isinstance(exc_info, BaseException):
        exc_info = (type(exc_info), exc_info, exc_info.__traceback__)

    if exc_info and exc_info != (None, None, None):
        exception_details = format_exception_for_json(exc_info)  # type: ignore[arg-type]
        if exception_details:
            event_dict["exception"] = exception_details

            exc_type = exception_details.get("exception_type")
            exc_msg = exception_details.get("exception_message")
            if exc_type and exc_msg:
                event_dict["exception_summary"] = f"{exc_type}: {exc_msg}"

        payload = getattr(exc_info[1], "payload", None)  # type: ignore[index]
        if isinstance(payload, str) and payload:
            event_dict["exception_payload"] = payload[:500]

    if "exception" in event_dict and isinstance(event_dict["exception"], BaseException):
        exc = event_dict.pop("exception")
        exception_details = format_exception_for_json((type(exc), exc, exc.__traceback__))
        if exception_details:
            event_dict["exception"] = exception_details

    return event_dict


class JSONFormatter(logging.Formatter):
    """JSON formatter for standard library logging (used for HTTP client logs)."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON string."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = format_exception_for_json(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


def _close_handlers(logger: logging.Logger) -> None:
    """Close all handlers for a logger before clearing them.

    This prevents ResourceWarnings about unclosed file handles.
    """
    for handler in logger.handlers[:]:
        try:
            handler.close()
        except Exception:
            pass  # Ignore errors when closing handlers


def _route_loggers(names: tuple[str, ...], handler: logging.Handler, level: int) -> None:
    """Send the named stdlib loggers to a single handler only."""
    for name in names:
        route_logger = logging.getLogger(name)
        route_logger.setLevel(level)
        route_logger.propagate = False
        _close_handlers(route_logger)
        route_logger.handlers.clear()
        route_logger.addHandler(handler)


def setup_logging(debug: bool = False, logs_dir: Path | None = None) -> None:
    """Setup structured logging with structlog.

    Configures:
    - Application logs: stdout (pretty in debug, JSON in production), or a JSON file
    - HTTP client logs (httpx/httpcore): separate JSON file, WARNING level

    Args:
        debug: Enable debug logging
        logs_dir: Optional directory for log files. If provided, logs will be written to files in JSON format.
    """
    log_level = logging.DEBUG if debug else logging.INFO
    http_log_level = logging.WARNING

    app_handlers: list[logging.Handler] = []

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setLevel(log_level)

    app_file_handler = None
    http_file_handler = None
    if logs_dir:
        try:
            logs_dir.mkdir(parents=True, exist_ok=True)

            # When file logging is enabled, structured logs go ONLY to file, not stdout
            app_file_handler = logging.FileHandler(logs_dir / APP_LOG_FILE, encoding="utf-8")
            app_file_handler.setLevel(log_level)
            app_handlers.append(app_file_handler)

            http_file_handler = logging.FileHandler(logs_dir / HTTP_LOG_FILE, encoding="utf-8")
            http_file_handler.setLevel(logging.DEBUG)
            http_file_handler.setFormatter(JSONFormatter())
        except OSError as e:
            # If file logging fails, log to stderr but don't crash
            sys.stderr.write(f"Warning: Failed to setup file logging: {e}\n")

    if not app_file_handler:
        app_handlers.append(stdout_handler)

    logging.basicConfig(
        format="%(message)s",
        level=log_level,
        handlers=app_handlers,
        force=True,  # Override any existing configuration
    )

    # Server status and access logs are not structured; keep them on stdout
    _route_loggers(SERVER_LOGGERS, stdout_handler, log_level)

    if http_file_handler:
        _route_loggers(HTTP_LOGGERS, http_file_handler, http_log_level)

    processors = [
        structlog.contextvars.merge_contextvars,  # Merge trace_id and query context
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        exception_processor,
        structlog.processors.format_exc_info,
    ]

    # File logs are always JSON; console is pretty in debug mode
    if app_file_handler or not debug:
        final_processors = processors + [structlog.processors.JSONRenderer()]
    else:
        final_processors = processors + [structlog.dev.ConsoleRenderer(colors=True)]

    structlog.configure(
        processors=final_processors,  # type: ignore[arg-type]
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    logger = structlog.get_logger("corsarr.logging")
    logger.info(
        "Logging configured",
        level=logging.getLevelName(log_level),
        debug=debug,
        app_file_logging=app_file_handler is not None,
        app_log_file=str(logs_dir / APP_LOG_FILE) if app_file_handler and logs_dir else None,
        http_file_logging=http_file_handler is not None,
        http_log_file=str(logs_dir / HTTP_LOG_FILE) if http_file_handler and logs_dir else None,
        http_log_level=logging.getLevelName(http_log_level),
        http_loggers_configured=list(HTTP_LOGGERS) if http_file_handler else [],
    )
