"""Structured logging for branchbook.

Engine modules log snake_case events with key/value context through
structlog. Two sinks are available:

- the terminal, via rich, at a level set by the CLI's ``-v`` count;
- ``debug.jsonl`` next to the story being edited, when ``--log`` is given.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003
from typing import TYPE_CHECKING, Any

import structlog
from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from structlog.typing import Processor

LOG_FILE_NAME = "debug.jsonl"

# -v count -> terminal level; anything above maps to DEBUG.
VERBOSITY_LEVELS = {0: logging.WARNING, 1: logging.INFO}

# Third-party loggers pulled in by PDF export.
QUIET_LOGGERS = ("weasyprint", "fontTools", "PIL", "asyncio")

_configured = False
_file_handler: logging.FileHandler | None = None


def _record_entry(record: logging.LogRecord) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "level": record.levelname,
        "logger": record.name,
    }
    if not isinstance(record.msg, dict):
        entry["message"] = record.getMessage()
        return entry

    context = {k: v for k, v in record.msg.items() if k not in ("level", "timestamp")}
    entry["message"] = context.pop("event", "")
    entry.update(context)
    return entry


class JSONLFileHandler(logging.FileHandler):
    """Appends one JSON object per log record, structlog context inlined."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(_record_entry(record), default=str)
            if self.stream:
                self.stream.write(line + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


def _terminal_handler(verbosity: int) -> RichHandler:
    return RichHandler(
        console=Console(stderr=True),
        level=VERBOSITY_LEVELS.get(verbosity, logging.DEBUG),
        markup=True,
        rich_tracebacks=True,
        show_time=verbosity >= 1,
        show_path=verbosity >= 2,
        tracebacks_show_locals=verbosity >= 2,
    )


def configure_logging(
    verbosity: int = 0,
    log_to_file: bool = False,
    logs_dir: Path | None = None,
) -> None:
    """Set up the terminal sink and, optionally, the JSONL file sink.

    Safe to call again; a previously opened log file is closed first.

    Args:
        verbosity: 0 shows warnings, 1 info, 2 or more debug.
        log_to_file: Also write every event to ``logs_dir/debug.jsonl``.
        logs_dir: Directory for the log file. Required with ``log_to_file``.

    Raises:
        ValueError: If ``log_to_file`` is set without ``logs_dir``.
    """
    global _configured

    if log_to_file and logs_dir is None:
        raise ValueError("logs_dir is required when log_to_file=True")

    close_file_logging()
    handlers: list[logging.Handler] = [_terminal_handler(verbosity)]
    if log_to_file and logs_dir is not None:
        handlers.append(_open_log_file(logs_dir))

    # The root stays open whenever some sink wants more than warnings.
    root_level = logging.DEBUG if (verbosity > 0 or log_to_file) else logging.WARNING
    logging.basicConfig(level=root_level, format="%(message)s", handlers=handlers, force=True)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(root_level),
        cache_logger_on_first_use=True,
    )
    _configured = True


def _open_log_file(logs_dir: Path) -> logging.FileHandler:
    global _file_handler

    logs_dir.mkdir(parents=True, exist_ok=True)
    _file_handler = JSONLFileHandler(str(logs_dir / LOG_FILE_NAME), mode="a")
    _file_handler.setLevel(logging.DEBUG)
    return _file_handler


def get_logger(name: str | None = None) -> structlog.typing.FilteringBoundLogger:
    """Return a bound logger, configuring defaults on first use."""
    if not _configured:
        configure_logging()

    logger: structlog.typing.FilteringBoundLogger = structlog.get_logger(name)
    return logger


def close_file_logging() -> None:
    """Close the JSONL log file, if one is open."""
    global _file_handler
    if _file_handler is not None:
        _file_handler.close()
        _file_handler = None
