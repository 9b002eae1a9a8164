"""Structured logging setup with stdlib integration."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TextIO

import structlog

# Per-request lines from the HTTP clients drown out the copy pipeline at INFO.
NOISY_LOGGERS = ("httpx", "httpcore", "sse_starlette")

SHARED_PROCESSORS = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _formatter(use_json: bool) -> structlog.stdlib.ProcessorFormatter:
    """One formatter for structlog and stdlib records alike."""
    renderer = (
        structlog.processors.JSONRenderer(ensure_ascii=False)
        if use_json
        else structlog.dev.ConsoleRenderer()
    )
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=SHARED_PROCESSORS,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )


def _rotating_file_handler(
    file_path: str,
    max_mb: int,
    backups: int,
) -> logging.Handler | None:
    """Size-rotated log file; None (with a note on stderr) when it cannot be opened."""
    path = Path(file_path).resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=max_mb * 1024 * 1024,
            backupCount=backups,
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"Log file disabled: could not open {path}: {e}\n")
        return None


def setup_logging(
    level: str = "INFO",
    file_path: str = "",
    rotation_max_mb: int = 5,
    rotation_backups: int = 3,
    stream: TextIO | None = None,
    json_output: bool | None = None,
) -> None:
    """Configure structlog on top of the standard library logging tree.

    Output is JSON lines, or the console renderer at DEBUG; json_output
    overrides that choice. stream defaults to stdout. The terminal client
    passes stderr so stdout carries only generated copy.

    If file_path is set, records are also written there with size-based
    rotation (rotation_max_mb, rotation_backups).
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    if json_output is None:
        json_output = log_level > logging.DEBUG

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *SHARED_PROCESSORS,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    formatter = _formatter(json_output)

    handlers: list[logging.Handler] = [logging.StreamHandler(stream or sys.stdout)]
    if file_path and file_path.strip():
        file_handler = _rotating_file_handler(file_path.strip(), rotation_max_mb, rotation_backups)
        if file_handler is not None:
            handlers.append(file_handler)

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(log_level)
        root.addHandler(handler)

    quiet_level = logging.DEBUG if log_level <= logging.DEBUG else logging.WARNING
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)
