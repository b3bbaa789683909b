"""
Logging setup for GemWatch.

Console output goes through Rich; the optional log file gets one JSON
object per line. Run context (run id, keyword, page, url) travels on log
records as `extra` fields and is copied into the JSON output.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import orjson
from rich.console import Console

LOGGER_NAME = "gemwatch"

CONTEXT_FIELDS = ("run_id", "keyword", "page", "url")

PLAIN_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def json_dumps(obj: Any) -> str:
    return orjson.dumps(obj, default=str).decode("utf-8")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with any run context attached."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key)) for key in CONTEXT_FIELDS if hasattr(record, key)
        )
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json_dumps(entry)


class RichConsoleHandler(logging.Handler):
    """Colour-by-level console output, prefixed with the page number when known."""

    LEVEL_STYLES = {
        logging.DEBUG: "dim",
        logging.WARNING: "yellow",
        logging.ERROR: "red",
        logging.CRITICAL: "bold red",
    }

    def __init__(self, console: Console | None = None, level: int = logging.NOTSET):
        super().__init__(level)
        self.console = console or Console(stderr=True)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            text = self.format(record)
            style = self.LEVEL_STYLES.get(record.levelno)
            if style:
                text = f"[{style}]{text}[/{style}]"

            page = getattr(record, "page", None)
            if page:
                text = f"[cyan]\\[page {page}][/cyan] {text}"

            self.console.print(text, markup=True, highlight=False)
            if record.exc_info:
                self.console.print_exception()
        except Exception:
            self.handleError(record)


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    json_format: bool = True,
    rich_console: bool = True,
) -> logging.Logger:
    """Configure the 'gemwatch' logger tree.

    Replaces any handlers from an earlier call, so it is safe to run once
    per CLI invocation.

    Args:
        level: Console log level name
        log_file: File to receive every record at DEBUG and above
        json_format: Write the file as JSON lines instead of plain text
        rich_console: Use Rich for the console instead of a plain stream

    Returns:
        The configured 'gemwatch' logger
    """
    numeric = logging.getLevelName(level.upper())
    logger = logging.getLogger(LOGGER_NAME)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if rich_console:
        console: logging.Handler = RichConsoleHandler()
        console.setFormatter(logging.Formatter("%(message)s"))
    else:
        console = logging.StreamHandler()
        console.setFormatter(logging.Formatter(PLAIN_FORMAT))
    console.setLevel(numeric)
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT, "%Y-%m-%d %H:%M:%S")
        )
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(numeric)

    return logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Logger under the 'gemwatch' namespace."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME)


class ContextualLogger(logging.LoggerAdapter):
    """Adds run_id/keyword/page to every record it logs."""

    def __init__(
        self,
        logger: logging.Logger,
        run_id: str | None = None,
        keyword: str | None = None,
        page: int | None = None,
    ):
        super().__init__(logger, {})
        self.run_id = run_id
        self.keyword = keyword
        self.page = page

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        context = {"run_id": self.run_id, "keyword": self.keyword, "page": self.page}
        extra = {key: value for key, value in context.items() if value}
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs

    def with_context(
        self,
        keyword: str | None = None,
        page: int | None = None,
    ) -> "ContextualLogger":
        """Copy of this adapter with keyword and/or page replaced."""
        return ContextualLogger(
            self.logger,
            run_id=self.run_id,
            keyword=keyword or self.keyword,
            page=page or self.page,
        )


def get_contextual_logger(
    name: str | None = None,
    run_id: str | None = None,
    keyword: str | None = None,
) -> ContextualLogger:
    return ContextualLogger(get_logger(name), run_id=run_id, keyword=keyword)
