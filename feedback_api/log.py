"""Structured JSON logging for the feedback API.

Logs request handling, data-store retries and errors in JSON format
so they can be shipped and queried without a parser per message shape.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

ROOT_LOGGER = "feedback_api"


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        # Merge extra structured data
        if hasattr(record, "data"):
            entry["data"] = record.data  # type: ignore[attr-defined]
        if record.exc_info and record.exc_info[1]:
            entry["error"] = str(record.exc_info[1])
            entry["error_type"] = type(record.exc_info[1]).__name__
        return json.dumps(entry, ensure_ascii=False, default=str)


def setup_logging(
    log_dir: Path | None = None,
    level: int | str = logging.INFO,
    json_format: bool = True,
) -> logging.Logger:
    """Configure logging for the feedback API.

    Args:
        log_dir: Directory for a JSON-lines log file. If None, logs to stderr only.
        level: Logging level, as a number or a level name.
        json_format: Emit single-line JSON instead of plain text.

    Returns:
        The root 'feedback_api' logger.
    """
    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    # Avoid duplicate handlers on repeated calls
    if logger.handlers:
        return logger

    fmt: logging.Formatter
    if json_format:
        fmt = JSONFormatter()
    else:
        fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    if log_dir:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_dir / "feedback_api.jsonl", encoding="utf-8")
        fh.setFormatter(fmt)
        fh.setLevel(level)
        logger.addHandler(fh)

    sh = logging.StreamHandler()
    sh.setFormatter(fmt)
    sh.setLevel(level)
    logger.addHandler(sh)

    return logger


__all__ = ["JSONFormatter", "setup_logging", "ROOT_LOGGER"]
