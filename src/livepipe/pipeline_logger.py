"""Structured JSON logging for the watch loop.

Writes JSON-lines to disk so a long-running watch session can be
debugged after the fact. Each log entry is a single JSON object on
one line.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

_logger = logging.getLogger("livepipe")


def configure_logging(
    log_dir: str | Path, level: int = logging.DEBUG
) -> None:
    """Set up logging to write JSON-lines to a file.

    Args:
        log_dir: Directory to write ``livepipe.log`` into.
        level: Logging level (default: DEBUG).
    """
    log_path = Path(log_dir) / "livepipe.log"
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(str(log_path))
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    _logger.addHandler(handler)
    _logger.setLevel(level)


def _log(event: dict[str, Any]) -> None:
    _logger.info(json.dumps(event, default=str))


def log_change(origin: str) -> None:
    _log({"event": "change", "origin": origin})


def log_reload(origin: str, path: str | Path) -> None:
    _log({"event": "reload", "origin": origin, "path": str(path)})


def log_run_start(pending: list[str]) -> None:
    _log({"event": "run_start", "pending": sorted(pending)})


def log_run_complete(duration_ms: float) -> None:
    _log({"event": "run_complete", "duration_ms": round(duration_ms, 2)})


def log_run_cancelled() -> None:
    _log({"event": "run_cancelled"})


def log_warning(message: str) -> None:
    _log({"event": "warning", "message": message})


def log_error(error: str) -> None:
    _log({"event": "error", "error": error})
