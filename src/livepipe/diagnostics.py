"""Human-readable diagnostics on stderr.

Every message is tagged with its severity so it can't be mistaken for
pipeline output, and mirrored into the JSON-lines log.
"""

from __future__ import annotations

import sys

from livepipe import pipeline_logger


def warning(message: str) -> None:
    pipeline_logger.log_warning(message)
    print(f"[warning] {message}", file=sys.stderr)


def error(message: str) -> None:
    pipeline_logger.log_error(message)
    print(f"[error] {message}", file=sys.stderr)
