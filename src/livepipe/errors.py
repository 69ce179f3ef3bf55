"""Custom exception hierarchy for livepipe.

All exceptions inherit from PipelineError so callers can catch broadly
or narrowly as needed.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


class PipelineError(Exception):
    """Base for all livepipe errors."""


class DocumentLoadError(PipelineError):
    """The input document could not be read or is not valid JSON."""


class PipelineLoadError(PipelineError):
    """The process file could not be created, read or executed."""


class ProcessFileUnavailableError(PipelineLoadError):
    """The process file does not exist or cannot be opened."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        super().__init__(f"Could not open process file: {path}")


class FilenameExhaustedError(PipelineLoadError):
    """Every candidate name for a new process file is already taken."""

    def __init__(self, base_name: str) -> None:
        self.base_name = base_name
        super().__init__(
            f"Could not find an available filename, using base name: {base_name}"
        )


class ExpressionError(PipelineError):
    """JSONPath expression parsing or evaluation failed."""


class UnknownStepError(PipelineError):
    """A pipeline entry is neither a query string nor a callable."""

    def __init__(self, index: int, step: Any) -> None:
        self.index = index
        self.step = step
        super().__init__(
            f"Unknown step at index {index}: {json.dumps(step, default=repr)}"
        )


class StepExecutionError(PipelineError):
    """A step failed during execution."""

    def __init__(
        self,
        index: int,
        message: str,
        cause: Exception | None = None,
    ) -> None:
        self.index = index
        self.cause = cause
        super().__init__(f"Step {index} failed: {message}")


class OutputError(PipelineError):
    """The processed document could not be serialized or written."""
