"""Pydantic models for pipeline steps, run results and configuration.

All data structures live here. No business logic, just shapes.
Steps use a discriminated union on the ``kind`` field so the
interpreter can match on the tag instead of inspecting raw values.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

# Change origins tracked by the scheduler
DATA = "data"
PROCESS = "process"

Origin = Literal["data", "process"]


# ── Step definitions ──────────────────────────────────────────────


class QueryStep(BaseModel):
    kind: Literal["query"] = "query"
    expression: str


class FunctionStep(BaseModel):
    kind: Literal["function"] = "function"
    fn: Callable[[Any], Any]


# Discriminated union: the interpreter matches on `kind`
Step = Annotated[QueryStep | FunctionStep, Field(discriminator="kind")]


# ── Runtime results ──────────────────────────────────────────────


class RunStatus(str, Enum):
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    FAILED = "failed"


class RunResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    status: RunStatus
    output: Any = None
    error: Exception | None = None
    duration_ms: float = 0.0

    @classmethod
    def cancelled(cls) -> RunResult:
        return cls(status=RunStatus.CANCELLED)

    @property
    def ok(self) -> bool:
        return self.status is RunStatus.COMPLETED


# ── Configuration ────────────────────────────────────────────────


class WatchConfig(BaseModel):
    """Everything the CLI hands to the watch loop."""

    input_path: Path
    process_path: Path | None = None
    output_path: Path | None = None
    watch: bool = True
    open_editor: bool = True
    dir_depth: int = Field(default=5, ge=0)
    debounce_ms: int = Field(default=250, ge=0)
    editor: str = "code"
    log_dir: Path | None = None

    @property
    def should_open_editor(self) -> bool:
        """Open files after the first run unless the user opted out.

        A one-shot run against an existing process file has nothing
        worth editing, so it never opens the editor either.
        """
        if not self.open_editor:
            return False
        return not (not self.watch and self.process_path is not None)
