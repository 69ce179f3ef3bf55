"""livepipe: live-reloading JSON transformation pipeline."""

from livepipe.errors import (
    DocumentLoadError,
    ExpressionError,
    FilenameExhaustedError,
    OutputError,
    PipelineError,
    PipelineLoadError,
    ProcessFileUnavailableError,
    StepExecutionError,
    UnknownStepError,
)
from livepipe.executor import RunExecutor
from livepipe.interpreter import apply
from livepipe.loader import load_document, load_process_file
from livepipe.models import (
    FunctionStep,
    QueryStep,
    RunResult,
    RunStatus,
    Step,
    WatchConfig,
)
from livepipe.pipeline_logger import configure_logging
from livepipe.scheduler import ReactiveScheduler, RunToken
from livepipe.watcher import ChangeCoordinator

__all__ = [
    "apply",
    "ChangeCoordinator",
    "configure_logging",
    "DocumentLoadError",
    "ExpressionError",
    "FilenameExhaustedError",
    "FunctionStep",
    "load_document",
    "load_process_file",
    "OutputError",
    "PipelineError",
    "PipelineLoadError",
    "ProcessFileUnavailableError",
    "QueryStep",
    "ReactiveScheduler",
    "RunExecutor",
    "RunResult",
    "RunStatus",
    "RunToken",
    "Step",
    "StepExecutionError",
    "UnknownStepError",
    "WatchConfig",
]
