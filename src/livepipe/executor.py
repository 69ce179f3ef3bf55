"""Run executor: the unit of work the scheduler starts.

Holds the last-good document and pipeline, reloads whichever source
changed, re-applies the pipeline and hands the result to the sink.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from functools import partial
from pathlib import Path
from typing import Any

from livepipe import pipeline_logger
from livepipe.interpreter import apply
from livepipe.loader import load_document, load_process_file
from livepipe.models import DATA, PROCESS, RunResult, RunStatus, WatchConfig
from livepipe.output import emit
from livepipe.scheduler import RunToken

SinkFn = Callable[[Any], Awaitable[None]]


class RunExecutor:
    """Loads both sources once, then re-runs the pipeline on demand.

    Args:
        config: Paths and output settings.
        sink: Coroutine function receiving each processed document.
            Defaults to :func:`livepipe.output.emit` with the configured
            output path and console depth.
    """

    def __init__(self, config: WatchConfig, *, sink: SinkFn | None = None) -> None:
        self.config = config
        self.document: Any = None
        self.pipeline: Any = None
        self.process_path: Path | None = config.process_path
        self._sink = sink or partial(
            emit, output_path=config.output_path, depth=config.dir_depth
        )

    async def load(self) -> None:
        """Initial load of the input document and process file.

        Errors propagate: a broken startup is fatal.
        """
        self.document = await asyncio.to_thread(load_document, self.config.input_path)
        self.process_path, self.pipeline = await asyncio.to_thread(
            load_process_file, self.process_path, self.config.input_path
        )

    async def run(self, token: RunToken, changes: set[str]) -> RunResult:
        """Reload changed sources, apply the pipeline and emit the result.

        Returns a cancelled result as soon as *token* is cancelled at a
        checkpoint. Any other exception becomes a failed result; the
        last-good document, pipeline and output are left untouched.
        """
        start = time.monotonic()
        try:
            if token.cancelled:
                return RunResult.cancelled()
            if DATA in changes:
                document = await asyncio.to_thread(
                    load_document, self.config.input_path
                )
                if token.cancelled:
                    return RunResult.cancelled()
                self.document = document
                changes.discard(DATA)
                pipeline_logger.log_reload(DATA, self.config.input_path)

            if token.cancelled:
                return RunResult.cancelled()
            if PROCESS in changes:
                process_path, pipeline = await asyncio.to_thread(
                    load_process_file, self.process_path, self.config.input_path
                )
                if token.cancelled:
                    return RunResult.cancelled()
                self.process_path, self.pipeline = process_path, pipeline
                changes.discard(PROCESS)
                pipeline_logger.log_reload(PROCESS, process_path)

            if token.cancelled:
                return RunResult.cancelled()
            output = apply(self.document, self.pipeline)

            if token.cancelled:
                return RunResult.cancelled()
            await self._sink(output)
        except Exception as e:
            return RunResult(
                status=RunStatus.FAILED,
                error=e,
                duration_ms=(time.monotonic() - start) * 1000,
            )

        return RunResult(
            status=RunStatus.COMPLETED,
            output=output,
            duration_ms=(time.monotonic() - start) * 1000,
        )
