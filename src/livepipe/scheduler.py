"""Debounced, cancellable re-run scheduling.

Change notifications land on an asyncio queue. The consumer loop waits
until the queue has been quiet for the debounce interval, then starts
one run under a fresh RunToken. Every new notification cancels the
current token; runs check it at their checkpoints and bail out
without output.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from enum import Enum

from livepipe import diagnostics, pipeline_logger
from livepipe.models import RunResult, RunStatus

RunFn = Callable[["RunToken", set[str]], Awaitable[RunResult]]


class SchedulerState(str, Enum):
    IDLE = "idle"
    DEBOUNCING = "debouncing"
    RUNNING = "running"


class RunToken:
    """Cooperative cancellation flag for a single run."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class ReactiveScheduler:
    """Owns the change set, the debounce timer and the current run.

    Args:
        run: Coroutine function called as ``run(token, changes)``. It
            must check ``token.cancelled`` at each checkpoint and clear
            an origin from *changes* only once that source is reloaded.
        debounce_ms: Quiet period required before a run starts.
    """

    def __init__(self, run: RunFn, *, debounce_ms: int = 250) -> None:
        self.changes: set[str] = set()
        self.state = SchedulerState.IDLE
        self._run = run
        self._debounce = debounce_ms / 1000
        self._events: asyncio.Queue[str] = asyncio.Queue()
        self._token: RunToken | None = None
        self._task: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def current_task(self) -> asyncio.Task[None] | None:
        return self._task

    @property
    def live_tasks(self) -> frozenset[asyncio.Task[None]]:
        """Runs that have not finished yet, superseded ones included."""
        return frozenset(self._tasks)

    def notify(self, origin: str) -> None:
        """Record a change and supersede whatever run is pending."""
        pipeline_logger.log_change(origin)
        self.changes.add(origin)
        if self._token is not None:
            self._token.cancel()
        self.state = SchedulerState.DEBOUNCING
        self._events.put_nowait(origin)

    async def serve(self) -> None:
        """Consume change events forever, starting one run per quiet period."""
        try:
            while True:
                await self._events.get()
                await self._wait_for_quiet()
                self._start_run()
        finally:
            if self._token is not None:
                self._token.cancel()
            tasks = list(self._tasks)
            for task in tasks:
                task.cancel()
            if tasks:
                await asyncio.gather(*tasks, return_exceptions=True)

    async def _wait_for_quiet(self) -> None:
        # Each event received here resets the timer
        while True:
            try:
                await asyncio.wait_for(self._events.get(), self._debounce)
            except asyncio.TimeoutError:
                return

    def _start_run(self) -> None:
        if self._token is not None:
            self._token.cancel()
        token = RunToken()
        self._token = token
        self.state = SchedulerState.RUNNING
        pipeline_logger.log_run_start(list(self.changes))
        self._task = asyncio.create_task(self._execute(token))
        self._tasks.add(self._task)
        self._task.add_done_callback(self._tasks.discard)

    async def _execute(self, token: RunToken) -> None:
        result = await self._run(token, self.changes)

        # A superseded run stays quiet even if it failed on the way out
        if result.status is RunStatus.CANCELLED or token.cancelled:
            pipeline_logger.log_run_cancelled()
        elif result.status is RunStatus.FAILED:
            diagnostics.error(str(result.error))
        else:
            pipeline_logger.log_run_complete(result.duration_ms)

        if self._token is token:
            self.state = SchedulerState.IDLE
