"""Tests for the debounced, cancellable scheduler.

These use real asyncio timing with short debounce intervals and a
fake run function, so they exercise the queue/timer logic without
touching the filesystem.
"""

from __future__ import annotations

import asyncio
import contextlib
import time

import pytest

from livepipe.models import DATA, PROCESS, RunResult, RunStatus
from livepipe.scheduler import ReactiveScheduler, RunToken, SchedulerState


# ── Helpers ───────────────────────────────────────────────────────


class RecordingRun:
    """Run function that records each call and clears the change set."""

    def __init__(self) -> None:
        self.calls: list[tuple[set[str], float]] = []

    async def __call__(self, token: RunToken, changes: set[str]) -> RunResult:
        self.calls.append((set(changes), time.monotonic()))
        changes.clear()
        return RunResult(status=RunStatus.COMPLETED)


@contextlib.asynccontextmanager
async def serving(scheduler: ReactiveScheduler):
    task = asyncio.create_task(scheduler.serve())
    try:
        yield task
    finally:
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task


# ── RunToken ──────────────────────────────────────────────────────


def test_token_starts_active():
    token = RunToken()
    assert not token.cancelled
    token.cancel()
    assert token.cancelled


# ── Debouncing ────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_rapid_changes_collapse_into_one_run():
    run = RecordingRun()
    scheduler = ReactiveScheduler(run, debounce_ms=250)

    async with serving(scheduler):
        scheduler.notify(DATA)
        await asyncio.sleep(0.05)
        scheduler.notify(PROCESS)
        await asyncio.sleep(0.05)
        scheduler.notify(DATA)
        last = time.monotonic()

        await asyncio.sleep(0.15)
        assert run.calls == []

        await asyncio.sleep(0.3)

    assert len(run.calls) == 1
    changes, started = run.calls[0]
    assert changes == {DATA, PROCESS}
    assert started - last >= 0.24


@pytest.mark.asyncio
async def test_separate_bursts_run_separately():
    run = RecordingRun()
    scheduler = ReactiveScheduler(run, debounce_ms=30)

    async with serving(scheduler):
        scheduler.notify(DATA)
        await asyncio.sleep(0.15)
        scheduler.notify(PROCESS)
        await asyncio.sleep(0.15)

    assert [changes for changes, _ in run.calls] == [{DATA}, {PROCESS}]


@pytest.mark.asyncio
async def test_state_transitions():
    release = asyncio.Event()

    async def run(token, changes):
        await release.wait()
        return RunResult(status=RunStatus.COMPLETED)

    scheduler = ReactiveScheduler(run, debounce_ms=20)
    assert scheduler.state is SchedulerState.IDLE

    async with serving(scheduler):
        scheduler.notify(DATA)
        assert scheduler.state is SchedulerState.DEBOUNCING

        await asyncio.sleep(0.1)
        assert scheduler.state is SchedulerState.RUNNING

        release.set()
        await asyncio.sleep(0.05)
        assert scheduler.state is SchedulerState.IDLE


# ── Cancellation ──────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_superseded_run_produces_no_output(capsys):
    started = asyncio.Event()
    release = asyncio.Event()
    outputs: list[int] = []
    calls = 0

    async def run(token, changes):
        nonlocal calls
        calls += 1
        n = calls
        if n == 1:
            started.set()
            await release.wait()
        if token.cancelled:
            return RunResult.cancelled()
        outputs.append(n)
        return RunResult(status=RunStatus.COMPLETED, output=n)

    scheduler = ReactiveScheduler(run, debounce_ms=20)

    async with serving(scheduler):
        scheduler.notify(DATA)
        await asyncio.wait_for(started.wait(), timeout=1)

        scheduler.notify(DATA)
        release.set()
        await asyncio.sleep(0.15)

    assert calls == 2
    assert outputs == [2]
    assert capsys.readouterr().err == ""


@pytest.mark.asyncio
async def test_notify_cancels_current_token_immediately():
    tokens: list[RunToken] = []
    release = asyncio.Event()

    async def run(token, changes):
        tokens.append(token)
        await release.wait()
        return RunResult.cancelled() if token.cancelled else RunResult(
            status=RunStatus.COMPLETED
        )

    scheduler = ReactiveScheduler(run, debounce_ms=10)

    async with serving(scheduler):
        scheduler.notify(PROCESS)
        await asyncio.sleep(0.08)
        assert len(tokens) == 1 and not tokens[0].cancelled

        scheduler.notify(PROCESS)
        assert tokens[0].cancelled
        release.set()
        await asyncio.sleep(0.08)

    assert len(tokens) == 2
    assert not tokens[1].cancelled


@pytest.mark.asyncio
async def test_stopping_serve_cancels_inflight_run():
    started = asyncio.Event()
    seen: list[RunToken] = []

    async def run(token, changes):
        seen.append(token)
        started.set()
        await asyncio.sleep(10)
        return RunResult(status=RunStatus.COMPLETED)

    scheduler = ReactiveScheduler(run, debounce_ms=10)

    async with serving(scheduler):
        scheduler.notify(DATA)
        await asyncio.wait_for(started.wait(), timeout=1)

    assert seen[0].cancelled
    assert scheduler.current_task is not None
    assert scheduler.current_task.done()


@pytest.mark.asyncio
async def test_stopping_serve_cancels_superseded_runs_too():
    started = asyncio.Event()
    calls = 0

    async def run(token, changes):
        nonlocal calls
        calls += 1
        started.set()
        # Ignores its token, like a run stuck in a slow reload
        await asyncio.sleep(10)
        return RunResult(status=RunStatus.COMPLETED)

    scheduler = ReactiveScheduler(run, debounce_ms=10)

    async with serving(scheduler):
        scheduler.notify(DATA)
        await asyncio.wait_for(started.wait(), timeout=1)
        started.clear()
        scheduler.notify(DATA)
        await asyncio.wait_for(started.wait(), timeout=1)
        tasks = scheduler.live_tasks
        assert len(tasks) == 2

    assert calls == 2
    assert all(task.cancelled() for task in tasks)
    assert scheduler.live_tasks == frozenset()


# ── Failures ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_failed_run_is_reported_and_scheduler_survives(capsys):
    results = [
        RunResult(status=RunStatus.FAILED, error=ValueError("boom")),
        RunResult(status=RunStatus.COMPLETED, output=1),
    ]
    calls = 0

    async def run(token, changes):
        nonlocal calls
        calls += 1
        return results.pop(0)

    scheduler = ReactiveScheduler(run, debounce_ms=20)

    async with serving(scheduler):
        scheduler.notify(DATA)
        await asyncio.sleep(0.1)
        scheduler.notify(DATA)
        await asyncio.sleep(0.1)

    assert calls == 2
    assert capsys.readouterr().err == "[error] boom\n"


@pytest.mark.asyncio
async def test_failure_of_superseded_run_is_silent(capsys):
    started = asyncio.Event()
    release = asyncio.Event()

    async def run(token, changes):
        if not started.is_set():
            started.set()
            await release.wait()
            return RunResult(status=RunStatus.FAILED, error=ValueError("stale"))
        return RunResult(status=RunStatus.COMPLETED)

    scheduler = ReactiveScheduler(run, debounce_ms=20)

    async with serving(scheduler):
        scheduler.notify(DATA)
        await asyncio.wait_for(started.wait(), timeout=1)
        scheduler.notify(DATA)
        release.set()
        await asyncio.sleep(0.1)

    assert "stale" not in capsys.readouterr().err
