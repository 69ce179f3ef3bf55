"""Filesystem watching for the input and process files.

Each file gets its own watcher. Notifications are tagged with their
origin and handed to the scheduler, which merges them. Watchers look
at the parent directory and filter on the file itself, so editors that
save by replacing the file are still seen.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any

from watchfiles import Change, awatch

from livepipe import diagnostics
from livepipe.models import DATA, PROCESS
from livepipe.scheduler import ReactiveScheduler

WatchFn = Callable[..., AsyncIterator[set[tuple[Change, str]]]]


def _only(target: Path) -> Callable[[Change, str], bool]:
    def _filter(change: Change, path: str) -> bool:
        return Path(path).resolve() == target

    return _filter


class ChangeCoordinator:
    """Runs one watcher per source and feeds the scheduler.

    Args:
        scheduler: Receives ``notify(origin)`` for every change batch.
        watch_fn: Async iterator factory with ``watchfiles.awatch``'s
            signature. Injected so tests can fake filesystem events.
        stop_event: Optional event that ends all watchers when set.
    """

    def __init__(
        self,
        scheduler: ReactiveScheduler,
        *,
        watch_fn: WatchFn = awatch,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        self.scheduler = scheduler
        self._watch_fn = watch_fn
        self._stop_event = stop_event

    async def watch_path(self, path: str | Path, origin: str) -> None:
        """Notify the scheduler about every change to *path*.

        A watcher that fails is reported and stops; it never takes the
        other watcher down with it.
        """
        target = Path(path).resolve()
        kwargs: dict[str, Any] = {
            "watch_filter": _only(target),
            "recursive": False,
        }
        if self._stop_event is not None:
            kwargs["stop_event"] = self._stop_event
        try:
            async for _ in self._watch_fn(target.parent, **kwargs):
                self.scheduler.notify(origin)
        except Exception as e:
            diagnostics.error(f"Stopped watching {path}: {e}")

    async def run(
        self, *, process_path: str | Path, input_path: str | Path | None = None
    ) -> None:
        """Watch the process file and, if given, the input file."""
        watchers = [self.watch_path(process_path, PROCESS)]
        if input_path is not None:
            watchers.append(self.watch_path(input_path, DATA))
        await asyncio.gather(*watchers)
