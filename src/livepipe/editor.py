"""Open the process (and output) file in the user's editor."""

from __future__ import annotations

import os
import shlex
import subprocess
from collections.abc import Iterable
from pathlib import Path

from livepipe import diagnostics

DEFAULT_EDITOR = "code"


def resolve_editor(configured: str | None = None) -> str:
    """Pick ``$VISUAL``, then ``$EDITOR``, then *configured*, then ``code``."""
    return (
        os.environ.get("VISUAL")
        or os.environ.get("EDITOR")
        or configured
        or DEFAULT_EDITOR
    )


def open_in_editor(
    files: Iterable[str | Path | None], editor: str | None = None
) -> subprocess.Popen[bytes] | None:
    """Launch the editor on *files* without waiting for it to exit.

    Missing entries are skipped. A launch failure is reported as a
    warning; it never stops the pipeline.
    """
    paths = [str(f) for f in files if f]
    if not paths:
        return None

    command = [*shlex.split(resolve_editor(editor)), *paths]
    try:
        return subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
    except OSError as e:
        diagnostics.warning(f"Could not open editor '{command[0]}': {e}")
        return None
