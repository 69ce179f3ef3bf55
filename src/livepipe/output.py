"""Output sink: a JSON file or a depth-limited console rendering."""

from __future__ import annotations

import asyncio
import json
import pprint
from pathlib import Path
from typing import Any

from livepipe.errors import OutputError


def render(value: Any, depth: int = 5) -> str:
    """Pretty-print *value*, expanding *depth* levels below the top.

    Depth 0 shows only the top-level container with its members elided.
    """
    return pprint.pformat(value, depth=depth + 1, sort_dicts=False)


def serialize(value: Any) -> str:
    try:
        return json.dumps(value, indent=2)
    except (TypeError, ValueError) as e:
        raise OutputError(f"Result is not JSON serializable: {e}") from e


async def emit(
    value: Any,
    output_path: str | Path | None = None,
    depth: int = 5,
) -> None:
    """Write the processed document to *output_path* or stdout.

    The text is fully built before anything is written, so a value that
    can't be serialized leaves the previous output untouched.

    Raises:
        OutputError: If serialization or the write fails.
    """
    if output_path is None:
        print(render(value, depth))
        print()
        return

    text = serialize(value)
    try:
        await asyncio.to_thread(Path(output_path).write_text, text, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"Could not write output file {output_path}: {e}") from e
