"""Input document and process file loading.

Process files are trusted local scripts. Python process files are
run from their current source on every load, so edits are always
picked up and nothing lingers in sys.modules. YAML process files hold
a plain list of JSONPath queries.
"""

from __future__ import annotations

import json
import runpy
from pathlib import Path
from typing import Any

import yaml

from livepipe.errors import (
    DocumentLoadError,
    FilenameExhaustedError,
    PipelineLoadError,
    ProcessFileUnavailableError,
)
from livepipe.templates import render_process_file

MAX_FILENAME_TRIES = 100
PROCESS_SUFFIX = ".process"
PROCESS_EXTENSION = ".py"
FALLBACK_BASE_NAME = "stdin"
YAML_EXTENSIONS = {".yaml", ".yml"}


def load_document(path: str | Path) -> Any:
    """Read and parse the JSON input document.

    Raises:
        DocumentLoadError: If the file can't be read or isn't valid JSON.
    """
    path = Path(path)
    try:
        blob = path.read_bytes()
    except OSError as e:
        raise DocumentLoadError(f"Could not read input file {path}: {e}") from e

    try:
        return json.loads(blob)
    except ValueError as e:
        raise DocumentLoadError(f"Invalid JSON in {path}: {e}") from e


def find_free_filename(
    base_name: str,
    suffix: str = PROCESS_SUFFIX,
    extension: str = PROCESS_EXTENSION,
    max_tries: int = MAX_FILENAME_TRIES,
) -> Path:
    """Return the first ``<base><suffix>[-N]<extension>`` that doesn't exist.

    Raises:
        FilenameExhaustedError: If all *max_tries* candidates are taken.
    """
    for i in range(max_tries):
        counter = f"-{i}" if i > 0 else ""
        candidate = Path(f"{base_name}{suffix}{counter}{extension}")
        if not candidate.exists() and not candidate.is_symlink():
            return candidate
    raise FilenameExhaustedError(base_name)


def create_process_file(input_path_hint: str | Path | None) -> Path:
    """Write a fresh identity process file next to the input file."""
    base_name = str(input_path_hint) if input_path_hint else FALLBACK_BASE_NAME
    path = find_free_filename(base_name)
    try:
        # "x" so a file that appeared since the name check is never clobbered
        with path.open("x", encoding="utf-8") as f:
            f.write(render_process_file(Path(base_name).name))
    except OSError as e:
        raise PipelineLoadError(f"Could not create process file {path}: {e}") from e
    return path


def _run_python(path: Path) -> Any:
    """Run a process file from its current source in a throwaway namespace."""
    try:
        namespace = runpy.run_path(str(path), run_name="__livepipe_process__")
    except Exception as e:
        raise PipelineLoadError(f"Could not load process file {path}: {e}") from e
    return namespace.get("PIPELINE")


def _parse_yaml(path: Path, source: str) -> Any:
    try:
        return yaml.safe_load(source)
    except yaml.YAMLError as e:
        raise PipelineLoadError(f"Invalid YAML in {path}: {e}") from e


def load_process_file(
    process_path: str | Path | None,
    input_path_hint: str | Path | None = None,
) -> tuple[Path, Any]:
    """Resolve, create if needed, and freshly load a process file.

    Args:
        process_path: Path to an existing process file, or None to
            create one next to *input_path_hint*.
        input_path_hint: Input file path used to name a new process
            file. Falls back to ``stdin`` when missing.

    Returns:
        ``(resolved_path, pipeline)``. The pipeline is returned as-is;
        the interpreter checks its shape.

    Raises:
        ProcessFileUnavailableError: If the file can't be opened.
        FilenameExhaustedError: If no free name is left for a new file.
        PipelineLoadError: If the file's contents fail to load.
    """
    if process_path is None:
        process_path = create_process_file(input_path_hint)

    resolved = Path(process_path).resolve()
    try:
        source = resolved.read_text(encoding="utf-8")
    except OSError as e:
        raise ProcessFileUnavailableError(process_path) from e
    except UnicodeDecodeError as e:
        raise PipelineLoadError(f"Process file {resolved} is not UTF-8: {e}") from e

    if resolved.suffix.lower() in YAML_EXTENSIONS:
        return resolved, _parse_yaml(resolved, source)
    return resolved, _run_python(resolved)
