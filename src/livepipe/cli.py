"""Command-line interface for livepipe.

Enables execution via ``python -m livepipe`` or a plain ``livepipe``
command after install.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from pydantic import ValidationError

from livepipe import diagnostics, pipeline_logger
from livepipe.editor import DEFAULT_EDITOR, open_in_editor
from livepipe.errors import PipelineError
from livepipe.executor import RunExecutor
from livepipe.models import WatchConfig
from livepipe.scheduler import ReactiveScheduler, RunToken
from livepipe.watcher import ChangeCoordinator

# ── Human-readable help strings ──────────────────────────────────────────────

_DESCRIPTION = """\
Live-reloading JSON transformation pipeline.

Reads a JSON document, runs it through the steps listed in a process file,
and prints (or writes) the result. While running, both the input file and the
process file are watched; saving either one re-runs the pipeline.

A process file is a Python module defining PIPELINE, a list whose entries are
JSONPath query strings or one-argument functions. Query results are always
lists; functions are applied to every element of a list, or to the value
itself otherwise. A .yaml/.yml process file may list query strings only.
"""

_EPILOG = """\
Examples:
  # Create input.json.process.py next to the input, open it, and watch
  livepipe input.json

  # Use an existing process file and write the result to a file
  livepipe input.json --process steps.py --output result.json

  # Run once, print, exit
  livepipe input.json --process steps.py --no-watch

Diagnostics go to stderr, tagged [error] or [warning]. A failing run leaves
the previous output in place; fix the process file and save to retry.

Exit codes:
  0   -- run (or watch session) finished
  1   -- input or process file could not be loaded, or a --no-watch run failed
  130 -- interrupted
"""


# ── Argument parser ───────────────────────────────────────────────────────────

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="livepipe",
        description=_DESCRIPTION,
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "input",
        type=Path,
        help="Path to the JSON input file",
    )
    parser.add_argument(
        "--process", "-p",
        type=Path,
        metavar="FILE",
        help=(
            "Process file describing how the data should be processed. "
            "If omitted, a new one is created next to the input file."
        ),
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        metavar="FILE",
        help="Write the resulting JSON to FILE instead of printing it.",
    )
    parser.add_argument(
        "--no-watch",
        action="store_true",
        help="Run once and do not watch the input or process files.",
    )
    parser.add_argument(
        "--no-open", "-n",
        action="store_true",
        help="Do not open the process (and output) file in an editor.",
    )
    parser.add_argument(
        "--dir-depth",
        type=int,
        default=5,
        metavar="N",
        help="How many levels below the top to expand when printing to the console.",
    )
    parser.add_argument(
        "--debounce",
        type=int,
        default=250,
        metavar="MS",
        help="How long to wait after a write before re-running, in milliseconds.",
    )
    parser.add_argument(
        "--editor",
        default=DEFAULT_EDITOR,
        help="Editor command to use when $VISUAL and $EDITOR are not set.",
    )
    parser.add_argument(
        "--log-dir",
        type=Path,
        metavar="DIR",
        help="Write JSONL watch-loop logs to DIR/livepipe.log.",
    )
    return parser


def _config_from_args(args: argparse.Namespace) -> WatchConfig:
    return WatchConfig(
        input_path=args.input,
        process_path=args.process,
        output_path=args.output,
        watch=not args.no_watch,
        open_editor=not args.no_open,
        dir_depth=args.dir_depth,
        debounce_ms=args.debounce,
        editor=args.editor,
        log_dir=args.log_dir,
    )


# ── Command handler ───────────────────────────────────────────────────────────

async def _cmd_run(config: WatchConfig) -> int:
    if config.log_dir:
        pipeline_logger.configure_logging(config.log_dir)

    executor = RunExecutor(config)
    await executor.load()

    result = await executor.run(RunToken(), set())
    if not result.ok:
        diagnostics.error(str(result.error))
        if not config.watch:
            return 1
    else:
        pipeline_logger.log_run_complete(result.duration_ms)
        if config.should_open_editor:
            open_in_editor([executor.process_path, config.output_path], config.editor)

    if not config.watch:
        return 0

    scheduler = ReactiveScheduler(executor.run, debounce_ms=config.debounce_ms)
    coordinator = ChangeCoordinator(scheduler)
    await asyncio.gather(
        scheduler.serve(),
        coordinator.run(
            process_path=executor.process_path,
            input_path=config.input_path,
        ),
    )
    return 0


# ── Entry point ───────────────────────────────────────────────────────────────

def main(argv: list[str] | None = None) -> None:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = _config_from_args(args)
    except ValidationError as e:
        parser.error(str(e))

    try:
        code = asyncio.run(_cmd_run(config))
    except PipelineError as e:
        diagnostics.error(str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        sys.exit(130)
    sys.exit(code)


if __name__ == "__main__":
    main()
