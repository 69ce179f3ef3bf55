"""Step interpreter: threads a document through an ordered pipeline.

A pipeline is a list whose entries are JSONPath strings or callables.
Query results are always lists; function steps map over lists and
apply directly to anything else.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from livepipe import diagnostics
from livepipe.errors import (
    ExpressionError,
    PipelineError,
    StepExecutionError,
    UnknownStepError,
)
from livepipe.expressions import query
from livepipe.models import FunctionStep, QueryStep, Step


def is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def to_step(raw: Any, index: int) -> Step:
    """Coerce a raw pipeline entry into a tagged step.

    Raises:
        UnknownStepError: If the entry is neither a string nor callable.
    """
    if isinstance(raw, (QueryStep, FunctionStep)):
        return raw
    if isinstance(raw, str):
        return QueryStep(expression=raw)
    if callable(raw):
        return FunctionStep(fn=raw)
    raise UnknownStepError(index, raw)


def execute_step(step: Step, index: int, current: Any) -> Any:
    """Apply one step to the current stage value."""
    match step:
        case QueryStep():
            return query(step.expression, current)
        case FunctionStep():
            if is_sequence(current):
                return [step.fn(item) for item in current]
            return step.fn(current)
        case _:
            raise UnknownStepError(index, step)


def apply(document: Any, pipeline: Any) -> Any:
    """Run *document* through every step of *pipeline* in order.

    A pipeline that isn't a sequence is reported and the document is
    returned untouched. Any failing step aborts the whole run; no
    partial result is returned.

    Args:
        document: Any JSON-compatible value.
        pipeline: Sequence of JSONPath strings and/or callables.

    Returns:
        The value produced by the last step (the document itself for
        an empty pipeline).

    Raises:
        UnknownStepError: If an entry is neither a string nor callable.
        ExpressionError: If a query step can't be parsed or evaluated.
        StepExecutionError: If a function step raises.
    """
    if not is_sequence(pipeline):
        diagnostics.warning(
            "Process needs to be a list, found:\n\n"
            + json.dumps(pipeline, indent=2, default=repr)
        )
        return document

    current = document
    for index, raw in enumerate(pipeline):
        step = to_step(raw, index)
        try:
            current = execute_step(step, index, current)
        except ExpressionError as e:
            raise ExpressionError(f"Step {index}: {e}") from e
        except PipelineError:
            raise
        except Exception as e:
            raise StepExecutionError(index, str(e), cause=e) from e

    return current
