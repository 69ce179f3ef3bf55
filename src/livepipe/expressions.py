"""JSONPath expression evaluator for query steps.

Thin wrapper over python-jsonpath, which follows RFC 9535: wildcards
over arrays and objects, recursive descent, filters and array slices.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any

import jsonpath
from jsonpath import CompoundJSONPath, JSONPath, JSONPathError

from livepipe.errors import ExpressionError


@lru_cache(maxsize=256)
def _compile(expression: str) -> JSONPath | CompoundJSONPath:
    try:
        return jsonpath.compile(expression)
    except JSONPathError as e:
        raise ExpressionError(
            f"Expression '{expression}' is not valid JSONPath: {e}"
        ) from e


def query(expression: str, value: Any) -> list[Any]:
    """Evaluate a JSONPath expression against a JSON value.

    The result is always a list of matched values, even when the
    path selects a single node, so later steps can map over it.

    Args:
        expression: JSONPath string (e.g., "$.items[*]", "$..name",
            "$.items[?@.price > 10]", "$.items[0:2]").
        value: Any JSON-compatible value.

    Returns:
        The matched values in document order. Empty list when nothing
        matches.

    Raises:
        ExpressionError: If the expression syntax is invalid or
            evaluation fails.
    """
    compiled = _compile(expression)
    if isinstance(value, str):
        # findall treats str data as JSON text
        value = json.dumps(value)
    try:
        return compiled.findall(value)
    except JSONPathError as e:
        raise ExpressionError(
            f"Expression '{expression}' failed: {e}"
        ) from e
