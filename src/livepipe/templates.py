"""Jinja2 template for newly created process files.

StrictUndefined ensures missing variables blow up immediately instead
of silently rendering empty strings.
"""

from __future__ import annotations

import jinja2

_ENV = jinja2.Environment(
    undefined=jinja2.StrictUndefined,
    keep_trailing_newline=True,
)

PROCESS_FILE_TEMPLATE = '''\
"""Processing steps for {{ input_name }}.

PIPELINE runs top to bottom. Each entry is either:

  - a JSONPath string, e.g. "$.items[*]", "$..name" or "$.items[0:2]";
    the result is always a list of matches.
  - a function of one argument; when the current value is a list the
    function is applied to every element.

Save this file to re-run.
"""

PIPELINE = [
    "$",
]
'''


def render_process_file(input_name: str) -> str:
    """Render the seed process file for *input_name*.

    Raises:
        jinja2.UndefinedError: If the template references a variable
            that wasn't supplied.
    """
    template = _ENV.from_string(PROCESS_FILE_TEMPLATE)
    return template.render(input_name=input_name)
