"""
Command template rendering.

Templates use the {{.Field}} placeholder syntax of the configured
defaults; whitespace inside the braces is ignored.
"""

import re
from typing import Iterable, Mapping

from ...errors import TemplateError

_ACTION = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_FIELD = re.compile(r"^\.([A-Za-z_][A-Za-z0-9_]*)$")


def render(template: str, fields: Mapping[str, object]) -> str:
    """
    Render {{.Name}} placeholders from fields.

    Args:
        template: Template text
        fields: Values by field name

    Returns:
        Rendered text

    Raises:
        TemplateError: On unknown fields, unsupported actions or
            unbalanced delimiters
    """

    def substitute(match: "re.Match[str]") -> str:
        action = match.group(1).strip()
        field = _FIELD.match(action)
        if not field:
            raise TemplateError(f"unsupported template action '{{{{{match.group(1)}}}}}'")
        name = field.group(1)
        if name not in fields:
            raise TemplateError(
                f"can't evaluate field {name}; available fields: {', '.join(sorted(fields))}"
            )
        return str(fields[name])

    rendered = _ACTION.sub(substitute, template)

    # Leftover opening delimiters mean an action was never closed
    leftover = _ACTION.sub("", template)
    if "{{" in leftover:
        raise TemplateError(f"unclosed action in template: {template!r}")

    return rendered


def check(template: str, fields: Iterable[str]) -> None:
    """Raise TemplateError if the template would not render with these field names."""
    render(template, {name: "" for name in fields})
