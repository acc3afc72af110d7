"""
Template rendering for automation messages.

Placeholders use the ``{{key}}`` syntax. Substitution is a single regex pass,
so values that themselves contain ``{{...}}`` are inserted verbatim and never
expanded again.
"""

import re
from typing import Any, Mapping, Optional

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def render(template: Optional[str], context: Mapping[str, Any]) -> str:
    """Replace every {{key}} with str(context[key]); unknown keys become ''"""
    if not template:
        return ""
    return PLACEHOLDER_PATTERN.sub(lambda match: _to_text(context.get(match.group(1))), template)


def placeholders(template: Optional[str]) -> set[str]:
    """Names referenced by a template, used to validate rule configs"""
    if not template:
        return set()
    return set(PLACEHOLDER_PATTERN.findall(template))
