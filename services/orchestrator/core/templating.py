"""
Template resolution for {name} placeholders.

Used for upstream paths, query parameters and headers. Substitution is a
single pass: replacement text is never re-scanned for placeholders.
"""

import json
import re
from typing import Any, List, Mapping, Optional

PLACEHOLDER_PATTERN = re.compile(r"\{([^{}\s]+)\}")


def stringify(value: Any) -> str:
    """String form of an extracted JSON value."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    return str(value)


def placeholders(template: str) -> List[str]:
    """Names referenced by a template, in order of appearance."""
    return PLACEHOLDER_PATTERN.findall(template or "")


def resolve(template: str, values: Mapping[str, Any]) -> str:
    """
    Replace every {name} whose value is present and not None.

    Example:
        resolve("{a}/{b}", {"a": "x"}) -> "x/{b}"
    """
    if not template:
        return template

    def _substitute(match: "re.Match[str]") -> str:
        name = match.group(1)
        value = values.get(name)
        if value is None:
            return match.group(0)
        return stringify(value)

    return PLACEHOLDER_PATTERN.sub(_substitute, template)


def resolve_or_none(template: str, values: Mapping[str, Any]) -> Optional[str]:
    """
    Resolve a template only if every placeholder can be filled.

    Returns None when any placeholder is unresolved, so callers can drop the
    entry instead of emitting literal braces.
    """
    if template is None:
        return None
    missing = [name for name in placeholders(template) if values.get(name) is None]
    if missing:
        return None
    return resolve(template, values)
