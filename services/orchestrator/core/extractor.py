"""
Value extraction.

Evaluates named JSONPath expressions against the caller document.
A failing entry is recorded as None; extraction as a whole never fails.
"""

import logging
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from jsonpath_ng import JSONPath
from jsonpath_ng.ext import parse

logger = logging.getLogger("orchestrator.extractor")


@lru_cache(maxsize=512)
def compile_path(expression: str) -> JSONPath:
    """Parse a JSONPath expression (cached, parsed expressions are immutable)."""
    return parse(expression)


def extract_value(document: Any, expression: str) -> Any:
    """
    Evaluate one expression.

    Returns None when nothing matches, the value for a single match and a
    list of values when the expression matches several nodes.

    Raises:
        Exception: malformed expression (parser errors vary by construct)
    """
    matches = compile_path(expression).find(document)
    if not matches:
        return None
    if len(matches) == 1:
        return matches[0].value
    return [match.value for match in matches]


class ValueExtractor:
    def extract(
        self, document: Any, mapping: Optional[Mapping[str, str]]
    ) -> Dict[str, Any]:
        """
        Extract every mapped field from the document.

        Args:
            document: parsed caller JSON
            mapping: field name -> JSONPath expression

        Returns:
            Dict of field name -> value (None for entries that did not resolve)
        """
        extracted: Dict[str, Any] = {}
        if not mapping:
            return extracted

        for name, expression in mapping.items():
            try:
                value = extract_value(document, expression)
            except Exception as e:
                logger.warning(
                    f"Failed to extract value for key '{name}' using path '{expression}': {e}",
                    extra={"field": name, "path_expression": expression},
                )
                value = None
            else:
                if value is None:
                    logger.debug(f"Path '{expression}' did not resolve for key '{name}'")

            extracted[name] = value

        return extracted
