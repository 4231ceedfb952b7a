"""
Core logic package.

Provides the transformation engine: extraction, templating, request
building, response shaping and error classification.
"""

from .exceptions import ErrorKind, OrchestrationError, STATUS_BY_KIND, classify_error
from .templating import resolve
from .extractor import ValueExtractor
from .request_builder import RequestBuilder
from .response_transformer import ResponseTransformer, extract_file_name

__all__ = [
    "ErrorKind",
    "OrchestrationError",
    "STATUS_BY_KIND",
    "classify_error",
    "resolve",
    "ValueExtractor",
    "RequestBuilder",
    "ResponseTransformer",
    "extract_file_name",
]
