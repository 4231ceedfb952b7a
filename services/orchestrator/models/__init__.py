"""
Data model definitions package.

Aggregates Pydantic models for use in other modules.
"""

from .context import RequestContext
from .endpoint import EndpointConfig, MappingConfig, ResponseConfig, UpstreamConfig
from .request import UpstreamRequest
from .result import OrchestrationResult

__all__ = [
    "EndpointConfig",
    "MappingConfig",
    "OrchestrationResult",
    "RequestContext",
    "ResponseConfig",
    "UpstreamConfig",
    "UpstreamRequest",
]
