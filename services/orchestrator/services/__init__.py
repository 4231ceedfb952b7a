"""
Services package.

Provides the endpoint registry, external integrations and the pipeline.
"""

from .endpoint_registry import EndpointRegistry
from .auth_client import AuthClient
from .upstream_client import UpstreamClient
from .pipeline import OrchestrationPipeline

__all__ = [
    "EndpointRegistry",
    "AuthClient",
    "UpstreamClient",
    "OrchestrationPipeline",
]
