"""
Dependency Injection for Orchestrator API.

Manage request handler dependencies using FastAPI Depends.
"""

from typing import Annotated

from fastapi import Depends, Request

from ..services.endpoint_registry import EndpointRegistry
from ..services.pipeline import OrchestrationPipeline


def get_endpoint_registry(request: Request) -> EndpointRegistry:
    return request.app.state.endpoint_registry


def get_pipeline(request: Request) -> OrchestrationPipeline:
    return request.app.state.pipeline


EndpointRegistryDep = Annotated[EndpointRegistry, Depends(get_endpoint_registry)]
PipelineDep = Annotated[OrchestrationPipeline, Depends(get_pipeline)]
