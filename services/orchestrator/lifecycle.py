"""
Where: services/orchestrator/lifecycle.py
What: Orchestrator startup/shutdown orchestration for shared resources.
Why: Keep main.py focused on app assembly while preserving lifecycle behavior.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from services.common.core.http_client import HttpClientFactory

from .config import OrchestratorConfig
from .core.request_builder import RequestBuilder
from .services.auth_client import AuthClient
from .services.endpoint_registry import EndpointRegistry
from .services.pipeline import OrchestrationPipeline
from .services.upstream_client import UpstreamClient

logger = logging.getLogger("orchestrator.main")


@asynccontextmanager
async def manage_lifespan(
    app: FastAPI, orchestrator_config: OrchestratorConfig
) -> AsyncIterator[None]:
    """Manage application lifecycle."""
    # Endpoint configuration problems are fatal before any resource is opened.
    endpoint_registry = EndpointRegistry.from_file(orchestrator_config.ENDPOINTS_CONFIG_PATH)

    factory = HttpClientFactory(orchestrator_config)
    client = factory.create_async_client(timeout=orchestrator_config.UPSTREAM_TIMEOUT)

    try:
        request_builder = RequestBuilder(
            base_endpoint=orchestrator_config.TARGET_ENDPOINT,
            token_key=orchestrator_config.AUTH_TOKEN_KEY,
            token_header=orchestrator_config.AUTH_TOKEN_HEADER,
        )
        pipeline = OrchestrationPipeline(
            registry=endpoint_registry,
            auth_client=AuthClient(client, orchestrator_config),
            upstream_client=UpstreamClient(client),
            request_builder=request_builder,
        )

        app.state.http_client = client
        app.state.endpoint_registry = endpoint_registry
        app.state.pipeline = pipeline

        logger.info(
            "Orchestrator initialized with shared resources.",
            extra={
                "endpoints": endpoint_registry.names(),
                "target_endpoint": orchestrator_config.TARGET_ENDPOINT,
            },
        )
        yield
    finally:
        logger.info("Orchestrator shutting down, closing http client.")
        await client.aclose()
