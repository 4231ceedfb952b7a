"""
OpenText Orchestrator - configuration-driven API gateway

Receives a caller JSON request, authenticates against the upstream API when
the endpoint requires it, calls the upstream API as described by
endpoints.yml and returns the transformed response.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import Response

from .api.deps import EndpointRegistryDep, PipelineDep
from .config import OrchestratorConfig, config
from .core.logging_config import setup_logging
from .exceptions import register_exception_handlers
from .lifecycle import manage_lifespan
from .middleware import request_id_middleware
from .models.result import OrchestrationResult
from .services.endpoint_registry import CATEGORIES_ENDPOINT, DOWNLOAD_ENDPOINT

# Logger setup
setup_logging()
logger = logging.getLogger("orchestrator.main")


def _to_response(result: OrchestrationResult) -> Response:
    return Response(
        content=result.payload,
        status_code=result.status_code,
        media_type=result.media_type,
    )


def create_app(orchestrator_config: Optional[OrchestratorConfig] = None) -> FastAPI:
    """Assemble the FastAPI application."""
    app_config = orchestrator_config or config

    def lifespan(app: FastAPI):
        return manage_lifespan(app, app_config)

    app = FastAPI(
        title="OpenText Orchestrator",
        version="1.0.0",
        lifespan=lifespan,
        root_path=app_config.root_path,
    )
    app.middleware("http")(request_id_middleware)
    register_exception_handlers(app)

    @app.get("/health")
    async def health_check(registry: EndpointRegistryDep):
        """Health check endpoint."""
        return {
            "status": "healthy",
            "endpoints": len(registry),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.post("/api/orchestrate/execute")
    async def orchestrate_categories(request: Request, pipeline: PipelineDep):
        """Authenticate, then GET the categories of the requested node."""
        body = await request.body()
        return _to_response(await pipeline.run(CATEGORIES_ENDPOINT, body))

    @app.post("/api/orchestrate/download")
    async def orchestrate_download(request: Request, pipeline: PipelineDep):
        """Authenticate, then download the node content as base64 with metadata."""
        body = await request.body()
        return _to_response(await pipeline.run(DOWNLOAD_ENDPOINT, body))

    @app.post("/api/dynamic/{endpoint_name}")
    async def orchestrate_dynamic(endpoint_name: str, request: Request, pipeline: PipelineDep):
        """Run any endpoint configured in endpoints.yml."""
        body = await request.body()
        return _to_response(await pipeline.run(endpoint_name, body))

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    host, _, port = config.UVICORN_BIND_ADDR.rpartition(":")
    uvicorn.run(app, host=host or "0.0.0.0", port=int(port))
