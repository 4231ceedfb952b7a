import os
from pathlib import Path

import httpx
import pytest

# Config is initialized at import time, so set the environment at top level.
os.environ["TARGET_ENDPOINT"] = "https://otcs.test/otcs/cs.exe/api"
os.environ["AUTH_URL"] = "https://otcs.test/otcs/cs.exe/api"
os.environ["AUTH_USERNAME"] = "test-user"
os.environ["AUTH_PASSWORD"] = "test-password"
os.environ.setdefault("LOG_CONFIG_PATH", "/tmp/orchestrator-missing-logging.yml")
os.environ.setdefault(
    "ENDPOINTS_CONFIG_PATH",
    str(Path(__file__).resolve().parents[3] / "config" / "endpoints.yml"),
)

from services.orchestrator.config import OrchestratorConfig  # noqa: E402
from services.orchestrator.core.request_builder import RequestBuilder  # noqa: E402
from services.orchestrator.services.auth_client import AuthClient  # noqa: E402
from services.orchestrator.services.endpoint_registry import (  # noqa: E402
    EndpointRegistry,
    builtin_endpoints,
)
from services.orchestrator.services.pipeline import OrchestrationPipeline  # noqa: E402
from services.orchestrator.services.upstream_client import UpstreamClient  # noqa: E402

BASE_URL = "https://otcs.test/otcs/cs.exe/api"


@pytest.fixture
def orchestrator_config():
    return OrchestratorConfig(_env_file=None)


@pytest.fixture
def registry():
    return EndpointRegistry(builtin_endpoints())


@pytest.fixture
def request_builder():
    return RequestBuilder(base_endpoint=BASE_URL)


@pytest.fixture
def make_pipeline(orchestrator_config, request_builder):
    def _make(client: httpx.AsyncClient, registry: EndpointRegistry) -> OrchestrationPipeline:
        return OrchestrationPipeline(
            registry=registry,
            auth_client=AuthClient(client, orchestrator_config),
            upstream_client=UpstreamClient(client),
            request_builder=request_builder,
        )

    return _make
