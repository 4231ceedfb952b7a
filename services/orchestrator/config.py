"""
Orchestrator configuration definition.

Loads configuration from environment variables and provides a Pydantic model.
Uses pydantic-settings for type safety and defaults.
"""

import sys
from pydantic import Field
from services.common.core.config import BaseAppConfig


class OrchestratorConfig(BaseAppConfig):
    """
    Configuration management for the Orchestrator service.
    """

    # Server settings
    UVICORN_BIND_ADDR: str = Field(default="0.0.0.0:8080", description="Listen address")

    # Path settings
    ENDPOINTS_CONFIG_PATH: str = Field(
        default="/app/config/endpoints.yml", description="Endpoint definition file path"
    )

    # Upstream resource API
    TARGET_ENDPOINT: str = Field(..., description="Base URL of the upstream resource API")
    UPSTREAM_TIMEOUT: float = Field(default=30.0, description="Upstream call timeout (seconds)")

    # Authentication collaborator (credentials required from env)
    AUTH_URL: str = Field(..., description="Base URL of the authentication API")
    AUTH_PATH: str = Field(default="/v1/auth", description="Authentication endpoint path")
    AUTH_USERNAME: str = Field(..., description="Auth username")
    AUTH_PASSWORD: str = Field(..., description="Auth password")
    AUTH_DOMAIN: str = Field(default="", description="Auth domain, omitted when empty")
    AUTH_TOKEN_FIELD: str = Field(default="ticket", description="Token field in auth response")
    AUTH_TOKEN_HEADER: str = Field(
        default="OTCSTicket", description="Header carrying the token upstream"
    )
    AUTH_TOKEN_KEY: str = Field(
        default="authToken", description="Template key the token is exposed under"
    )

    # FastAPI settings
    root_path: str = Field(default="", description="API root path (for proxy)")

    @property
    def auth_endpoint(self) -> str:
        return self.AUTH_URL.rstrip("/") + self.AUTH_PATH


# Load config as a singleton.
# pydantic-settings reads environment variables during instantiation.
try:
    config = OrchestratorConfig()
except Exception as e:
    sys.stderr.write(f"Failed to load configuration: {e}\n")
    raise
