"""
Authentication Client

Acquires an upstream token by posting form-encoded credentials to the
authentication endpoint and reading the token field of the JSON reply.
"""

import logging
from typing import Dict

import httpx

from services.orchestrator.config import OrchestratorConfig
from services.orchestrator.core.exceptions import AuthTokenError

logger = logging.getLogger("orchestrator.auth_client")


class AuthClient:
    def __init__(self, client: httpx.AsyncClient, config: OrchestratorConfig):
        """
        Args:
            client: Shared httpx.AsyncClient
            config: OrchestratorConfig instance
        """
        self.client = client
        self.config = config

    def build_form(self) -> Dict[str, str]:
        """Credential form. The domain is omitted entirely when empty."""
        form = {
            "username": self.config.AUTH_USERNAME,
            "password": self.config.AUTH_PASSWORD,
        }
        if self.config.AUTH_DOMAIN:
            form["domain"] = self.config.AUTH_DOMAIN
        return form

    async def acquire_token(self) -> str:
        """
        Obtain a token from the authentication endpoint.

        Returns:
            Token string (never empty)

        Raises:
            AuthTokenError: transport failure, non-success status, or no usable token
        """
        auth_url = self.config.auth_endpoint
        logger.info(f"Requesting auth token from {auth_url}")
        logger.debug(f"Built auth request with username: {self.config.AUTH_USERNAME}")

        try:
            response = await self.client.post(
                auth_url,
                data=self.build_form(),
                headers={"Accept": "application/json"},
            )
        except httpx.RequestError as e:
            logger.error(
                "Auth request failed",
                extra={
                    "target_url": auth_url,
                    "error_type": type(e).__name__,
                    "error_detail": str(e),
                },
            )
            raise AuthTokenError(f"Authentication call failed: {e}") from e

        if not response.is_success:
            raise AuthTokenError(
                f"Authentication call returned HTTP {response.status_code}"
            )

        try:
            document = response.json()
        except ValueError as e:
            raise AuthTokenError("Authentication response is not valid JSON") from e

        token_field = self.config.AUTH_TOKEN_FIELD
        if not isinstance(document, dict) or token_field not in document:
            raise AuthTokenError(f"Response missing '{token_field}' field")

        token = document[token_field]
        token = "" if token is None else str(token)
        if not token:
            raise AuthTokenError("Token is null or empty")

        logger.info(f"Successfully obtained auth token: {token[:10]}...")
        return token
