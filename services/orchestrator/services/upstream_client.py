"""
Upstream Client

Dispatches a built UpstreamRequest over the shared transport client.
"""

import logging

import httpx

from services.orchestrator.core.exceptions import UpstreamServiceError
from services.orchestrator.models.request import UpstreamRequest

logger = logging.getLogger("orchestrator.upstream_client")


class UpstreamClient:
    def __init__(self, client: httpx.AsyncClient):
        """
        Args:
            client: Shared httpx.AsyncClient
        """
        self.client = client

    async def send(self, request: UpstreamRequest) -> httpx.Response:
        """
        Send the request and return the successful response.

        Raises:
            UpstreamServiceError: transport failure, timeout or non-2xx status
        """
        logger.info(f"Calling: {request.method} {request.url}")

        try:
            response = await self.client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body,
            )
        except httpx.TimeoutException as e:
            logger.error(
                f"Upstream call timed out: {request.method} {request.url}",
                extra={"target_url": request.url, "error_type": type(e).__name__},
            )
            raise UpstreamServiceError(f"Upstream call timed out: {e}") from e
        except httpx.RequestError as e:
            logger.error(
                f"Upstream call failed: {request.method} {request.url}",
                extra={
                    "target_url": request.url,
                    "error_type": type(e).__name__,
                    "error_detail": str(e),
                },
            )
            raise UpstreamServiceError(f"Upstream call failed: {e}") from e

        if not response.is_success:
            raise UpstreamServiceError(
                f"Upstream returned HTTP {response.status_code} for "
                f"{request.method} {request.url}",
                status_code=response.status_code,
            )

        return response
