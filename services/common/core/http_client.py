import logging
from typing import Union

import httpx

from .config import BaseAppConfig

logger = logging.getLogger(__name__)


class HttpClientFactory:
    """
    HTTP Client Factory for centralized SSL verification handling.
    """

    def __init__(self, config: BaseAppConfig):
        self.config = config

    def resolve_verify(self) -> Union[bool, str]:
        """
        Return the verify target for httpx.

        A configured CA bundle wins over the plain VERIFY_SSL flag.
        """
        if self.config.CA_BUNDLE_PATH:
            return self.config.CA_BUNDLE_PATH
        if not self.config.VERIFY_SSL:
            logger.warning("SSL verification disabled (VERIFY_SSL=False)")
        return self.config.VERIFY_SSL

    def create_async_client(self, **kwargs) -> httpx.AsyncClient:
        """
        Create an httpx.AsyncClient with configured SSL verification.

        Args:
            **kwargs: Additional arguments for httpx.AsyncClient
        """
        verify = kwargs.pop("verify", None)

        # If verify is not explicitly provided, use config default
        if verify is None:
            verify = self.resolve_verify()

        # Default limits for high throughput (can be overridden by caller)
        if "limits" not in kwargs:
            kwargs["limits"] = httpx.Limits(max_keepalive_connections=20, max_connections=100)
        # Avoid leaking host HTTP(S)_PROXY/NO_PROXY into upstream calls unless explicitly requested.
        kwargs.setdefault("trust_env", False)

        return httpx.AsyncClient(verify=verify, **kwargs)
