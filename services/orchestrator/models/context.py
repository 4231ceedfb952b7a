"""
Request context models.

Encapsulates all data carried through one orchestration run.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from .endpoint import EndpointConfig
from .request import UpstreamRequest


class RequestContext(BaseModel):
    """
    Per-request state of the orchestration pipeline.

    Created at pipeline entry and discarded at exit. Never shared between requests.
    """

    endpoint_name: str
    original_body: bytes = Field(default=b"", frozen=True)
    request_id: Optional[str] = None
    endpoint: Optional[EndpointConfig] = None
    document: Any = None
    extracted_values: Dict[str, Any] = Field(default_factory=dict)
    auth_token: Optional[str] = None
    upstream_request: Optional[UpstreamRequest] = None
    upstream_status: Optional[int] = None
    upstream_headers: Dict[str, str] = Field(default_factory=dict)
    upstream_body: bytes = b""
    response_payload: bytes = b""

    @property
    def target_url(self) -> Optional[str]:
        return self.upstream_request.url if self.upstream_request else None

    def attach_token(self, token: str) -> None:
        """Store the auth token. A token can only be attached once per request."""
        if self.auth_token is not None:
            raise RuntimeError("Auth token already attached to this request")
        self.auth_token = token
