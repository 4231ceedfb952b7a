"""
Upstream request builder.

Turns an endpoint configuration plus extracted values into a concrete
UpstreamRequest: URL, method, query string, headers and body.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple
from urllib.parse import quote, urlencode

import httpx

from services.orchestrator.core.exceptions import InvalidRequestError
from services.orchestrator.core.templating import (
    placeholders,
    resolve,
    resolve_or_none,
    stringify,
)
from services.orchestrator.models.endpoint import EndpointConfig
from services.orchestrator.models.request import UpstreamRequest

logger = logging.getLogger("orchestrator.request_builder")


def validate_required(config: EndpointConfig, values: Mapping[str, Any]) -> None:
    """
    Fail fast when a required input resolved to nothing.

    Raises:
        InvalidRequestError: first missing or empty required field
    """
    for name in config.mapping.required:
        value = values.get(name)
        if value is None:
            raise InvalidRequestError(f"Required parameter '{name}' is missing")
        if isinstance(value, str) and not value.strip():
            raise InvalidRequestError(f"Parameter '{name}' cannot be empty")


class RequestBuilder:
    def __init__(
        self,
        base_endpoint: str,
        token_key: str = "authToken",
        token_header: Optional[str] = "OTCSTicket",
    ):
        """
        Args:
            base_endpoint: process-wide upstream base URL
            token_key: values key the auth token is published under
            token_header: header that always carries the token when present
        """
        self.base_endpoint = base_endpoint.rstrip("/")
        self.token_key = token_key
        self.token_header = token_header

    def build(
        self,
        config: EndpointConfig,
        extracted_values: Mapping[str, Any],
        auth_token: Optional[str] = None,
        original_body: Optional[bytes] = None,
    ) -> UpstreamRequest:
        """
        Build the upstream request for one endpoint.

        Args:
            config: endpoint configuration
            extracted_values: values produced by the extractor (not mutated)
            auth_token: token from the auth sub-flow, if any
            original_body: caller body, forwarded for non-GET methods

        Returns:
            UpstreamRequest

        Raises:
            InvalidRequestError: a required field is missing or empty
        """
        validate_required(config, extracted_values)

        values: Dict[str, Any] = dict(extracted_values)
        if auth_token:
            values[self.token_key] = auth_token

        path = self.build_path(config, values)
        query_string = self.build_query_string(config.mapping.query_params, values)
        headers = self.build_headers(config.mapping.headers, values)

        # Header names are case-insensitive on the wire.
        present = httpx.Headers(headers)
        if auth_token and self.token_header and self.token_header not in present:
            headers[self.token_header] = auth_token

        method = config.upstream.method
        body: Optional[bytes] = None
        if method != "GET" and original_body:
            body = original_body
            if "Content-Type" not in present:
                headers["Content-Type"] = "application/json"

        url = self.base_endpoint + path
        if query_string:
            url = f"{url}?{query_string}"

        return UpstreamRequest(
            method=method, url=url, headers=headers, query_string=query_string, body=body
        )

    def build_path(self, config: EndpointConfig, values: Mapping[str, Any]) -> str:
        """
        Resolve the path template; unresolved placeholders stay literal.

        Every substituted value is percent-encoded as a single path segment.
        """
        path_values = dict(values)
        for name, reference in config.mapping.path_params.items():
            if placeholders(reference):
                value = resolve_or_none(reference, values)
            else:
                value = values.get(reference)
            if value is not None:
                path_values[name] = value

        encoded = {
            name: quote(stringify(value), safe="")
            for name, value in path_values.items()
            if value is not None
        }
        path = resolve(config.upstream.path_template, encoded)

        unresolved = placeholders(path)
        if unresolved:
            logger.warning(
                f"Unresolved path placeholders {unresolved} for endpoint '{config.name}'",
                extra={"endpoint": config.name, "unresolved": unresolved},
            )

        if path and not path.startswith("/"):
            path = "/" + path
        return path

    def build_query_string(
        self, query_params: Mapping[str, str], values: Mapping[str, Any]
    ) -> str:
        """Encode every parameter whose template resolves to a non-empty value."""
        pairs: List[Tuple[str, str]] = []
        for name, template in query_params.items():
            value = resolve_or_none(template, values)
            if value:
                pairs.append((name, value))
        return urlencode(pairs)

    def build_headers(
        self, header_templates: Mapping[str, str], values: Mapping[str, Any]
    ) -> Dict[str, str]:
        headers: Dict[str, str] = {}
        for name, template in header_templates.items():
            value = resolve_or_none(template, values)
            if value:
                headers[name] = value
        return headers
