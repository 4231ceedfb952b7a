"""
Upstream response transformation.

Dispatches on the configured response type:
- binary: base64 envelope with optional file metadata
- json: literal field mapping plus the original document under ``data``
- text / unspecified: passthrough
Every outcome is served to the caller as application/json.
"""

import base64
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

import httpx
from pydantic import BaseModel

from services.orchestrator.core.exceptions import EmptyBodyError, UpstreamServiceError
from services.orchestrator.core.templating import stringify
from services.orchestrator.models.endpoint import ResponseConfig

logger = logging.getLogger("orchestrator.response_transformer")

JSON_MEDIA_TYPE = "application/json"
DEFAULT_BINARY_CONTENT_TYPE = "application/octet-stream"


class TransformedResponse(BaseModel):
    """Caller-facing body produced by the transformer."""

    content: bytes
    media_type: str = JSON_MEDIA_TYPE


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _dump(document: Dict[str, Any]) -> bytes:
    return json.dumps(document, ensure_ascii=False).encode("utf-8")


def extract_file_name(content_disposition: Optional[str]) -> Optional[str]:
    """
    Parse a file name out of a Content-Disposition style header.

    Example:
        'attachment; filename="report.pdf"' -> "report.pdf"
    """
    if not content_disposition:
        return None

    for part in content_disposition.split(";"):
        part = part.strip()
        if part.startswith("filename=") or part.startswith("filename*="):
            file_name = part[part.index("=") + 1 :].strip()
            if file_name.startswith('"'):
                file_name = file_name[1:]
            if file_name.endswith('"'):
                file_name = file_name[:-1]
            return file_name

    return None


class ResponseTransformer:
    def transform(
        self,
        response_config: Optional[ResponseConfig],
        content: bytes,
        headers: Mapping[str, str],
        values: Optional[Mapping[str, Any]] = None,
    ) -> TransformedResponse:
        """
        Transform an upstream response body.

        Args:
            response_config: response section of the endpoint (None means passthrough)
            content: raw upstream body
            headers: upstream response headers (case-insensitive mapping expected)
            values: extracted request values, used for the binary fallback file name

        Raises:
            EmptyBodyError: binary response without content
            UpstreamServiceError: json response that does not parse
        """
        values = values or {}
        headers = httpx.Headers(headers or {})
        response_type = response_config.type if response_config else None

        if response_type == "binary":
            return self.transform_binary(response_config, content, headers, values)
        if response_type == "json":
            return self.transform_json(response_config, content)

        logger.debug(f"No transformation for response type: {response_type}")
        return TransformedResponse(content=content)

    def transform_binary(
        self,
        response_config: ResponseConfig,
        content: bytes,
        headers: Mapping[str, str],
        values: Mapping[str, Any],
    ) -> TransformedResponse:
        if not content:
            raise EmptyBodyError()

        logger.info(f"Transforming binary response, size: {len(content)} bytes")

        document: Dict[str, Any] = {"status": "success"}

        if response_config.include_metadata:
            node_id = values.get("id")
            node_id = stringify(node_id) if node_id is not None else None
            file_name = extract_file_name(headers.get("content-disposition"))
            if not file_name:
                file_name = f"node_{node_id}"

            document["nodeId"] = node_id
            document["fileName"] = file_name
            document["contentType"] = headers.get("content-type") or DEFAULT_BINARY_CONTENT_TYPE
            document["sizeBytes"] = len(content)

        document["base64Content"] = base64.b64encode(content).decode("ascii")
        document["timestamp"] = _timestamp()

        return TransformedResponse(content=_dump(document))

    def transform_json(
        self, response_config: ResponseConfig, content: bytes
    ) -> TransformedResponse:
        try:
            original = json.loads(content) if content else None
        except ValueError as e:
            raise UpstreamServiceError(f"Upstream returned invalid JSON: {e}") from e

        for field in response_config.expect_fields:
            if not isinstance(original, dict) or field not in original:
                logger.warning(f"Response missing '{field}' field")

        # Transform values are configured literals, copied as-is.
        document: Dict[str, Any] = dict(response_config.transform)
        document["data"] = original
        document["timestamp"] = _timestamp()

        return TransformedResponse(content=_dump(document))
