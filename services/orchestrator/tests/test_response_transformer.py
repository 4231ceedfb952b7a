import base64
import json
import logging

import httpx
import pytest

from services.orchestrator.core.exceptions import EmptyBodyError, UpstreamServiceError
from services.orchestrator.core.response_transformer import (
    ResponseTransformer,
    extract_file_name,
)
from services.orchestrator.models.endpoint import ResponseConfig


@pytest.fixture
def transformer():
    return ResponseTransformer()


def _binary_config(include_metadata: bool = True) -> ResponseConfig:
    return ResponseConfig.model_validate(
        {"type": "binary", "encoding": "base64", "includeMetadata": include_metadata}
    )


@pytest.mark.parametrize(
    "header, expected",
    [
        ('attachment; filename="report.pdf"', "report.pdf"),
        ("attachment; filename=plain.txt", "plain.txt"),
        ("attachment;filename*=UTF-8''r%C3%A9sum%C3%A9.pdf", "UTF-8''r%C3%A9sum%C3%A9.pdf"),
        ("inline", None),
        ("", None),
        (None, None),
    ],
)
def test_extract_file_name(header, expected):
    assert extract_file_name(header) == expected


def test_binary_round_trip_with_metadata(transformer):
    content = bytes(range(256)) * 4
    headers = httpx.Headers(
        {
            "Content-Type": "application/pdf",
            "Content-Disposition": 'attachment; filename="report.pdf"',
        }
    )

    result = transformer.transform(_binary_config(), content, headers, {"id": "12345"})
    document = json.loads(result.content)

    assert result.media_type == "application/json"
    assert base64.b64decode(document["base64Content"]) == content
    assert document["status"] == "success"
    assert document["nodeId"] == "12345"
    assert document["fileName"] == "report.pdf"
    assert document["contentType"] == "application/pdf"
    assert document["sizeBytes"] == len(content)
    assert "timestamp" in document


def test_binary_fallbacks_when_headers_absent(transformer):
    result = transformer.transform(_binary_config(), b"%PDF-1.7", {}, {"id": 987})
    document = json.loads(result.content)

    assert document["fileName"] == "node_987"
    assert document["contentType"] == "application/octet-stream"


def test_binary_without_metadata(transformer):
    result = transformer.transform(_binary_config(include_metadata=False), b"abc", {}, {})
    document = json.loads(result.content)

    assert set(document) == {"status", "base64Content", "timestamp"}
    assert document["base64Content"] == "YWJj"


def test_binary_empty_body_raises(transformer):
    with pytest.raises(EmptyBodyError):
        transformer.transform(_binary_config(), b"", {}, {"id": "1"})


def test_json_transform_literal_fields_and_data(transformer):
    config = ResponseConfig.model_validate(
        {"type": "json", "transform": {"source": "opentext", "nodeName": "$.data.name"}}
    )
    upstream = {"results": [{"id": 1}], "links": {}}

    result = transformer.transform(config, json.dumps(upstream).encode(), {})
    document = json.loads(result.content)

    # Transform values are copied as configured literals.
    assert document["source"] == "opentext"
    assert document["nodeName"] == "$.data.name"
    assert document["data"] == upstream
    assert "timestamp" in document


def test_json_without_transform_wraps_data(transformer):
    config = ResponseConfig(type="json")

    result = transformer.transform(config, b"[1, 2]", {})
    document = json.loads(result.content)

    assert set(document) == {"data", "timestamp"}
    assert document["data"] == [1, 2]


def test_json_invalid_body_raises_upstream_error(transformer):
    with pytest.raises(UpstreamServiceError, match="invalid JSON"):
        transformer.transform(ResponseConfig(type="json"), b"<html>oops</html>", {})


def test_json_expect_fields_only_warns(transformer, caplog):
    config = ResponseConfig.model_validate({"type": "json", "expectFields": ["links", "results"]})

    with caplog.at_level(logging.WARNING, logger="orchestrator.response_transformer"):
        result = transformer.transform(config, b'{"results": []}', {})

    assert json.loads(result.content)["data"] == {"results": []}
    assert "Response missing 'links' field" in caplog.text
    assert "'results'" not in caplog.text


@pytest.mark.parametrize("config", [None, ResponseConfig(type="text")])
def test_text_and_unspecified_pass_through(transformer, config):
    result = transformer.transform(config, b"plain body", {"Content-Type": "text/plain"})

    assert result.content == b"plain body"
    assert result.media_type == "application/json"
