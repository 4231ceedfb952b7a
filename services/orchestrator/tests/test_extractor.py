import pytest

from services.orchestrator.core.extractor import ValueExtractor, extract_value


@pytest.fixture
def document():
    return {
        "id": 12345,
        "metadata": "true",
        "folder": {"id": "2000", "tags": ["a", "b"]},
        "items": [{"name": "first"}, {"name": "second"}],
        "flag": False,
        "nothing": None,
    }


def test_extract_resolves_scalars_and_nested(document):
    values = ValueExtractor().extract(
        document, {"id": "$.id", "folder_id": "$.folder.id", "flag": "$.flag"}
    )

    assert values == {"id": 12345, "folder_id": "2000", "flag": False}


def test_extract_structured_value(document):
    values = ValueExtractor().extract(document, {"folder": "$.folder"})

    assert values["folder"] == {"id": "2000", "tags": ["a", "b"]}


def test_extract_multiple_matches_yields_list(document):
    assert extract_value(document, "$.items[*].name") == ["first", "second"]


def test_extract_missing_path_records_none_and_continues(document):
    values = ValueExtractor().extract(
        document, {"missing": "$.missing.field", "id": "$.id"}
    )

    assert "missing" in values
    assert values["missing"] is None
    assert values["id"] == 12345


def test_extract_malformed_expression_records_none_and_continues(document):
    values = ValueExtractor().extract(
        document, {"broken": "$.[[[", "metadata": "$.metadata"}
    )

    assert values["broken"] is None
    assert values["metadata"] == "true"


def test_extract_null_value_is_none(document):
    assert ValueExtractor().extract(document, {"nothing": "$.nothing"}) == {"nothing": None}


@pytest.mark.parametrize("mapping", [None, {}])
def test_extract_empty_mapping_returns_empty(document, mapping):
    assert ValueExtractor().extract(document, mapping) == {}


def test_extract_against_non_object_document():
    values = ValueExtractor().extract(["x"], {"id": "$.id"})

    assert values == {"id": None}
