"""Search query validation tests."""

import pytest

from morpheus.search.validation import (
    FieldError,
    QueryValidationError,
    SearchQuery,
    validate_query,
)


def kinds(exc_info) -> dict[str, str]:
    return {e.field: e.kind for e in exc_info.value.errors}


def test_valid_query_passes_through():
    query = validate_query({"query": "travel", "tags": ["design"], "limit": 3})

    assert query == SearchQuery(query="travel", tags=["design"], limit=3)


def test_defaults_fill_missing_optional_fields():
    query = validate_query({"query": "travel"})

    assert query.tags == []
    assert query.limit == 10


def test_configured_default_limit_applies_only_when_absent():
    assert validate_query({"query": "x"}, default_limit=25).limit == 25
    assert validate_query({"query": "x", "limit": 2}, default_limit=25).limit == 2


def test_unknown_fields_are_ignored():
    query = validate_query({"query": "travel", "sort": "date"})

    assert query.query == "travel"


def test_empty_query_is_rejected():
    with pytest.raises(QueryValidationError) as exc_info:
        validate_query({"query": "", "tags": [], "limit": 10})

    assert kinds(exc_info) == {"query": "invalid_value"}


def test_missing_query_is_reported_as_missing():
    with pytest.raises(QueryValidationError) as exc_info:
        validate_query({"tags": ["travel"]})

    assert kinds(exc_info) == {"query": "missing"}


@pytest.mark.parametrize(
    "body, field",
    [
        ({"query": 42}, "query"),
        ({"query": "x", "tags": "travel"}, "tags"),
        ({"query": "x", "limit": "ten"}, "limit"),
        ({"query": "x", "limit": 2.5}, "limit"),
        ({"query": "x", "limit": "5"}, "limit"),
        ({"query": "x", "limit": True}, "limit"),
        ({"query": "x", "tags": [1, 2]}, "tags.0"),
    ],
)
def test_wrong_types_are_reported(body, field):
    with pytest.raises(QueryValidationError) as exc_info:
        validate_query(body)

    assert kinds(exc_info)[field] == "wrong_type"


def test_negative_limit_is_invalid():
    with pytest.raises(QueryValidationError) as exc_info:
        validate_query({"query": "x", "limit": -1})

    assert kinds(exc_info) == {"limit": "invalid_value"}


def test_non_object_body_is_rejected():
    with pytest.raises(QueryValidationError) as exc_info:
        validate_query(["travel"])

    assert exc_info.value.errors == [
        FieldError(field="body", kind="wrong_type", message="Expected a JSON object")
    ]


def test_every_problem_is_reported():
    with pytest.raises(QueryValidationError) as exc_info:
        validate_query({"tags": "x", "limit": -5})

    assert set(kinds(exc_info)) == {"query", "tags", "limit"}


def test_error_detail_shape():
    with pytest.raises(QueryValidationError) as exc_info:
        validate_query({"query": ""})

    detail = exc_info.value.to_detail()
    assert detail["message"] == "Validation error"
    assert detail["errors"][0]["field"] == "query"
    assert set(detail["errors"][0]) == {"field", "kind", "message"}
