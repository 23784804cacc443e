"""Validation of the public search query contract."""

from collections.abc import Mapping
from dataclasses import asdict, dataclass
from typing import Any, Literal

from pydantic import BaseModel, Field, StrictStr, ValidationError

from morpheus.constants.search import DEFAULT_SEARCH_LIMIT

ErrorKind = Literal["missing", "wrong_type", "invalid_value"]


class SearchQuery(BaseModel):
    """A validated search request. Unknown fields are ignored."""

    query: StrictStr = Field(..., min_length=1, description="Free-text query")
    tags: list[StrictStr] = Field(default_factory=list, description="Tag names to filter by")
    limit: int = Field(DEFAULT_SEARCH_LIMIT, ge=0, strict=True, description="Max results per list")


@dataclass(frozen=True)
class FieldError:
    """One problem found while validating a query."""

    field: str
    kind: ErrorKind
    message: str


class QueryValidationError(Exception):
    """Raised when a raw query does not satisfy the SearchQuery contract."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = errors
        summary = "; ".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(f"Invalid search query: {summary}")

    def to_detail(self) -> dict[str, Any]:
        """Shape the error for an HTTP error body."""
        return {
            "message": "Validation error",
            "errors": [asdict(e) for e in self.errors],
        }


def _classify(error_type: str) -> ErrorKind:
    if error_type == "missing":
        return "missing"
    if error_type.endswith(("_type", "_parsing")) or error_type == "int_from_float":
        return "wrong_type"
    return "invalid_value"


def validate_query(raw: Any, default_limit: int = DEFAULT_SEARCH_LIMIT) -> SearchQuery:
    """Validate a decoded JSON body into a SearchQuery.

    Args:
        raw: Decoded request body.
        default_limit: Limit applied when the body has no ``limit`` key.

    Returns:
        The validated query.

    Raises:
        QueryValidationError: If the body is not an object or any field is
            missing, of the wrong type, or out of range.
    """
    if not isinstance(raw, Mapping):
        raise QueryValidationError(
            [FieldError(field="body", kind="wrong_type", message="Expected a JSON object")]
        )

    data = dict(raw)
    data.setdefault("limit", default_limit)

    try:
        return SearchQuery.model_validate(data)
    except ValidationError as e:
        raise QueryValidationError(
            [
                FieldError(
                    field=".".join(str(part) for part in err["loc"]) or "body",
                    kind=_classify(err["type"]),
                    message=err["msg"],
                )
                for err in e.errors()
            ]
        ) from e
