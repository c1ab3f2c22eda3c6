"""Sorting, search and filter validation for list endpoints."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from patchman.querymap import QueryMap

INVALID_OFFSET_MSG = "Invalid offset"
INVALID_NESTED_FILTER = "Nested operators not yet implemented for standard filters"
FILTER_NOT_SUPPORTED_MSG = "filtering not supported on this endpoint"


class ListError(ValueError):
    """Raised when list parameters of a request are invalid."""


def apply_sort(
    sort: str | None, field_exprs: Mapping[str, str], default_sort: str
) -> tuple[list[str], list[str]]:
    """Turn a ``sort`` parameter into ORDER BY clauses.

    *field_exprs* maps each sortable field to the expression it orders by.
    Returns the clauses and the fields applied; a leading ``-`` sorts
    descending. ``id`` is always allowed.
    """
    query = default_sort if sort is None else sort
    allowed = {"id", *field_exprs}
    clauses: list[str] = []
    applied: list[str] = []
    for entered in query.split(","):
        if entered.startswith("-") and entered[1:] in allowed:
            name = entered[1:]
            clauses.append(f"{field_exprs.get(name, name)} DESC NULLS LAST")
        elif entered in allowed:
            clauses.append(f"{field_exprs.get(entered, entered)} ASC NULLS FIRST")
        else:
            raise ListError(f"Invalid sort field: {entered}")
        applied.append(entered)
    return clauses, applied


def validate_filters(query_map: QueryMap, allowed_fields: Mapping[str, object]) -> None:
    """Raise ListError for a filter on a field that is not allowed."""
    for key in query_map:
        if key == "system_profile":
            continue
        if key not in allowed_fields:
            raise ListError(f"Invalid filter field: {key}")


def search_condition(
    search: str, columns: Sequence[str]
) -> tuple[str, str, str] | None:
    """Build a case-insensitive search over *columns*.

    Returns the condition, its LIKE pattern and the ``search=`` query
    parameter, or None when there is nothing to search.
    """
    if not search or not columns:
        return None
    concat = ",' ',".join(columns)
    return (
        f"LOWER(CONCAT({concat})) LIKE LOWER(?)",
        f"%{search}%",
        f"search={search}",
    )


def check_filter_in_url(url: str) -> None:
    """Raise ListError if *url* carries a filter where none is supported."""
    if "filter" in url:
        raise ListError(FILTER_NOT_SUPPORTED_MSG)