import pytest

from patchman.listing import (
    FILTER_NOT_SUPPORTED_MSG,
    ListError,
    apply_sort,
    check_filter_in_url,
    search_condition,
    validate_filters,
)
from patchman.querymap import nested_query_from_url

FIELDS = {"name": "pn.name", "os": "ih.os_order"}


def test_apply_sort_descending_and_ascending():
    clauses, applied = apply_sort("-name,os", FIELDS, "name")
    assert applied == ["-name", "os"]
    assert clauses == ["pn.name DESC NULLS LAST", "ih.os_order ASC NULLS FIRST"]


def test_apply_sort_default():
    clauses, applied = apply_sort(None, FIELDS, "-os")
    assert applied == ["-os"]
    assert clauses == ["ih.os_order DESC NULLS LAST"]


def test_apply_sort_id_always_allowed():
    _, applied = apply_sort("id", FIELDS, "name")
    assert applied == ["id"]


def test_apply_sort_invalid():
    with pytest.raises(ListError) as info:
        apply_sort("unknown_key", FIELDS, "name")
    assert str(info.value) == "Invalid sort field: unknown_key"


def test_apply_sort_empty_given_is_invalid():
    with pytest.raises(ListError):
        apply_sort("", FIELDS, "name")


def test_validate_filters_rejects_unknown():
    query = nested_query_from_url("/?filter[not-existing]=1", "filter")
    with pytest.raises(ListError) as info:
        validate_filters(query, FIELDS)
    assert str(info.value) == "Invalid filter field: not-existing"


def test_validate_filters_skips_system_profile():
    query = nested_query_from_url(
        "/?filter[name]=x&filter[system_profile][sap_system]=true", "filter"
    )
    assert validate_filters(query, FIELDS) is None


def test_search_condition_builds_pattern():
    condition, pattern, param = search_condition("fire", ["pn.name", "latest.summary"])
    assert condition == "LOWER(CONCAT(pn.name,' ',latest.summary)) LIKE LOWER(?)"
    assert pattern == "%fire%"
    assert param == "search=fire"


def test_search_condition_empty():
    assert search_condition("", ["pn.name"]) is None
    assert search_condition("kernel", []) is None


def test_check_filter_in_url():
    with pytest.raises(ListError) as info:
        check_filter_in_url("/00000000-0000-0000-0000-000000000001?filter[filter]=abcd")
    assert str(info.value) == FILTER_NOT_SUPPORTED_MSG
    assert check_filter_in_url("/00000000-0000-0000-0000-000000000001") is None