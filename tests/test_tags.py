import json

import pytest

from patchman.filters import FilterData
from patchman.querymap import QueryMap, nested_query_from_url
from patchman.tags import (
    InvalidTagError,
    Tag,
    build_profile_query,
    extract_tags_query_string,
    has_tags,
    parse_system_profile_filters,
    parse_tag,
    parse_tags,
    parse_tags_filters,
    tags_filter_conditions,
)


def _filters(url):
    return parse_tags_filters([], nested_query_from_url(url, "filter"))


def test_parse_tag_full():
    assert parse_tag("ns1/k3=val4") == Tag("ns1", "k3", "val4")


def test_parse_tag_without_value():
    assert parse_tag("ns1/k1") == Tag("ns1", "k1", None)


def test_parse_tag_null_namespace():
    assert parse_tag("NULL/k1=v").namespace is None


def test_parse_tag_invalid():
    with pytest.raises(InvalidTagError) as info:
        parse_tag("invalidTag")
    assert str(info.value) == "Invalid tag 'invalidTag'. Use 'namespace/key=val format'"


def test_tag_sql_condition_roundtrip():
    condition, param = Tag("ns1", "k1", "val1").sql_condition()
    assert condition == "h.tags @> ?::jsonb"
    assert json.loads(param) == [{"namespace": "ns1", "key": "k1", "value": "val1"}]


def test_tag_sql_condition_without_namespace_and_value():
    _, param = Tag(None, "k1").sql_condition()
    assert json.loads(param) == [{"key": "k1"}]


def test_build_profile_query_nested():
    assert (
        build_profile_query("mssql->version", "1.0")
        == "(h.system_profile -> 'mssql' ->> 'version')::text = ?"
    )


def test_build_profile_query_sap_sids():
    assert build_profile_query("sap_sids", '"ABC"').endswith("::jsonb @> ?::jsonb")


def test_build_profile_query_not_nil():
    assert build_profile_query("ansible", "not_nil").endswith(" is not null")


def test_parse_tags_metadata():
    filters = {}
    parse_tags(["ns1/k3=val4", "ns1/k1=val1"], filters)
    assert filters == {
        "ns1/k1": FilterData("eq", ["val1"]),
        "ns1/k3": FilterData("eq", ["val4"]),
    }


def test_parse_tags_invalid_raises():
    with pytest.raises(InvalidTagError):
        parse_tags(["ns1/k3=val4", "invalidTag"], {})


def test_sap_meta_plain():
    assert _filters("/?filter[system_profile][sap_sids][]=ABC") == {
        "sap_sids": FilterData("eq", ['"ABC"'])
    }


def test_sap_meta_in():
    assert _filters("/?filter[system_profile][sap_sids][in][]=ABC") == {
        "sap_sids": FilterData("in", ['"ABC"'])
    }


def test_sap_meta_with_system():
    url = "/?filter[system_profile][sap_system]=true&filter[system_profile][sap_sids][]=ABC"
    assert _filters(url) == {
        "sap_system": FilterData("eq", ["true"]),
        "sap_sids": FilterData("eq", ['"ABC"']),
    }


def test_sap_meta_multiple_values():
    url = "/?filter[system_profile][sap_sids][in]=ABC&filter[system_profile][sap_sids][in]=GHI"
    assert _filters(url) == {"sap_sids": FilterData("in", ['"ABC"', '"GHI"'])}


def test_ansible_meta():
    assert _filters("/?filter[system_profile][ansible][controller_version]=1.0") == {
        "ansible->controller_version": FilterData("eq", ["1.0"])
    }


def test_mssql_meta():
    assert _filters("/?filter[system_profile][mssql][version]=15.3.0") == {
        "mssql->version": FilterData("eq", ["15.3.0"])
    }
    assert _filters("/?filter[system_profile][mssql]=not_nil") == {
        "mssql": FilterData("eq", ["not_nil"])
    }


def test_parse_system_profile_filters_absent():
    filters = {}
    parse_system_profile_filters(QueryMap(), filters)
    assert filters == {}


def test_tags_filter_conditions_none_applied():
    assert tags_filter_conditions({}, "sp.inventory_id") is None
    assert tags_filter_conditions({"stale": FilterData("eq", ["false"])}, "sp.inventory_id") is None


def test_tags_filter_conditions_tag():
    result = tags_filter_conditions({"ns1/k2": FilterData("eq", ["val2"])}, "sp.inventory_id")
    sql, params = result
    assert sql.startswith("sp.inventory_id::uuid in (")
    assert "h.tags @> ?::jsonb" in sql
    assert json.loads(params[0]) == [{"namespace": "ns1", "key": "k2", "value": "val2"}]


def test_tags_filter_conditions_not_nil_has_no_param():
    sql, params = tags_filter_conditions({"ansible": FilterData("eq", ["not_nil"])}, "x")
    assert "is not null" in sql
    assert params == []


def test_tags_filter_conditions_multiple_values_wrapped():
    _, params = tags_filter_conditions(
        {"sap_sids": FilterData("in", ['"ABC"', '"GHI"'])}, "x"
    )
    assert params == ['["ABC","GHI"]']


def test_extract_tags_query_string():
    assert extract_tags_query_string([]) == ""
    assert extract_tags_query_string(["a/b=c"]) == "tags=a/b=c"
    assert extract_tags_query_string(["a/b", "c/d"]) == "tags=c/d&tags=a/b"


def test_has_tags():
    empty = QueryMap()
    profile = nested_query_from_url("/?filter[system_profile][sap_system]=true", "filter")
    assert has_tags(["ns1/k1"], empty, False) is False
    assert has_tags(["ns1/k1"], empty, True) is True
    assert has_tags([], profile, True) is True
    assert has_tags([], empty, True) is False