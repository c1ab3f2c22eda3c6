import json

import pytest

from patchman.filters import FilterData
from patchman.systems import (
    DEFAULT_SORT,
    SystemTag,
    default_filters,
    format_tags,
    parse_system_tags,
    system_subtotals,
)

TAGS_JSON = (
    '[{"key": "k1", "namespace": "ns1", "value": "val1"},'
    ' {"key": "k2", "namespace": "ns1", "value": "val2"}]'
)


def test_parse_system_tags():
    tags = parse_system_tags(TAGS_JSON)
    assert tags == [SystemTag("k1", "ns1", "val1"), SystemTag("k2", "ns1", "val2")]


def test_format_tags_matches_export():
    tags = parse_system_tags(TAGS_JSON)
    assert format_tags(tags) == (
        "[{'key':'k1','namespace':'ns1','value':'val1'},"
        "{'key':'k2','namespace':'ns1','value':'val2'}]"
    )


def test_format_parse_round_trip():
    tags = [SystemTag("a", "b", "c"), SystemTag("key", "", "x y")]
    rendered = format_tags(tags).replace("'", '"')
    assert parse_system_tags(rendered) == tags


def test_format_tags_none_and_empty():
    assert format_tags(None) == "null"
    assert format_tags([]) == "[]"


def test_format_tags_escapes_html():
    rendered = format_tags([SystemTag("<k>", "ns", "v")])
    assert "<" not in rendered and ">" not in rendered
    assert "\\u003c" in rendered


def test_parse_null_gives_empty_list():
    assert parse_system_tags("null") == []


def test_parse_missing_and_null_fields():
    tags = parse_system_tags('[{"key": "k1", "namespace": null}]')
    assert tags == [SystemTag(key="k1")]


@pytest.mark.parametrize("text", ["", "not json", '{"key": "k"}', '[{"key": 1}]', "[1]"])
def test_parse_invalid_raises(text):
    with pytest.raises(ValueError):
        parse_system_tags(text)


def test_to_dict_order_and_values():
    tag = SystemTag("k1", "ns1", "val1")
    assert list(tag.to_dict()) == ["key", "namespace", "value"]
    assert json.loads(json.dumps(tag.to_dict())) == {
        "key": "k1",
        "namespace": "ns1",
        "value": "val1",
    }


def test_system_subtotals():
    total, subtotals = system_subtotals(8, 8, 0, 0)
    assert total == 8
    assert subtotals == {"patched": 8, "unpatched": 0, "stale": 0}


def test_defaults():
    assert DEFAULT_SORT == "-last_upload"
    assert default_filters() == {"stale": FilterData("eq", ["false"])}
    first = default_filters()
    first["stale"].values.append("true")
    assert default_filters()["stale"].values == ["false"]