"""System tags and the subtotals shown with system lists."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from patchman.filters import FilterData

DEFAULT_SORT = "-last_upload"
SEARCH_FIELDS = ("sp.display_name",)

_TAG_FIELDS = ("key", "namespace", "value")

# Characters escaped in JSON text so that it is safe inside HTML.
_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def default_filters() -> dict[str, FilterData]:
    """Filters applied when none are given: only fresh systems are listed."""
    return {"stale": FilterData("eq", ["false"])}


@dataclass(frozen=True)
class SystemTag:
    """One inventory tag of a system."""

    key: str = ""
    namespace: str = ""
    value: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "namespace": self.namespace, "value": self.value}


def _tag_from_json(item: Any) -> SystemTag:
    if item is None:
        return SystemTag()
    if not isinstance(item, dict):
        raise ValueError(f"tag must be a JSON object, not {type(item).__name__}")
    folded = {str(name).lower(): val for name, val in item.items()}
    fields: dict[str, str] = {}
    for name in _TAG_FIELDS:
        val = item[name] if name in item else folded.get(name)
        if val is None:
            continue
        if not isinstance(val, str):
            raise ValueError(f"tag field {name!r} must be a string")
        fields[name] = val
    return SystemTag(**fields)


def parse_system_tags(json_str: str) -> list[SystemTag]:
    """Parse the JSON list of tags stored with a host.

    Raises ValueError when the text is not a JSON list of tag objects.
    """
    data = json.loads(json_str)
    if data is None:
        return []
    if not isinstance(data, list):
        raise ValueError("tags must be a JSON list")
    return [_tag_from_json(item) for item in data]


def format_tags(tags: Iterable[SystemTag] | None) -> str:
    """Render tags as compact JSON with single quotes, as used in CSV exports."""
    if tags is None:
        text = "null"
    else:
        text = json.dumps(
            [tag.to_dict() for tag in tags],
            ensure_ascii=False,
            separators=(",", ":"),
        )
        for char, escaped in _HTML_ESCAPES.items():
            text = text.replace(char, escaped)
    return text.replace('"', "'")


def system_subtotals(
    total: int, patched: int, unpatched: int, stale: int
) -> tuple[int, dict[str, int]]:
    """Return the total count and the subtotals reported in list metadata."""
    return int(total), {
        "patched": int(patched),
        "unpatched": int(unpatched),
        "stale": int(stale),
    }