"""CSV and JSON exports of list endpoints."""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping, Sequence
from datetime import datetime, timedelta
from typing import IO, Any

from patchman.systems import SystemTag, format_tags

JSON_TYPE = "application/json"
CSV_TYPE = "text/csv"

PACKAGE_FIELDS = ("name", "systems_installed", "systems_updatable", "summary")
SYSTEM_PACKAGE_FIELDS = (
    "name",
    "evra",
    "summary",
    "description",
    "updatable",
    "latest_evra",
)
SYSTEM_ADVISORY_FIELDS = (
    "id",
    "description",
    "public_date",
    "synopsis",
    "advisory_type",
    "advisory_type_name",
    "severity",
    "cve_count",
    "reboot_required",
    "release_versions",
)

_PACKAGE_ATTRS = ("name", "evra", "summary", "description", "updatable")


class UnsupportedMediaType(ValueError):
    """Raised when the Accept header names neither JSON nor CSV."""

    status = 415

    def __init__(self, accept: str) -> None:
        super().__init__(
            f"Invalid content type '{accept}', use 'application/json' or 'text/csv'"
        )
        self.accept = accept


def parse_json_list(raw: str | bytes | None) -> list[str]:
    """Parse a JSON list of strings; missing data gives an empty list.

    Raises ValueError when *raw* is not a JSON list of strings.
    """
    if raw is None:
        return []
    data = json.loads(raw)
    if data is None:
        return []
    if not isinstance(data, list) or not all(isinstance(v, str) for v in data):
        raise ValueError("expected a JSON list of strings")
    return data


def latest_evra(evra: str, updates_json: str | bytes | None) -> str:
    """Return the newest version a package can be updated to.

    Without update data the installed *evra* is the latest; with an empty
    update list the result is empty.
    """
    if updates_json is None:
        return evra
    updates = json.loads(updates_json)
    if not updates:
        return ""
    if not isinstance(updates, list) or not isinstance(updates[-1], dict):
        raise ValueError("expected a JSON list of package updates")
    return str(updates[-1].get("evra", ""))


def inline_packages(rows: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Turn system package rows into export rows carrying ``latest_evra``."""
    result = []
    for row in rows:
        item = {name: row.get(name) for name in _PACKAGE_ATTRS}
        item["latest_evra"] = latest_evra(row.get("evra") or "", row.get("updates"))
        result.append(item)
    return result


def _format_time(value: datetime) -> str:
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += f".{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset()
    if offset is None or offset == timedelta(0):
        return text + "Z"
    minutes = int(offset.total_seconds()) // 60
    sign = "+" if minutes >= 0 else "-"
    hours, mins = divmod(abs(minutes), 60)
    return f"{text}{sign}{hours:02d}:{mins:02d}"


def _format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        return _format_time(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        if value and all(isinstance(v, SystemTag) for v in value):
            return format_tags(value)
        return ",".join(_format_value(v) for v in value)
    return str(value)


def _quote(field: str) -> str:
    needs_quotes = field == "\\." or any(c in field for c in ',"\r\n')
    if not needs_quotes and field and field[0].isspace():
        needs_quotes = True
    if not needs_quotes:
        return field
    return '"' + field.replace('"', '""') + '"'


def _line(fields: Iterable[str]) -> str:
    return ",".join(_quote(f) for f in fields) + "\n"


def write_csv(
    rows: Iterable[Mapping[str, Any]], fieldnames: Sequence[str], stream: IO[str]
) -> None:
    """Write a header and one line per row; the header is written even for no rows."""
    stream.write(_line(fieldnames))
    for row in rows:
        stream.write(_line(_format_value(row.get(name)) for name in fieldnames))


def negotiate_export(accept: str | None) -> str:
    """Pick the export format named by an Accept header.

    JSON wins over CSV; raises UnsupportedMediaType when neither is named.
    """
    accept = accept or ""
    if JSON_TYPE in accept:
        return JSON_TYPE
    if CSV_TYPE in accept:
        return CSV_TYPE
    raise UnsupportedMediaType(accept)