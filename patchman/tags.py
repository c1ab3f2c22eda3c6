"""Tag and system-profile filters for system lists."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from patchman.filters import FilterData, append_filter_data
from patchman.querymap import QueryMap

INVALID_TAG_MSG = "Invalid tag '%s'. Use 'namespace/key=val format'"

_TAG_RE = re.compile(r"([^/=]+)/([^/=]+)(=([^/=]+))?")

_PROFILE_FILTERS = frozenset(
    {
        "sap_sids",
        "sap_system",
        "mssql",
        "mssql->version",
        "ansible",
        "ansible->controller_version",
    }
)

_HOSTS_SUBQUERY = "SELECT h.id FROM inventory.hosts h"


class InvalidTagError(ValueError):
    """Raised when a tag does not have the ``namespace/key=value`` form."""

    def __init__(self, tag: str) -> None:
        super().__init__(INVALID_TAG_MSG % tag)
        self.tag = tag


@dataclass(frozen=True)
class Tag:
    """A host tag; namespace and value are optional."""

    namespace: str | None
    key: str
    value: str | None = None

    def sql_condition(self) -> tuple[str, str]:
        """Return the condition on ``h.tags`` and its JSON parameter."""
        ns = f'"namespace": "{self.namespace}",' if self.namespace is not None else ""
        value = f', "value":"{self.value}"' if self.value is not None else ""
        return "h.tags @> ?::jsonb", f'[{{{ns} "key": "{self.key}" {value}}}]'


def parse_tag(tag: str) -> Tag:
    """Parse ``namespace/key[=value]``; a namespace of ``null`` means none."""
    match = _TAG_RE.search(tag)
    if match is None:
        raise InvalidTagError(tag)
    namespace = match.group(1)
    value = match.group(4) or None
    return Tag(
        namespace=None if namespace.lower() == "null" else namespace,
        key=match.group(2),
        value=value,
    )


def build_profile_query(key: str, val: str) -> str:
    """Build the condition on ``h.system_profile`` for a ``a->b->c`` key."""
    if val == "not_nil":
        cmp = " is not null"
    elif key == "sap_sids":
        cmp = "::jsonb @> ?::jsonb"
    else:
        cmp = "::text = ?"

    *inner, last = key.split("->")
    expr = "(h.system_profile"
    for part in inner:
        expr += f" -> '{part}'"
    expr += f" ->> '{last}')"
    return expr + cmp


def parse_tags(tags: Iterable[str], filters: dict[str, FilterData]) -> None:
    """Add an ``eq`` filter to *filters* for every tag in *tags*."""
    for raw in tags:
        tag = parse_tag(raw)
        key = tag.key if tag.namespace is None else f"{tag.namespace}/{tag.key}"
        values = tag.value.split(",") if tag.value is not None else []
        filters[key] = FilterData("eq", values)


def parse_system_profile_filters(
    query_map: QueryMap, filters: dict[str, FilterData]
) -> None:
    """Add filters for every ``filter[system_profile][...]`` parameter."""
    profile = query_map.path("system_profile")
    if profile is None:
        return
    for path, val in profile.walk():
        if path and path[0] == "sap_sids":
            op = path[1] if len(path) > 1 else "eq"
            append_filter_data(filters, "sap_sids", op, f'"{val}"')
        else:
            append_filter_data(filters, "->".join(path), "eq", val)


def parse_tags_filters(
    tags: Iterable[str], query_map: QueryMap
) -> dict[str, FilterData]:
    """Collect tag filters and system-profile filters of one request."""
    filters: dict[str, FilterData] = {}
    parse_tags(tags, filters)
    parse_system_profile_filters(query_map, filters)
    return filters


def tags_filter_conditions(
    filters: Mapping[str, FilterData], system_id_expr: str
) -> tuple[str, list[str]] | None:
    """Build the condition restricting systems to hosts matching *filters*.

    Returns the SQL condition with ``?`` placeholders and its parameters,
    or None when no filter concerns tags or the system profile.
    """
    conditions: list[str] = []
    params: list[str] = []
    applied = False

    for key, data in filters.items():
        if "/" in key:
            applied = True
            try:
                tag = parse_tag(f"{key}={','.join(data.values)}")
            except InvalidTagError:
                continue
            condition, param = tag.sql_condition()
            conditions.append(condition)
            params.append(param)
        elif key in _PROFILE_FILTERS:
            applied = True
            values = ",".join(data.values)
            condition = build_profile_query(key, values)
            if len(data.values) > 1:
                values = f"[{values}]"
            conditions.append(condition)
            if values != "not_nil":
                params.append(values)

    if not applied:
        return None
    subquery = _HOSTS_SUBQUERY
    if conditions:
        subquery += " WHERE " + " AND ".join(conditions)
    return f"{system_id_expr}::uuid in ({subquery})", params


def extract_tags_query_string(tags: Iterable[str]) -> str:
    """Rebuild the ``tags=...`` query string, latest tag first."""
    query = ""
    for tag in tags:
        query = f"tags={tag}&{query}"
    return query[:-1] if query.endswith("&") else query


def has_tags(tags: Iterable[str], query_map: QueryMap, enabled: bool) -> bool:
    """Tell whether a request filters by tags or system profile."""
    if not enabled:
        return False
    if list(tags):
        return True
    profile = query_map.path("system_profile")
    return profile is not None and any(True for _ in profile.walk())