"""Nested query parameters such as ``filter[a][b]=value``."""

from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from typing import Union
from urllib.parse import parse_qsl, urlsplit

Path = tuple[str, ...]


class QueryList(list):
    """Leaf of a nested query: the values given for one parameter."""

    def walk(self, prefix: Sequence[str] = ()) -> Iterator[tuple[Path, str]]:
        """Yield ``(path, value)`` for every value."""
        path = tuple(prefix)
        for item in self:
            yield path, item


QueryItem = Union["QueryMap", QueryList]


class QueryMap(dict):
    """Inner node of a nested query, keyed by bracket segments."""

    def walk(self, prefix: Sequence[str] = ()) -> Iterator[tuple[Path, str]]:
        """Yield ``(path, value)`` for every leaf value below this node."""
        for key, child in self.items():
            yield from child.walk((*prefix, key))

    def get_path(self, *args: str) -> tuple[QueryItem | None, bool]:
        """Follow *args* down the tree; return the item found and whether it exists."""
        item: QueryItem = self
        for key in args:
            if not isinstance(item, QueryMap) or key not in item:
                return None, False
            item = item[key]
        return item, True

    def path(self, *args: str) -> QueryItem | None:
        """Return the item at *args*, or None if there is none."""
        return self.get_path(*args)[0]

    def append_value(self, steps: Sequence[str], value: Sequence[str]) -> None:
        """Store *value* as the leaf reached by *steps*, creating inner nodes."""
        if not steps:
            return
        node = self
        *inner, last = steps
        for step in inner:
            child = node.setdefault(step, QueryMap())
            if not isinstance(child, QueryMap):
                raise ValueError(f"query parameter segment {step!r} already holds values")
            node = child
        node[last] = QueryList(value)


def nested_query(values: Mapping[str, Sequence[str]], key: str) -> QueryMap:
    """Build the tree of parameters named ``key[a][b]...`` from *values*.

    Empty ``[]`` segments are skipped. Parsing stops, returning what was
    collected so far, at the first bracketed parameter of another name.
    """
    root = QueryMap()
    for name, value in values.items():
        steps: list[str] = []
        rest = name
        while rest:
            open_at = rest.find("[")
            if open_at < 0:
                break
            if rest[:open_at] != key and not steps:
                return root
            close_at = rest.find("]", open_at + 1)
            if close_at < 0:
                break
            segment = rest[open_at + 1:close_at]
            if segment:
                steps.append(segment)
            rest = rest[close_at + 1:]
        root.append_value(steps, value)
    return root


def nested_query_from_url(url: str, key: str) -> QueryMap:
    """Build the nested query tree for *key* from the query string of *url*."""
    grouped: dict[str, list[str]] = {}
    for name, val in parse_qsl(urlsplit(url).query, keep_blank_values=True):
        grouped.setdefault(name, []).append(val)
    return nested_query(grouped, key)