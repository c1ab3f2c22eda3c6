"""Pagination links and list metadata."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from patchman.filters import FilterData


def _trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(a) // abs(b)
    return -quotient if (a < 0) != (b < 0) else quotient


@dataclass
class Links:
    """Links to the first, last, next and previous pages."""

    first: str
    last: str
    next: str | None = None
    previous: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "first": self.first,
            "last": self.last,
            "next": self.next,
            "previous": self.previous,
        }


@dataclass
class ListMeta:
    """Metadata describing one page of a list response."""

    limit: int
    offset: int
    total_items: int = 0
    filter: dict[str, FilterData] | None = None
    sort: list[str] | None = None
    search: str = ""
    subtotals: dict[str, int] | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"limit": self.limit, "offset": self.offset}
        if self.sort:
            result["sort"] = list(self.sort)
        if self.search:
            result["search"] = self.search
        result["filter"] = (
            None
            if self.filter is None
            else {key: asdict(value) for key, value in self.filter.items()}
        )
        result["total_items"] = self.total_items
        if self.subtotals:
            result["subtotals"] = dict(self.subtotals)
        return result


@dataclass(frozen=True)
class Pager:
    """Builds page links for a given position in a result set."""

    path: str
    offset: int
    limit: int
    total: int
    other_params: str = ""

    def create_link(self, link_offset: int) -> str:
        return f"{self.path}?offset={link_offset}&limit={self.limit}{self.other_params}"

    def last_link(self) -> str:
        last_offset = (_trunc_div(self.total, self.limit) - 1) * self.limit
        return self.create_link(max(last_offset, 0))

    def next_link(self) -> str | None:
        if self.total <= self.offset + self.limit:
            return None
        return self.create_link(self.offset + self.limit)

    def previous_link(self) -> str | None:
        if self.offset == 0:
            return None
        current_page = _trunc_div(self.offset, self.limit)
        prev_offset = (current_page - 1) * self.limit if current_page > 0 else 0
        return self.create_link(prev_offset)


def create_links(path: str, offset: int, limit: int, total: int, *args: str) -> Links:
    """Build the page links, appending every non-empty extra query parameter."""
    other_params = "".join(f"&{param}" for param in args if param)
    pager = Pager(path, offset, limit, total, other_params)
    return Links(
        first=pager.create_link(0),
        last=pager.last_link(),
        next=pager.next_link(),
        previous=pager.previous_link(),
    )