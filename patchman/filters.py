"""Filter values attached to list requests."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class FilterData:
    """A filter operator together with the values it applies to."""

    operator: str
    values: list[str] = field(default_factory=list)


def append_filter_data(
    filters: dict[str, FilterData], key: str, op: str, val: str
) -> None:
    """Add *val* to the filter stored under *key*, creating the filter if absent.

    A new filter splits *val* on commas; an existing filter keeps its operator
    and takes *val* whole.
    """
    existing = filters.get(key)
    if existing is None:
        filters[key] = FilterData(op, val.split(","))
    else:
        filters[key] = FilterData(existing.operator, [*existing.values, val])


def merge_filters(
    first: dict[str, FilterData], second: dict[str, FilterData]
) -> dict[str, FilterData]:
    """Copy every entry of *second* into *first*, overriding equal keys."""
    first.update(second)
    return first