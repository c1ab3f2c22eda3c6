"""System/advisory pair views for selected systems and advisories."""

from __future__ import annotations

import json
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any


def _string_list(data: dict[str, Any], name: str) -> list[str]:
    value = data.get(name)
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"{name!r} must be a list of strings")
    return list(value)


@dataclass
class SystemsAdvisoriesRequest:
    """Body of a request naming the systems and advisories to pair."""

    systems: list[str] = field(default_factory=list)
    advisories: list[str] = field(default_factory=list)

    @classmethod
    def from_json(cls, body: str | bytes) -> SystemsAdvisoriesRequest:
        """Parse the request body; raise ValueError if it is invalid."""
        data = json.loads(body)
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError("request body must be a JSON object")
        return cls(
            systems=_string_list(data, "systems"),
            advisories=_string_list(data, "advisories"),
        )


def group_system_advisories(pairs: Iterable[tuple[str, str]]) -> dict[str, list[str]]:
    """Group ``(system, advisory)`` pairs by system, keeping their order."""
    result: dict[str, list[str]] = {}
    for system, advisory in pairs:
        result.setdefault(system, []).append(advisory)
    return result


def group_advisory_systems(pairs: Iterable[tuple[str, str]]) -> dict[str, list[str]]:
    """Group ``(system, advisory)`` pairs by advisory, keeping their order."""
    result: dict[str, list[str]] = {}
    for system, advisory in pairs:
        result.setdefault(advisory, []).append(system)
    return result