"""Permission checks against the access list and URL labels for metrics."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

_READ_WRITE = frozenset({"patch:*:*", "patch:system:*"})
_READ = frozenset({"patch:*:read", "patch:system:read"})
_WRITE = frozenset({"patch:*:write", "patch:system:write"})

_READ_METHODS = frozenset({"GET", "POST"})
_WRITE_METHODS = frozenset({"DELETE", "PUT"})

ACCESS_DENIED_MSG = "You don't have access to this application"


@dataclass(frozen=True)
class Permissions:
    """Read and write access granted to a caller."""

    read: bool = False
    write: bool = False


def _permission_of(item: Any) -> str:
    if isinstance(item, Mapping):
        return str(item.get("permission", ""))
    return str(item)


def permissions_from_access(access_list: Iterable[Any]) -> Permissions:
    """Combine access entries (strings or ``{"permission": ...}``) into permissions."""
    read = write = False
    for item in access_list:
        permission = _permission_of(item)
        if permission in _READ_WRITE:
            read = write = True
        elif permission in _READ:
            read = True
        elif permission in _WRITE:
            write = True
    return Permissions(read=read, write=write)


def is_method_allowed(method: str, perms: Permissions) -> bool:
    """Tell whether *perms* allow an HTTP *method*: reads need read, changes write."""
    if method in _READ_METHODS:
        return perms.read
    if method in _WRITE_METHODS:
        return perms.write
    return False


def unify_url(path: str, params: Sequence[tuple[str, str]]) -> str:
    """Replace route parameter values in *path* with ``:name`` placeholders."""
    for key, value in params:
        path = path.replace(f"/{value}", f"/:{key}", 1)
    return path