"""
Role resolution
===============

Turns parsed :class:`RoleReference` values into concrete role ids against a
snapshot of one guild's roles. Names match case-insensitively and exactly;
ids must exist in the snapshot. :func:`resolve_all` collects every failure
instead of stopping at the first one and collapses references that land on
the same role.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Sequence, Tuple

from roles_bot.errors import (
    AmbiguousRoleName,
    ResolutionError,
    UnknownRoleId,
    UnknownRoleName,
)

from .models import GuildRole, ReferenceKind, RoleReference

logger = logging.getLogger(__name__)


class RoleIndex:
    """Lookup tables over a guild's role list."""

    def __init__(self, roles: Iterable[GuildRole]) -> None:
        self._by_id: Dict[int, GuildRole] = {}
        self._by_name: Dict[str, List[int]] = {}
        for role in roles:
            self._by_id[role.id] = role
            self._by_name.setdefault(role.name.casefold(), []).append(role.id)

    def __contains__(self, role_id: int) -> bool:
        return role_id in self._by_id

    def name_of(self, role_id: int) -> str | None:
        role = self._by_id.get(role_id)
        return role.name if role else None

    def resolve(self, ref: RoleReference) -> int:
        """Return the role id for ``ref`` or raise a :class:`ResolutionError`."""

        if ref.kind is ReferenceKind.BY_ID:
            role_id = int(ref.value)
            if role_id not in self._by_id:
                raise UnknownRoleId(ref.value)
            return role_id

        matches = self._by_name.get(ref.value.casefold(), [])
        if not matches:
            raise UnknownRoleName(ref.value)
        if len(matches) > 1:
            raise AmbiguousRoleName(ref.value, sorted(matches))
        return matches[0]


def resolve_all(
    refs: Sequence[RoleReference], roles: Iterable[GuildRole] | RoleIndex
) -> Tuple[List[int], List[ResolutionError]]:
    """
    Resolve ``refs`` in order.

    :returns: ``(role_ids, errors)``; ``role_ids`` is deduplicated keeping the
        first occurrence, ``errors`` holds one entry per failed reference.
    """

    index = roles if isinstance(roles, RoleIndex) else RoleIndex(roles)
    role_ids: List[int] = []
    seen: set[int] = set()
    errors: List[ResolutionError] = []

    for ref in refs:
        try:
            role_id = index.resolve(ref)
        except ResolutionError as exc:
            errors.append(exc)
            continue
        if role_id in seen:
            logger.debug("Dropping repeated reference %r (role %s)", ref.value, role_id)
            continue
        seen.add(role_id)
        role_ids.append(role_id)

    return role_ids, errors


__all__ = ["RoleIndex", "resolve_all"]
