"""Value types shared by the binding engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class ReferenceKind(Enum):
    BY_ID = "id"
    BY_NAME = "name"


@dataclass(frozen=True)
class RoleReference:
    """One ``{ROLE:...}`` token as written in a message."""

    kind: ReferenceKind
    value: str


@dataclass(frozen=True)
class GuildRole:
    """The slice of a guild role the resolver needs."""

    id: int
    name: str


@dataclass(frozen=True)
class ResolvedBinding:
    emoji: str
    role_id: int


@dataclass(frozen=True)
class BindingSet:
    """
    All bindings attached to one message.

    Emojis are pairwise distinct and so are role ids; construction enforces
    both so an invalid set can never reach the store.
    """

    guild_id: int
    channel_id: int
    message_id: int
    bindings: Tuple[ResolvedBinding, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "bindings", tuple(self.bindings))
        emojis = [b.emoji for b in self.bindings]
        role_ids = [b.role_id for b in self.bindings]
        if len(set(emojis)) != len(emojis):
            raise ValueError(f"duplicate emoji in bindings for message {self.message_id}")
        if len(set(role_ids)) != len(role_ids):
            raise ValueError(f"duplicate role in bindings for message {self.message_id}")

    @property
    def emojis(self) -> Tuple[str, ...]:
        return tuple(b.emoji for b in self.bindings)


__all__ = [
    "ReferenceKind",
    "RoleReference",
    "GuildRole",
    "ResolvedBinding",
    "BindingSet",
]
