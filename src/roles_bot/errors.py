"""
Error taxonomy
==============

Every failure the binding engine can report is a :class:`RolesBotError`.
Resolution, allocation and store errors are user-correctable and end up in
a reply to the moderator (one line per error via :meth:`describe`); platform
failures are wrapped in :class:`ExternalCallFailed` so callers only have to
catch one type per external call.
"""

from __future__ import annotations

from typing import Sequence


class RolesBotError(Exception):
    """Base class for all reportable errors."""

    def describe(self) -> str:
        return str(self)


class ResolutionError(RolesBotError):
    """A role reference could not be turned into a role id."""

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(reference)


class UnknownRoleId(ResolutionError):
    def describe(self) -> str:
        return f"No role with id `{self.reference}` exists in this server."


class UnknownRoleName(ResolutionError):
    def describe(self) -> str:
        return f"No role named `{self.reference}` exists in this server."


class AmbiguousRoleName(ResolutionError):
    def __init__(self, reference: str, role_ids: Sequence[int]) -> None:
        super().__init__(reference)
        self.role_ids = tuple(role_ids)

    def describe(self) -> str:
        ids = ", ".join(str(rid) for rid in self.role_ids)
        return (
            f"Role name `{self.reference}` matches {len(self.role_ids)} roles ({ids}); "
            "use `{ROLE:<id>}` instead."
        )


class PaletteExhausted(RolesBotError):
    def __init__(self, requested: int, available: int) -> None:
        self.requested = requested
        self.available = available
        super().__init__(requested, available)

    def describe(self) -> str:
        return (
            f"Too many roles: {self.requested} requested but only "
            f"{self.available} fit on one message."
        )


class DuplicateMessage(RolesBotError):
    def __init__(self, message_id: int) -> None:
        self.message_id = message_id
        super().__init__(message_id)

    def describe(self) -> str:
        return f"Message {self.message_id} is already a role message."


class NotFound(RolesBotError):
    """A binding set, or an emoji within one, does not exist."""

    def __init__(self, message_id: int, emoji: str | None = None) -> None:
        self.message_id = message_id
        self.emoji = emoji
        super().__init__(message_id, emoji)

    def describe(self) -> str:
        if self.emoji is None:
            return f"Message {self.message_id} has no role bindings."
        return f"Message {self.message_id} has no binding for {self.emoji}."


class StoreFailed(RolesBotError):
    """The binding store could not complete a write."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)

    def describe(self) -> str:
        return f"Could not save the role bindings: {self.reason}"


class ExternalCallFailed(RolesBotError):
    """A call into the chat platform failed (transport, permission, missing object)."""

    def __init__(self, operation: str, reason: str) -> None:
        self.operation = operation
        self.reason = reason
        super().__init__(operation, reason)

    def describe(self) -> str:
        return f"Could not {self.operation}: {self.reason}"


__all__ = [
    "RolesBotError",
    "ResolutionError",
    "UnknownRoleId",
    "UnknownRoleName",
    "AmbiguousRoleName",
    "PaletteExhausted",
    "DuplicateMessage",
    "NotFound",
    "StoreFailed",
    "ExternalCallFailed",
]
