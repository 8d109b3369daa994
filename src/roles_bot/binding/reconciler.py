"""
Reaction reconciliation
=======================

Maps a reaction add/remove on a bound message to a role grant/revoke.
Unbound messages and emojis are ignored. Grants and revokes are idempotent
on the platform side, so replayed or duplicated events need no extra
bookkeeping here. Failures are logged and, best effort, sent to the user;
they are never retried, reacting again is the retry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from roles_bot.errors import ExternalCallFailed, NotFound

if TYPE_CHECKING:
    from roles_bot.clients.platform import Platform
    from roles_bot.memory.bindings import BindingStore

logger = logging.getLogger(__name__)


class ReactionAction(Enum):
    ADDED = "added"
    REMOVED = "removed"


@dataclass(frozen=True)
class ReactionEvent:
    action: ReactionAction
    guild_id: int
    channel_id: int
    message_id: int
    user_id: int
    emoji: str


class ReconcileOutcome(Enum):
    IGNORED = "ignored"
    GRANTED = "granted"
    REVOKED = "revoked"
    FAILED = "failed"


class ReactionReconciler:
    def __init__(self, store: "BindingStore", platform: "Platform", *, notify_users: bool = True) -> None:
        self.store = store
        self.platform = platform
        self.notify_users = notify_users

    async def handle(self, event: ReactionEvent) -> ReconcileOutcome:
        if event.user_id == self.platform.user_id:
            return ReconcileOutcome.IGNORED

        try:
            role_id = await self.store.find_role(event.message_id, event.emoji)
        except NotFound:
            logger.debug(
                "No binding for %s on message %s; ignoring", event.emoji, event.message_id
            )
            return ReconcileOutcome.IGNORED

        try:
            if event.action is ReactionAction.ADDED:
                await self.platform.grant_role(event.guild_id, event.user_id, role_id)
                outcome = ReconcileOutcome.GRANTED
            else:
                await self.platform.revoke_role(event.guild_id, event.user_id, role_id)
                outcome = ReconcileOutcome.REVOKED
        except ExternalCallFailed as exc:
            logger.warning(
                "Reaction %s by %s on message %s: %s",
                event.action.value,
                event.user_id,
                event.message_id,
                exc.describe(),
            )
            await self._notify(event, exc)
            return ReconcileOutcome.FAILED

        logger.info(
            "Role %s %s for user %s via message %s",
            role_id,
            outcome.value,
            event.user_id,
            event.message_id,
        )
        return outcome

    async def _notify(self, event: ReactionEvent, exc: ExternalCallFailed) -> None:
        if not self.notify_users:
            return
        try:
            await self.platform.send_direct(
                event.user_id, f"I couldn't update your roles: {exc.describe()}"
            )
        except ExternalCallFailed as dm_exc:
            logger.debug("Could not DM user %s: %s", event.user_id, dm_exc.describe())


__all__ = ["ReactionAction", "ReactionEvent", "ReconcileOutcome", "ReactionReconciler"]
