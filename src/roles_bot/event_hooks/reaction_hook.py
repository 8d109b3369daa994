"""
Forward raw reaction events on bound messages to the reconciler.
"""

from __future__ import annotations

import logging

import discord

from roles_bot import runtime
from roles_bot.binding.reconciler import ReactionAction, ReactionEvent

logger = logging.getLogger(__name__)


def emoji_key(emoji: discord.PartialEmoji | str) -> str:
    """Unicode emojis by glyph, custom emojis by their ``<:name:id>`` form."""
    if isinstance(emoji, str):
        return emoji
    if emoji.is_unicode_emoji():
        return emoji.name
    return str(emoji)


async def handle(
    client: discord.Client,
    payload: discord.RawReactionActionEvent,
    action: ReactionAction,
) -> None:
    """Queue a reconcile job for reactions on messages that have bindings."""

    if payload.guild_id is None:
        return
    if client.user is not None and payload.user_id == client.user.id:
        return

    rt = runtime.current()
    # Cheap pre-filter; the reconciler looks the binding up again when it runs.
    # A message still being set up has no bindings yet but will shortly.
    if payload.message_id not in rt.store and not rt.pool.active(payload.message_id):
        return

    event = ReactionEvent(
        action=action,
        guild_id=payload.guild_id,
        channel_id=payload.channel_id,
        message_id=payload.message_id,
        user_id=payload.user_id,
        emoji=emoji_key(payload.emoji),
    )
    logger.debug("Queueing reaction %s on message %s", action.value, payload.message_id)

    async def _reconcile() -> None:
        await rt.reconciler.handle(event)

    # Per user so members react independently; after the message key so the
    # job waits for a running setup or delete of the same message.
    rt.pool.submit((payload.message_id, payload.user_id), _reconcile, after=payload.message_id)
