from __future__ import annotations

import logging

import discord
from discord import app_commands
from discord.ext import commands

from roles_bot import runtime
from roles_bot.errors import ExternalCallFailed, NotFound

from .. import register_cog

logger = logging.getLogger(__name__)


def _parse_message_id(raw: str) -> int | None:
    # Accept a bare id or a full message link.
    tail = raw.strip().rstrip("/").rsplit("/", 1)[-1]
    return int(tail) if tail.isdigit() else None


@register_cog
class Bindings(commands.Cog):
    """
    Inspect and remove reaction-role messages.

    Both commands are limited to members with Manage Roles and only see
    bindings that belong to the guild they run in.
    """

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="bindings", description="Show the reaction roles on a message.")
    @app_commands.describe(message="Message id or link")
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_roles=True)
    async def bindings(self, interaction: discord.Interaction, message: str) -> None:
        message_id = _parse_message_id(message)
        rt = runtime.current()
        try:
            if message_id is None:
                raise NotFound(0)
            binding_set = await rt.store.get(message_id)
            if binding_set.guild_id != interaction.guild_id:
                raise NotFound(message_id)
        except NotFound:
            await interaction.response.send_message("That message has no reaction roles.", ephemeral=True)
            return

        lines = [f"{b.emoji} → <@&{b.role_id}>" for b in binding_set.bindings]
        await interaction.response.send_message(
            "\n".join(lines),
            ephemeral=True,
            allowed_mentions=discord.AllowedMentions.none(),
        )

    @app_commands.command(name="unregister", description="Stop a message from handing out roles.")
    @app_commands.describe(message="Message id or link")
    @app_commands.guild_only()
    @app_commands.default_permissions(manage_roles=True)
    async def unregister(self, interaction: discord.Interaction, message: str) -> None:
        """Remove the message's bindings, then take the bot's reactions off it."""

        message_id = _parse_message_id(message)
        rt = runtime.current()
        binding_set = None
        if message_id is not None and message_id in rt.store:
            current = await rt.store.get(message_id)
            if current.guild_id == interaction.guild_id:
                binding_set = await rt.store.remove(message_id)

        if binding_set is None:
            await interaction.response.send_message("That message has no reaction roles.", ephemeral=True)
            return

        await interaction.response.send_message("Reaction roles removed.", ephemeral=True)
        for emoji in binding_set.emojis:
            try:
                await rt.platform.remove_reaction(binding_set.channel_id, binding_set.message_id, emoji)
            except ExternalCallFailed as exc:
                logger.warning(
                    "Could not remove %s from message %s: %s", emoji, message_id, exc.describe()
                )
