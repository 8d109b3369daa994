"""Discord bot bootstrap utilities."""

from __future__ import annotations

import logging

import discord
from discord.ext import commands as discord_commands

from roles_bot import commands as rb_commands
from roles_bot import runtime
from roles_bot.binding.reconciler import ReactionAction
from roles_bot.clients.platform import DiscordPlatform
from roles_bot.config import core
from roles_bot.event_hooks import (
    delete_hook,
    member_hook,
    message_hook,
    reaction_hook,
    ready_hook,
)

logger = logging.getLogger(__name__)

# --- Intents --------------------------------------------------------------- #
intents = discord.Intents.default()
intents.members = True
intents.message_content = True


class RolesBot(discord_commands.Bot):
    """Reaction-role bot with slash command support."""

    def __init__(self) -> None:
        super().__init__(command_prefix=discord_commands.when_mentioned, intents=intents)

    async def setup_hook(self) -> None:
        """Open the binding store, register slash commands and sync them."""

        await runtime.init(DiscordPlatform(self))
        await rb_commands.setup(self)

        try:
            synced = await self.tree.sync()
            logger.info("Synced %d application command(s)", len(synced))
        except Exception:
            logger.exception("Failed to sync application commands")

    async def close(self) -> None:
        # Drain queued setups and reactions while the connection still works.
        await runtime.teardown()
        await super().close()


bot = RolesBot()


@bot.event
async def on_ready() -> None:
    await ready_hook.handle(bot)


@bot.event
async def on_message(message: discord.Message) -> None:
    await message_hook.handle(bot, message)


@bot.event
async def on_raw_reaction_add(payload: discord.RawReactionActionEvent) -> None:
    await reaction_hook.handle(bot, payload, ReactionAction.ADDED)


@bot.event
async def on_raw_reaction_remove(payload: discord.RawReactionActionEvent) -> None:
    await reaction_hook.handle(bot, payload, ReactionAction.REMOVED)


@bot.event
async def on_raw_message_delete(payload: discord.RawMessageDeleteEvent) -> None:
    await delete_hook.handle(bot, payload)


@bot.event
async def on_raw_bulk_message_delete(payload: discord.RawBulkMessageDeleteEvent) -> None:
    await delete_hook.handle_bulk(bot, payload)


@bot.event
async def on_member_join(member: discord.Member) -> None:
    await member_hook.handle(bot, member)


def run() -> None:
    """Start the Discord bot using configuration from the environment."""

    if not core.DISCORD_API_TOKEN:
        logger.error("No DISCORD_API_TOKEN configured. Cannot run client.")
        return

    try:
        bot.run(core.DISCORD_API_TOKEN, log_handler=None)
    except discord.LoginFailure as exc:
        logger.error("Login failed: %s", exc)
