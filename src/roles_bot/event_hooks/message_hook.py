import logging

import discord

from roles_bot import autoroles, runtime
from roles_bot.binding.orchestrator import SetupRequest
from roles_bot.binding.tokens import parse_tokens
from roles_bot.config import core
from roles_bot.constants import NO_PERMISSION_MESSAGE, help_message
from roles_bot.errors import ExternalCallFailed

logger = logging.getLogger(__name__)

_AUTOROLE_COMMANDS = ("autorole", "auto")


def strip_trigger(content: str, bot_user_id: int | None = None) -> str | None:
    """
    Return the text after the trigger, or ``None`` if ``content`` is not
    addressed to the bot. The configured trigger and a leading mention of the
    bot both count.
    """

    text = (content or "").lstrip()
    prefixes = [core.TRIGGER]
    if bot_user_id is not None:
        prefixes += [f"<@{bot_user_id}>", f"<@!{bot_user_id}>"]

    for prefix in prefixes:
        head = text[: len(prefix)]
        if head.lower() != prefix.lower():
            continue
        rest = text[len(prefix) :]
        if rest and not rest[0].isspace():
            continue  # "@rolesfoo" is not the trigger
        return rest.strip()
    return None


def _can_manage_roles(author) -> bool:
    perms = getattr(author, "guild_permissions", None)
    return bool(perms and (perms.manage_roles or perms.administrator))


async def _reply(rt: runtime.Runtime, message: discord.Message, content: str) -> None:
    try:
        await rt.platform.send_message(message.channel.id, content, reply_to=message.id)
    except ExternalCallFailed as exc:
        logger.warning("Could not reply to message %s: %s", message.id, exc.describe())


async def handle(client: discord.Client, message: discord.Message):
    """Handle incoming Discord messages."""

    # DMs carry no guild roles; other bots (and ourselves) never drive setup.
    if message.guild is None or message.author.bot:
        return

    bot_user_id = client.user.id if client.user else None
    rest = strip_trigger(message.content, bot_user_id)
    if rest is None:
        return

    rt = runtime.current()
    logger.info(
        "Command from %s in guild %s (message %s)",
        message.author.id,
        message.guild.id,
        message.id,
    )

    parts = rest.split(maxsplit=1)
    command = parts[0].lower() if parts else ""
    args = parts[1] if len(parts) > 1 else ""
    is_autorole = command in _AUTOROLE_COMMANDS

    # No role tokens means the user wants help.
    if not is_autorole and not parse_tokens(rest):
        await _reply(rt, message, help_message(core.TRIGGER))
        return

    if not _can_manage_roles(message.author):
        await _reply(rt, message, NO_PERMISSION_MESSAGE)
        return

    if is_autorole:
        guild_id = message.guild.id

        async def _autorole() -> None:
            try:
                reply = await autoroles.configure(
                    rt.auto_roles, rt.platform, guild_id, args, max_roles=core.MAX_AUTO_ROLES
                )
            except ExternalCallFailed as exc:
                reply = exc.describe()
            await _reply(rt, message, reply)

        rt.pool.submit(("autorole", guild_id), _autorole)
        return

    request = SetupRequest(
        guild_id=message.guild.id,
        channel_id=message.channel.id,
        message_id=message.id,
        author_id=message.author.id,
        text=rest,
    )

    async def _setup() -> None:
        result = await rt.orchestrator.run(request)
        await _reply(rt, message, result.report())

    rt.pool.submit(message.id, _setup)
