import logging

import discord

from roles_bot import autoroles, runtime

logger = logging.getLogger(__name__)


async def handle(client: discord.Client, member: discord.Member):
    """Hand configured auto roles to a member who just joined."""

    if member.bot:
        return

    rt = runtime.current()
    guild_id = member.guild.id

    async def _apply() -> None:
        await autoroles.apply_on_join(rt.auto_roles, rt.platform, guild_id, member.id)

    rt.pool.submit(("join", guild_id, member.id), _apply)
