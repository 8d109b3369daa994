import logging

import discord

from roles_bot import runtime

logger = logging.getLogger(__name__)


async def handle(client: discord.Client):
    """Validate stored bindings the first time the gateway is ready."""
    logger.info(f"Logged in as {client.user.name} (ID: {client.user.id})")

    rt = runtime.current()
    await runtime.start_validation(rt)
