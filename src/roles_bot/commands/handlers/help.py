from __future__ import annotations

import discord
from discord import app_commands
from discord.ext import commands

from roles_bot.config import core
from roles_bot.constants import help_message

from .. import register_cog


@register_cog
class Help(commands.Cog):
    """Explain how to build a reaction-role message."""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @app_commands.command(name="help", description="How to set up reaction roles.")
    async def help(self, interaction: discord.Interaction) -> None:
        await interaction.response.send_message(help_message(core.TRIGGER), ephemeral=True)
