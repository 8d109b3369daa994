"""
Slash command cogs.

Handler modules in ``commands/handlers`` mark their cog with
:func:`register_cog`; importing this package imports every handler, and
:func:`setup` attaches the collected cogs during ``setup_hook``.
"""

from __future__ import annotations

import logging
from importlib import import_module
from pathlib import Path
from pkgutil import iter_modules
from typing import List, Type

from discord.ext import commands as commands_ext

logger = logging.getLogger(__name__)

_COG_CLASSES: List[Type[commands_ext.Cog]] = []


def register_cog(cog_cls: Type[commands_ext.Cog]) -> Type[commands_ext.Cog]:
    if not issubclass(cog_cls, commands_ext.Cog):
        raise TypeError("register_cog expects a discord.ext.commands.Cog subclass")
    _COG_CLASSES.append(cog_cls)
    return cog_cls


async def setup(bot: commands_ext.Bot) -> List[str]:
    """Attach every registered cog not already on ``bot``; returns their names."""

    attached: List[str] = []
    for cog_cls in _COG_CLASSES:
        if bot.get_cog(cog_cls.__name__):
            continue
        await bot.add_cog(cog_cls(bot))
        attached.append(cog_cls.__name__)

    logger.info("Attached command cogs: %s", ", ".join(attached) or "none")
    return attached


for _, _modname, _ in iter_modules([str(Path(__file__).resolve().parent / "handlers")]):
    if not _modname.startswith("_"):
        import_module(f"{__name__}.handlers.{_modname}")


__all__ = ["register_cog", "setup"]
