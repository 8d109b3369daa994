"""
Auto-roles: roles every new member receives on joining a guild.

Configured through ``<trigger> autorole ...``; roles are given by name, id,
mention or ``{ROLE:...}`` token and resolved with the same rules as setup
messages.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, List

from roles_bot.binding.resolver import RoleIndex, resolve_all
from roles_bot.binding.tokens import parse_tokens, reference_for
from roles_bot.errors import ExternalCallFailed

if TYPE_CHECKING:
    from roles_bot.clients.platform import Platform
    from roles_bot.memory.settings import AutoRoleSettings

logger = logging.getLogger(__name__)

_ROLE_MENTION_RE = re.compile(r"^<@&(\d+)>$")


def _references(args: str):
    tokens = parse_tokens(args)
    if tokens:
        return tokens
    refs = []
    for word in args.split():
        match = _ROLE_MENTION_RE.match(word)
        refs.append(reference_for(match.group(1) if match else word))
    return refs


async def configure(
    settings: "AutoRoleSettings",
    platform: "Platform",
    guild_id: int,
    args: str,
    *,
    max_roles: int,
) -> str:
    """Apply an ``autorole`` command and return the reply text."""

    args = args.strip()
    if args.lower() == "clear":
        await settings.clear(guild_id)
        return "Auto roles cleared!"

    index = RoleIndex(await platform.list_guild_roles(guild_id))

    if not args:
        current = await settings.get(guild_id)
        if not current:
            return "No auto roles configured."
        names = [f"`{index.name_of(rid) or rid}`" for rid in current]
        return "Current auto roles:\n" + "\n".join(names)

    role_ids, errors = resolve_all(_references(args), index)
    if errors:
        return "Auto roles not changed:\n" + "\n".join(f"- {err.describe()}" for err in errors)
    if len(role_ids) > max_roles:
        return f"No more than {max_roles} auto roles!"

    await settings.set(guild_id, role_ids)
    logger.info("Auto roles for guild %s set to %s", guild_id, role_ids)
    return "Auto roles set!"


async def apply_on_join(
    settings: "AutoRoleSettings", platform: "Platform", guild_id: int, user_id: int
) -> List[int]:
    """Grant the guild's auto roles to a new member; returns the granted ids."""

    granted: List[int] = []
    for role_id in await settings.get(guild_id):
        try:
            await platform.grant_role(guild_id, user_id, role_id)
        except ExternalCallFailed as exc:
            logger.warning(
                "Auto role %s for user %s in guild %s failed: %s",
                role_id,
                user_id,
                guild_id,
                exc.describe(),
            )
            continue
        granted.append(role_id)
    if granted:
        logger.info("Granted auto roles %s to user %s in guild %s", granted, user_id, guild_id)
    return granted
