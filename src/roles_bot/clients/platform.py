"""
Chat-platform boundary
======================

:class:`Platform` is everything the binding engine asks of the chat service.
:class:`DiscordPlatform` implements it on top of a connected
:class:`discord.Client`; every discord.py failure (HTTP errors, permission
errors, objects missing from cache) surfaces as
:class:`~roles_bot.errors.ExternalCallFailed`.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Protocol

import discord

from roles_bot.binding.models import GuildRole
from roles_bot.errors import ExternalCallFailed

logger = logging.getLogger(__name__)


class Platform(Protocol):
    @property
    def user_id(self) -> int | None: ...

    async def list_guild_roles(self, guild_id: int) -> List[GuildRole]: ...

    async def add_reaction(self, channel_id: int, message_id: int, emoji: str) -> None: ...

    async def remove_reaction(
        self, channel_id: int, message_id: int, emoji: str, user_id: int | None = None
    ) -> None: ...

    async def grant_role(self, guild_id: int, user_id: int, role_id: int) -> None: ...

    async def revoke_role(self, guild_id: int, user_id: int, role_id: int) -> None: ...

    async def send_message(
        self, channel_id: int, content: str, *, reply_to: int | None = None
    ) -> None: ...

    async def send_direct(self, user_id: int, content: str) -> None: ...

    async def message_exists(self, channel_id: int, message_id: int) -> bool: ...


class DiscordPlatform:
    """:class:`Platform` backed by discord.py."""

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    @property
    def user_id(self) -> int | None:
        user = self.client.user
        return user.id if user else None

    # --- lookups ----------------------------------------------------------- #

    def _guild(self, guild_id: int, operation: str) -> discord.Guild:
        guild = self.client.get_guild(guild_id)
        if guild is None:
            raise ExternalCallFailed(operation, f"guild {guild_id} is not available")
        return guild

    def _role(self, guild: discord.Guild, role_id: int, operation: str) -> discord.Role:
        # Current guild state wins over whatever was true at setup time.
        role = guild.get_role(role_id)
        if role is None:
            raise ExternalCallFailed(operation, f"role {role_id} no longer exists")
        return role

    async def _member(self, guild: discord.Guild, user_id: int, operation: str) -> discord.Member:
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.NotFound:
            raise ExternalCallFailed(operation, f"user {user_id} is not in the server") from None
        except discord.HTTPException as exc:
            raise ExternalCallFailed(operation, str(exc)) from exc

    async def _messageable(self, channel_id: int, operation: str) -> discord.abc.Messageable:
        channel = self.client.get_channel(channel_id)
        if channel is None:
            try:
                channel = await self.client.fetch_channel(channel_id)
            except discord.HTTPException as exc:
                raise ExternalCallFailed(operation, str(exc)) from exc
        if not hasattr(channel, "get_partial_message"):
            raise ExternalCallFailed(operation, f"channel {channel_id} has no messages")
        return channel

    # --- Platform ---------------------------------------------------------- #

    async def list_guild_roles(self, guild_id: int) -> List[GuildRole]:
        guild = self._guild(guild_id, "list roles")
        return [GuildRole(id=role.id, name=role.name) for role in guild.roles if not role.is_default()]

    async def add_reaction(self, channel_id: int, message_id: int, emoji: str) -> None:
        channel = await self._messageable(channel_id, "add reaction")
        try:
            await channel.get_partial_message(message_id).add_reaction(emoji)
        except discord.HTTPException as exc:
            raise ExternalCallFailed(f"add reaction {emoji}", str(exc)) from exc

    async def remove_reaction(
        self, channel_id: int, message_id: int, emoji: str, user_id: int | None = None
    ) -> None:
        channel = await self._messageable(channel_id, "remove reaction")
        target = discord.Object(id=user_id if user_id is not None else self.user_id)
        try:
            await channel.get_partial_message(message_id).remove_reaction(emoji, target)
        except discord.NotFound:
            logger.debug("Reaction %s already gone from message %s", emoji, message_id)
        except discord.HTTPException as exc:
            raise ExternalCallFailed(f"remove reaction {emoji}", str(exc)) from exc

    async def grant_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        guild = self._guild(guild_id, "grant role")
        role = self._role(guild, role_id, "grant role")
        member = await self._member(guild, user_id, "grant role")
        if role in member.roles:
            return
        try:
            await member.add_roles(role, reason="Reaction role")
        except discord.HTTPException as exc:
            raise ExternalCallFailed(f"grant role {role.name}", str(exc)) from exc

    async def revoke_role(self, guild_id: int, user_id: int, role_id: int) -> None:
        guild = self._guild(guild_id, "revoke role")
        role = self._role(guild, role_id, "revoke role")
        member = await self._member(guild, user_id, "revoke role")
        if role not in member.roles:
            return
        try:
            await member.remove_roles(role, reason="Reaction role removed")
        except discord.HTTPException as exc:
            raise ExternalCallFailed(f"revoke role {role.name}", str(exc)) from exc

    async def send_message(
        self, channel_id: int, content: str, *, reply_to: int | None = None
    ) -> None:
        channel = await self._messageable(channel_id, "send message")
        reference: Optional[discord.PartialMessage] = (
            channel.get_partial_message(reply_to) if reply_to is not None else None
        )
        try:
            await channel.send(
                content,
                reference=reference,
                mention_author=False,
                allowed_mentions=discord.AllowedMentions.none(),
            )
        except discord.HTTPException as exc:
            raise ExternalCallFailed("send message", str(exc)) from exc

    async def send_direct(self, user_id: int, content: str) -> None:
        user = self.client.get_user(user_id)
        try:
            if user is None:
                user = await self.client.fetch_user(user_id)
            await user.send(content)
        except discord.HTTPException as exc:
            raise ExternalCallFailed("send direct message", str(exc)) from exc

    async def message_exists(self, channel_id: int, message_id: int) -> bool:
        channel = self.client.get_channel(channel_id)
        try:
            if channel is None:
                channel = await self.client.fetch_channel(channel_id)
            await channel.fetch_message(message_id)
        except discord.NotFound:
            return False
        except discord.HTTPException as exc:
            raise ExternalCallFailed("fetch message", str(exc)) from exc
        return True


__all__ = ["Platform", "DiscordPlatform"]
