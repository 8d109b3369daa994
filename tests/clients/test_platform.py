import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import discord
import pytest

from roles_bot.binding.models import GuildRole
from roles_bot.clients.platform import DiscordPlatform
from roles_bot.errors import ExternalCallFailed


def _http_error(cls, status):
    return cls(SimpleNamespace(status=status, reason="error"), "nope")


def _role(role_id, name, default=False):
    return SimpleNamespace(id=role_id, name=name, is_default=lambda: default)


RED = _role(111, "Red")
EVERYONE = _role(1, "@everyone", default=True)


def _platform(member=None, fetch_member=None, partial=None, channel=None):
    member = member or SimpleNamespace(roles=[], add_roles=AsyncMock(), remove_roles=AsyncMock())
    guild = SimpleNamespace(
        roles=[EVERYONE, RED],
        get_role=lambda rid: RED if rid == RED.id else None,
        get_member=lambda uid: member,
        fetch_member=fetch_member or AsyncMock(return_value=member),
    )
    partial = partial or SimpleNamespace(add_reaction=AsyncMock(), remove_reaction=AsyncMock())
    channel = channel or SimpleNamespace(
        get_partial_message=lambda mid: partial,
        fetch_message=AsyncMock(),
        send=AsyncMock(),
    )
    client = SimpleNamespace(
        user=SimpleNamespace(id=999),
        get_guild=lambda gid: guild if gid == 1 else None,
        get_channel=lambda cid: channel,
        fetch_channel=AsyncMock(return_value=channel),
    )
    return DiscordPlatform(client), member, partial, channel


def test_list_guild_roles_skips_the_default_role():
    platform, *_ = _platform()

    assert asyncio.run(platform.list_guild_roles(1)) == [GuildRole(id=111, name="Red")]


def test_unknown_guild_is_an_external_failure():
    platform, *_ = _platform()

    with pytest.raises(ExternalCallFailed):
        asyncio.run(platform.list_guild_roles(2))


def test_grant_is_a_no_op_when_role_already_held():
    member = SimpleNamespace(roles=[RED], add_roles=AsyncMock(), remove_roles=AsyncMock())
    platform, *_ = _platform(member=member)

    asyncio.run(platform.grant_role(1, 42, 111))

    member.add_roles.assert_not_awaited()


def test_revoke_is_a_no_op_when_role_already_absent():
    platform, member, *_ = _platform()

    asyncio.run(platform.revoke_role(1, 42, 111))

    member.remove_roles.assert_not_awaited()


def test_grant_forbidden_becomes_external_failure():
    member = SimpleNamespace(
        roles=[],
        add_roles=AsyncMock(side_effect=_http_error(discord.Forbidden, 403)),
        remove_roles=AsyncMock(),
    )
    platform, *_ = _platform(member=member)

    with pytest.raises(ExternalCallFailed):
        asyncio.run(platform.grant_role(1, 42, 111))
    member.add_roles.assert_awaited_once()


def test_grant_for_deleted_role_or_departed_member_fails():
    platform, *_ = _platform()
    with pytest.raises(ExternalCallFailed, match="no longer exists"):
        asyncio.run(platform.grant_role(1, 42, 222))

    platform, *_ = _platform(fetch_member=AsyncMock(side_effect=_http_error(discord.NotFound, 404)))
    platform.client.get_guild(1).get_member = lambda uid: None
    with pytest.raises(ExternalCallFailed, match="not in the server"):
        asyncio.run(platform.grant_role(1, 42, 111))


def test_remove_reaction_treats_not_found_as_success():
    partial = SimpleNamespace(
        add_reaction=AsyncMock(),
        remove_reaction=AsyncMock(side_effect=_http_error(discord.NotFound, 404)),
    )
    platform, *_ = _platform(partial=partial)

    asyncio.run(platform.remove_reaction(2, 500, "A"))

    partial.remove_reaction.assert_awaited_once()


def test_add_reaction_http_error_becomes_external_failure():
    partial = SimpleNamespace(
        add_reaction=AsyncMock(side_effect=_http_error(discord.HTTPException, 500)),
        remove_reaction=AsyncMock(),
    )
    platform, *_ = _platform(partial=partial)

    with pytest.raises(ExternalCallFailed):
        asyncio.run(platform.add_reaction(2, 500, "A"))


def test_message_exists_only_false_on_not_found():
    gone = SimpleNamespace(
        get_partial_message=lambda mid: None,
        fetch_message=AsyncMock(side_effect=_http_error(discord.NotFound, 404)),
    )
    platform, *_ = _platform(channel=gone)
    assert asyncio.run(platform.message_exists(2, 500)) is False

    flaky = SimpleNamespace(
        get_partial_message=lambda mid: None,
        fetch_message=AsyncMock(side_effect=_http_error(discord.HTTPException, 503)),
    )
    platform, *_ = _platform(channel=flaky)
    with pytest.raises(ExternalCallFailed):
        asyncio.run(platform.message_exists(2, 500))

    platform, *_ = _platform()
    assert asyncio.run(platform.message_exists(2, 500)) is True
