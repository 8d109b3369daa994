import asyncio

from roles_bot import autoroles
from roles_bot.binding.models import GuildRole
from roles_bot.memory.bindings import BindingStore
from roles_bot.memory.settings import AutoRoleSettings


def _with_settings(db_path, fn):
    async def _run():
        store = await BindingStore.open(db_path)
        try:
            return await fn(AutoRoleSettings(store.conn, store.lock))
        finally:
            await store.close()

    return asyncio.run(_run())


def test_configure_sets_lists_and_clears(db_path, platform):
    async def scenario(settings):
        replies = [
            await autoroles.configure(settings, platform, 1, "Red <@&222>", max_roles=25),
            await autoroles.configure(settings, platform, 1, "", max_roles=25),
        ]
        stored = await settings.get(1)
        replies.append(await autoroles.configure(settings, platform, 1, "clear", max_roles=25))
        return replies, stored, await settings.get(1)

    replies, stored, cleared = _with_settings(db_path, scenario)

    assert replies[0] == "Auto roles set!"
    assert replies[1] == "Current auto roles:\n`Red`\n`Blue`"
    assert replies[2] == "Auto roles cleared!"
    assert stored == [111, 222]
    assert cleared == []


def test_configure_accepts_role_tokens_with_spaces(db_path, platform):
    platform.roles.append(GuildRole(id=444, name="Night Owls"))

    async def scenario(settings):
        reply = await autoroles.configure(settings, platform, 1, "{ROLE:Night Owls}", max_roles=25)
        return reply, await settings.get(1)

    assert _with_settings(db_path, scenario) == ("Auto roles set!", [444])


def test_configure_rejects_unknown_and_too_many(db_path, platform):
    async def scenario(settings):
        unknown = await autoroles.configure(settings, platform, 1, "Red Purple", max_roles=25)
        too_many = await autoroles.configure(settings, platform, 1, "Red Blue Green", max_roles=2)
        return unknown, too_many, await settings.get(1)

    unknown, too_many, stored = _with_settings(db_path, scenario)

    assert unknown.startswith("Auto roles not changed:")
    assert "`Purple`" in unknown
    assert too_many == "No more than 2 auto roles!"
    assert stored == []


def test_apply_on_join_grants_what_it_can(db_path, platform):
    platform.fail_on.add(("grant_role", 222))

    async def scenario(settings):
        await settings.set(1, [111, 222, 333])
        return await autoroles.apply_on_join(settings, platform, 1, 42)

    granted = _with_settings(db_path, scenario)

    assert granted == [111, 333]
    assert platform.member_roles[(1, 42)] == {111, 333}
