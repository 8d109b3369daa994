import asyncio
import os, sys
from pathlib import Path
import tempfile

import pytest

# Add src/ to sys.path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

# Ensure required environment variables for roles_bot.config
os.environ.setdefault("DISCORD_API_TOKEN", "test-token")
os.environ.setdefault("ROLES_TRIGGER", "@roles")
os.environ.setdefault("ROLES_VALIDATE_INTERVAL", "0")
os.environ.setdefault("ROLES_DB_PATH", str(Path(tempfile.mkdtemp()) / "roles.db"))

from roles_bot.binding.models import GuildRole  # noqa: E402
from roles_bot.errors import ExternalCallFailed  # noqa: E402


class FakePlatform:
    """
    In-memory stand-in for the chat platform.

    ``fail_on`` holds ``(operation, key)`` pairs that raise
    :class:`ExternalCallFailed`; the key is the emoji for reaction calls, the
    role id for role calls and the guild id for role listing.
    """

    def __init__(self, roles=(), user_id=999):
        self.user_id = user_id
        self.roles = [GuildRole(id=rid, name=name) for rid, name in roles]
        self.reactions = {}
        self.member_roles = {}
        self.calls = []
        self.sent = []
        self.dms = []
        self.existing_messages = None
        self.fail_on = set()
        # Seconds each add_reaction takes, to widen the setup window.
        self.reaction_delay = 0

    def _check(self, operation, key):
        if (operation, key) in self.fail_on:
            raise ExternalCallFailed(operation, "boom")

    async def list_guild_roles(self, guild_id):
        self.calls.append(("list_guild_roles", guild_id))
        self._check("list_guild_roles", guild_id)
        return list(self.roles)

    async def add_reaction(self, channel_id, message_id, emoji):
        self.calls.append(("add_reaction", message_id, emoji))
        self._check("add_reaction", emoji)
        if self.reaction_delay:
            await asyncio.sleep(self.reaction_delay)
        self.reactions.setdefault(message_id, []).append(emoji)

    async def remove_reaction(self, channel_id, message_id, emoji, user_id=None):
        self.calls.append(("remove_reaction", message_id, emoji))
        self._check("remove_reaction", emoji)
        attached = self.reactions.get(message_id, [])
        if emoji in attached:
            attached.remove(emoji)

    async def grant_role(self, guild_id, user_id, role_id):
        self.calls.append(("grant_role", user_id, role_id))
        self._check("grant_role", role_id)
        self.member_roles.setdefault((guild_id, user_id), set()).add(role_id)

    async def revoke_role(self, guild_id, user_id, role_id):
        self.calls.append(("revoke_role", user_id, role_id))
        self._check("revoke_role", role_id)
        self.member_roles.setdefault((guild_id, user_id), set()).discard(role_id)

    async def send_message(self, channel_id, content, *, reply_to=None):
        self._check("send_message", channel_id)
        self.sent.append((channel_id, content, reply_to))

    async def send_direct(self, user_id, content):
        self._check("send_direct", user_id)
        self.dms.append((user_id, content))

    async def message_exists(self, channel_id, message_id):
        self._check("message_exists", message_id)
        if self.existing_messages is None:
            return True
        return message_id in self.existing_messages


@pytest.fixture
def platform():
    return FakePlatform(roles=[(111, "Red"), (222, "Blue"), (333, "Green")])


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "roles.db")
