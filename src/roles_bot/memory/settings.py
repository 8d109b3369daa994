from __future__ import annotations

import asyncio
import sqlite3
from typing import List, Sequence

from .bindings.repositories import AutoRolesRepo


class AutoRoleSettings:
    """Roles handed to every member who joins a guild."""

    def __init__(self, conn: sqlite3.Connection, lock: asyncio.Lock) -> None:
        self._repo = AutoRolesRepo(conn, lock)

    async def get(self, guild_id: int) -> List[int]:
        return await self._repo.get(guild_id)

    async def set(self, guild_id: int, role_ids: Sequence[int]) -> None:
        await self._repo.replace(guild_id, list(dict.fromkeys(role_ids)))

    async def clear(self, guild_id: int) -> None:
        await self._repo.replace(guild_id, [])
