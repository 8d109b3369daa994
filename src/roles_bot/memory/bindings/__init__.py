"""
Binding Store
=============

Durable mapping from message id to its :class:`BindingSet`. Import from here::

    from roles_bot.memory.bindings import BindingStore

SQLite is the source of truth; every write commits before the call returns.
An in-memory index mirrors committed rows and serves :meth:`BindingStore.get`
and :meth:`BindingStore.find_role`, the hot path for reaction events. The
mirror is only touched after a commit succeeds, so a reader sees either the
whole set or nothing.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from typing import Dict, Iterable, List, Optional

from roles_bot.binding.models import BindingSet
from roles_bot.binding.palette import normalize_emoji
from roles_bot.errors import DuplicateMessage, NotFound

from . import db as _db
from .repositories import BindingsRepo

logger = logging.getLogger(__name__)


class BindingStore:
    """Async store for binding sets, keyed by message id."""

    def __init__(self, conn: sqlite3.Connection, lock: asyncio.Lock | None = None) -> None:
        self.conn = conn
        self.lock = lock or asyncio.Lock()
        self._repo = BindingsRepo(conn, self.lock)
        self._sets: Dict[int, BindingSet] = {}
        self._index: Dict[int, Dict[str, int]] = {}

    @classmethod
    async def open(cls, path: Optional[str] = None) -> "BindingStore":
        """Connect, migrate and hydrate the in-memory index from disk."""
        conn = await asyncio.to_thread(_db.connect, path)
        await asyncio.to_thread(_db.migrate, conn)
        store = cls(conn)
        await store.reload()
        return store

    async def reload(self) -> None:
        sets = await self._repo.fetch_all()
        self._sets = {}
        self._index = {}
        for binding_set in sets:
            self._remember(binding_set)
        logger.info("Loaded %d binding set(s)", len(sets))

    def _remember(self, binding_set: BindingSet) -> None:
        self._sets[binding_set.message_id] = binding_set
        self._index[binding_set.message_id] = {
            normalize_emoji(b.emoji): b.role_id for b in binding_set.bindings
        }

    def _forget(self, message_id: int) -> Optional[BindingSet]:
        self._index.pop(message_id, None)
        return self._sets.pop(message_id, None)

    async def put(self, binding_set: BindingSet) -> None:
        """
        Persist a new binding set.

        :raises DuplicateMessage: if the message already has one; the existing
            set is left untouched.
        """
        if binding_set.message_id in self._sets:
            raise DuplicateMessage(binding_set.message_id)
        await self._repo.insert_set(binding_set)
        self._remember(binding_set)
        logger.info(
            "Stored %d binding(s) for message %s in guild %s",
            len(binding_set.bindings),
            binding_set.message_id,
            binding_set.guild_id,
        )

    async def get(self, message_id: int) -> BindingSet:
        """:raises NotFound: if the message has no binding set."""
        try:
            return self._sets[message_id]
        except KeyError:
            raise NotFound(message_id) from None

    def __contains__(self, message_id: int) -> bool:
        return message_id in self._sets

    async def find_role(self, message_id: int, emoji: str) -> int:
        """:raises NotFound: if the message or the emoji is not bound."""
        emojis = self._index.get(message_id)
        if emojis is None:
            raise NotFound(message_id)
        try:
            return emojis[normalize_emoji(emoji)]
        except KeyError:
            raise NotFound(message_id, emoji) from None

    async def remove(self, message_id: int) -> Optional[BindingSet]:
        """Delete a message's binding set; returns it, or ``None`` if absent."""
        removed = await self.remove_many([message_id])
        return removed[0] if removed else None

    async def remove_many(self, message_ids: Iterable[int]) -> List[BindingSet]:
        ids = list(dict.fromkeys(message_ids))
        if not ids:
            return []
        deleted = await self._repo.delete_sets(ids)
        removed = [bs for bs in (self._forget(mid) for mid in deleted) if bs is not None]
        if removed:
            logger.info("Removed binding set(s) for message(s) %s", [bs.message_id for bs in removed])
        return removed

    async def all(self) -> List[BindingSet]:
        """Full scan straight from disk."""
        return await self._repo.fetch_all()

    def __len__(self) -> int:
        return len(self._sets)

    async def close(self) -> None:
        def _run():
            _db.wal_checkpoint_truncate(self.conn)
            self.conn.close()

        async with self.lock:
            await asyncio.to_thread(_run)


__all__ = ["BindingStore"]
