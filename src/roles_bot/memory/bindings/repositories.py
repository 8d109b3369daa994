"""
Repositories (SQL-only)
=======================
- Pure CRUD over ``binding_sets``/``bindings`` and ``guild_auto_roles``.
- Multi-statement writes open ``BEGIN IMMEDIATE`` so they land all-or-nothing.
"""

from __future__ import annotations

import asyncio
import sqlite3
import time
from typing import Dict, Iterable, List, Sequence

from roles_bot.binding.models import BindingSet, ResolvedBinding
from roles_bot.errors import DuplicateMessage


def _rows_to_sets(set_rows: Sequence[sqlite3.Row], binding_rows: Sequence[sqlite3.Row]) -> List[BindingSet]:
    grouped: Dict[int, List[ResolvedBinding]] = {}
    for row in binding_rows:
        grouped.setdefault(int(row["message_id"]), []).append(
            ResolvedBinding(emoji=row["emoji"], role_id=int(row["role_id"]))
        )
    return [
        BindingSet(
            guild_id=int(row["guild_id"]),
            channel_id=int(row["channel_id"]),
            message_id=int(row["message_id"]),
            bindings=tuple(grouped.get(int(row["message_id"]), ())),
        )
        for row in set_rows
    ]


class BindingsRepo:
    """Async CRUD helpers for binding sets."""

    def __init__(self, conn: sqlite3.Connection, lock: asyncio.Lock):
        self.conn = conn
        self._lock = lock

    async def insert_set(self, binding_set: BindingSet) -> None:
        """
        Insert a binding set and its rows in one transaction.

        :raises DuplicateMessage: if the message already has a set.
        """
        def _run():
            try:
                with self.conn:
                    self.conn.execute("BEGIN IMMEDIATE")
                    self.conn.execute(
                        "INSERT INTO binding_sets (message_id, guild_id, channel_id, created_ts) "
                        "VALUES (?, ?, ?, ?)",
                        (
                            binding_set.message_id,
                            binding_set.guild_id,
                            binding_set.channel_id,
                            time.time(),
                        ),
                    )
                    self.conn.executemany(
                        "INSERT INTO bindings (message_id, position, emoji, role_id) VALUES (?, ?, ?, ?)",
                        [
                            (binding_set.message_id, idx, b.emoji, b.role_id)
                            for idx, b in enumerate(binding_set.bindings)
                        ],
                    )
            except sqlite3.IntegrityError as exc:
                if "binding_sets.message_id" in str(exc):
                    raise DuplicateMessage(binding_set.message_id) from exc
                raise

        async with self._lock:
            await asyncio.to_thread(_run)  # blocking sqlite call

    async def delete_sets(self, message_ids: Iterable[int]) -> List[int]:
        """Delete the given sets; returns the ids that actually existed."""
        ids = list(dict.fromkeys(message_ids))
        if not ids:
            return []
        ph = ",".join(["?"] * len(ids))

        def _run() -> List[int]:
            with self.conn:
                self.conn.execute("BEGIN IMMEDIATE")
                found = [
                    int(r["message_id"])
                    for r in self.conn.execute(
                        f"SELECT message_id FROM binding_sets WHERE message_id IN ({ph})", ids
                    ).fetchall()
                ]
                self.conn.execute(f"DELETE FROM binding_sets WHERE message_id IN ({ph})", ids)
            return found

        async with self._lock:
            return await asyncio.to_thread(_run)

    async def fetch_all(self) -> List[BindingSet]:
        """Full scan, ordered by creation time."""
        def _query() -> List[BindingSet]:
            set_rows = self.conn.execute(
                "SELECT message_id, guild_id, channel_id FROM binding_sets ORDER BY created_ts, message_id"
            ).fetchall()
            binding_rows = self.conn.execute(
                "SELECT message_id, emoji, role_id FROM bindings ORDER BY message_id, position"
            ).fetchall()
            return _rows_to_sets(set_rows, binding_rows)

        async with self._lock:
            return await asyncio.to_thread(_query)


class AutoRolesRepo:
    """Per-guild list of roles granted on member join."""

    def __init__(self, conn: sqlite3.Connection, lock: asyncio.Lock):
        self.conn = conn
        self._lock = lock

    async def get(self, guild_id: int) -> List[int]:
        def _query() -> List[int]:
            rows = self.conn.execute(
                "SELECT role_id FROM guild_auto_roles WHERE guild_id=? ORDER BY position",
                (guild_id,),
            ).fetchall()
            return [int(r["role_id"]) for r in rows]

        async with self._lock:
            return await asyncio.to_thread(_query)

    async def replace(self, guild_id: int, role_ids: Sequence[int]) -> None:
        """Replace the guild's auto-roles; an empty sequence clears them."""
        def _run():
            with self.conn:
                self.conn.execute("BEGIN IMMEDIATE")
                self.conn.execute("DELETE FROM guild_auto_roles WHERE guild_id=?", (guild_id,))
                self.conn.executemany(
                    "INSERT INTO guild_auto_roles (guild_id, position, role_id) VALUES (?, ?, ?)",
                    [(guild_id, idx, rid) for idx, rid in enumerate(role_ids)],
                )

        async with self._lock:
            await asyncio.to_thread(_run)
