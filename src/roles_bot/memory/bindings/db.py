"""
SQLite bootstrap and connection helpers
=======================================

- WAL journal; ``synchronous`` comes from config (FULL by default) so a
  committed binding survives a crash right after the write returns.
- Schema lives next to this module in ``schema.sql``.
"""

from __future__ import annotations

import pathlib
import sqlite3
from typing import Optional

from roles_bot.config import store as store_cfg


def db_path() -> str:
    return store_cfg.DB_PATH


def connect(path: Optional[str] = None, *, synchronous: Optional[str] = None) -> sqlite3.Connection:
    target = path or db_path()
    if target != ":memory:":
        pathlib.Path(target).parent.mkdir(parents=True, exist_ok=True)

    # Autocommit; we use explicit `with conn:` blocks in worker threads.
    conn = sqlite3.connect(
        target,
        isolation_level=None,
        check_same_thread=False,
    )

    conn.execute("PRAGMA journal_mode=WAL;")
    conn.execute(f"PRAGMA synchronous={synchronous or store_cfg.SYNCHRONOUS};")
    conn.execute("PRAGMA foreign_keys=ON;")
    conn.execute("PRAGMA busy_timeout=3000;")

    conn.row_factory = sqlite3.Row
    return conn


def migrate(conn: sqlite3.Connection) -> None:
    """Execute schema.sql (idempotent)."""
    schema_file = pathlib.Path(__file__).with_name("schema.sql")
    sql = schema_file.read_text(encoding="utf-8")
    conn.executescript(sql)


def wal_checkpoint_truncate(conn: sqlite3.Connection) -> None:
    """Run a WAL checkpoint + truncate; called on shutdown."""
    conn.execute("PRAGMA wal_checkpoint(TRUNCATE);")
