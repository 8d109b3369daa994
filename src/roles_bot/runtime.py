"""
Process-wide bot state.

:func:`init` builds everything the event hooks need once the client is
logged in; :func:`teardown` drains in-flight work and closes the store
before the connection goes away. Hooks reach the live state through
:func:`current`.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from roles_bot.binding.orchestrator import SetupOrchestrator
from roles_bot.binding.palette import PALETTE
from roles_bot.binding.reconciler import ReactionReconciler
from roles_bot.clients.platform import Platform
from roles_bot.config import store as store_cfg
from roles_bot.config import workers as workers_cfg
from roles_bot.memory.bindings import BindingStore
from roles_bot.memory.settings import AutoRoleSettings
from roles_bot.workers import KeyedWorkerPool
from roles_bot import maintenance

logger = logging.getLogger(__name__)


@dataclass
class Runtime:
    store: BindingStore
    auto_roles: AutoRoleSettings
    platform: Platform
    pool: KeyedWorkerPool
    orchestrator: SetupOrchestrator
    reconciler: ReactionReconciler
    validated: bool = False
    validate_task: Optional[asyncio.Task] = None


_current: Runtime | None = None


def build(store: BindingStore, platform: Platform) -> Runtime:
    """Wire the components around an open store."""

    palette = PALETTE[: workers_cfg.MAX_ROLES_PER_MESSAGE]
    return Runtime(
        store=store,
        auto_roles=AutoRoleSettings(store.conn, store.lock),
        platform=platform,
        pool=KeyedWorkerPool(workers_cfg.CONCURRENCY),
        orchestrator=SetupOrchestrator(store, platform, palette),
        reconciler=ReactionReconciler(store, platform),
    )


def install(runtime: Runtime | None) -> None:
    global _current
    _current = runtime


def current() -> Runtime:
    if _current is None:
        raise RuntimeError("runtime not initialised; call runtime.init() first")
    return _current


async def init(platform: Platform, db_path: str | None = None) -> Runtime:
    if _current is not None:
        return _current
    store = await BindingStore.open(db_path)
    runtime = build(store, platform)
    install(runtime)
    logger.info(
        "Runtime ready (%d binding set(s), concurrency=%d)",
        len(store),
        workers_cfg.CONCURRENCY,
    )
    return runtime


async def start_validation(runtime: Runtime) -> None:
    """Sweep for stale bindings once, then schedule periodic sweeps."""

    if runtime.validated:
        return
    runtime.validated = True
    await maintenance.validate_bindings(runtime.store, runtime.platform)

    if store_cfg.VALIDATE_INTERVAL > 0 and runtime.validate_task is None:
        async def _sweep() -> None:
            await maintenance.validate_bindings(runtime.store, runtime.platform)

        runtime.validate_task = await maintenance.startup(_sweep, store_cfg.VALIDATE_INTERVAL)


async def teardown() -> None:
    runtime = _current
    if runtime is None:
        return
    await maintenance.shutdown(runtime.validate_task)
    await runtime.pool.close()
    await runtime.store.close()
    install(None)
    logger.info("Runtime shut down")


__all__ = ["Runtime", "build", "install", "current", "init", "start_validation", "teardown"]
