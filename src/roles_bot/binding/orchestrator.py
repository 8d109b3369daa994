"""
Setup orchestration
===================

Drives one setup attempt through
``PARSING -> RESOLVING -> ALLOCATING -> POSTING -> PERSISTING -> COMPLETED``.
Any failure ends in ``FAILED`` with every reaction the attempt posted taken
back off the message. A message without role tokens finishes as ``NOOP``.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from roles_bot.errors import (
    DuplicateMessage,
    ExternalCallFailed,
    PaletteExhausted,
    RolesBotError,
    StoreFailed,
)

from .models import BindingSet, ResolvedBinding
from .palette import PALETTE, allocate
from .resolver import RoleIndex, resolve_all
from .tokens import parse_tokens

if TYPE_CHECKING:
    from roles_bot.clients.platform import Platform
    from roles_bot.memory.bindings import BindingStore

logger = logging.getLogger(__name__)


class SetupStage(Enum):
    PARSING = "parsing"
    RESOLVING = "resolving"
    ALLOCATING = "allocating"
    POSTING = "posting"
    PERSISTING = "persisting"
    COMPLETED = "completed"
    FAILED = "failed"
    NOOP = "noop"


@dataclass(frozen=True)
class SetupRequest:
    guild_id: int
    channel_id: int
    message_id: int
    author_id: int
    text: str


@dataclass
class SetupResult:
    request: SetupRequest
    stage: SetupStage
    failed_stage: Optional[SetupStage] = None
    binding_set: Optional[BindingSet] = None
    errors: List[RolesBotError] = field(default_factory=list)
    role_names: Dict[int, str] = field(default_factory=dict)
    # Reactions a failed rollback could not remove.
    residual: List[str] = field(default_factory=list)

    @property
    def completed(self) -> bool:
        return self.stage is SetupStage.COMPLETED

    def report(self) -> str:
        """Human-readable summary, one line per binding or per failure."""

        if self.stage is SetupStage.COMPLETED and self.binding_set is not None:
            lines = ["Role message ready. React to pick your roles:"]
            for binding in self.binding_set.bindings:
                name = self.role_names.get(binding.role_id, str(binding.role_id))
                lines.append(f"{binding.emoji} → {name}")
            return "\n".join(lines)

        if self.stage is SetupStage.NOOP:
            return "No `{ROLE:...}` tokens found."

        lines = ["Role setup failed:"]
        lines.extend(f"- {err.describe()}" for err in self.errors)
        if self.residual:
            lines.append(f"Could not clean up reactions: {' '.join(self.residual)}")
        return "\n".join(lines)


class SetupOrchestrator:
    def __init__(
        self,
        store: "BindingStore",
        platform: "Platform",
        palette: Sequence[str] = PALETTE,
    ) -> None:
        self.store = store
        self.platform = platform
        self.palette = tuple(palette)

    def _fail(self, result: SetupResult, *errors: RolesBotError) -> SetupResult:
        result.failed_stage = result.stage
        result.stage = SetupStage.FAILED
        result.errors.extend(errors)
        logger.info(
            "Setup for message %s failed while %s: %s",
            result.request.message_id,
            result.failed_stage.value,
            "; ".join(err.describe() for err in errors),
        )
        return result

    async def _rollback(self, request: SetupRequest, posted: List[str], result: SetupResult) -> None:
        for emoji in reversed(posted):
            try:
                await self.platform.remove_reaction(request.channel_id, request.message_id, emoji)
            except ExternalCallFailed as exc:
                result.residual.append(emoji)
                logger.error(
                    "Rollback left reaction %s on message %s in channel %s: %s",
                    emoji,
                    request.message_id,
                    request.channel_id,
                    exc.describe(),
                )
        posted.clear()

    async def run(self, request: SetupRequest) -> SetupResult:
        result = SetupResult(request=request, stage=SetupStage.PARSING)

        refs = parse_tokens(request.text)
        if not refs:
            result.stage = SetupStage.NOOP
            return result

        result.stage = SetupStage.RESOLVING
        if request.message_id in self.store:
            return self._fail(result, DuplicateMessage(request.message_id))
        try:
            index = RoleIndex(await self.platform.list_guild_roles(request.guild_id))
        except ExternalCallFailed as exc:
            return self._fail(result, exc)
        role_ids, errors = resolve_all(refs, index)
        if errors:
            return self._fail(result, *errors)
        result.role_names = {rid: index.name_of(rid) or str(rid) for rid in role_ids}

        result.stage = SetupStage.ALLOCATING
        try:
            bindings: List[ResolvedBinding] = allocate(role_ids, self.palette)
        except PaletteExhausted as exc:
            return self._fail(result, exc)

        posted: List[str] = []
        try:
            result.stage = SetupStage.POSTING
            for binding in bindings:
                await self.platform.add_reaction(request.channel_id, request.message_id, binding.emoji)
                posted.append(binding.emoji)

            result.stage = SetupStage.PERSISTING
            binding_set = BindingSet(
                guild_id=request.guild_id,
                channel_id=request.channel_id,
                message_id=request.message_id,
                bindings=tuple(bindings),
            )
            try:
                await self.store.put(binding_set)
            except sqlite3.Error as exc:
                raise StoreFailed(str(exc)) from exc
        except RolesBotError as exc:
            await self._rollback(request, posted, result)
            return self._fail(result, exc)
        except asyncio.CancelledError:
            # Once PERSISTING starts the sqlite write finishes in its thread
            # regardless, so the posted reactions must stay to match it.
            if result.stage is SetupStage.POSTING:
                await self._rollback(request, posted, result)
            raise

        result.binding_set = binding_set
        result.stage = SetupStage.COMPLETED
        logger.info(
            "Setup for message %s completed with %d role(s)",
            request.message_id,
            len(bindings),
        )
        return result


__all__ = ["SetupStage", "SetupRequest", "SetupResult", "SetupOrchestrator"]
