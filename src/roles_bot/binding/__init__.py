"""
Binding engine: parse role tokens, resolve them, allocate emojis, and keep
role membership in step with reactions.
"""

from .models import BindingSet, GuildRole, ReferenceKind, ResolvedBinding, RoleReference
from .orchestrator import SetupOrchestrator, SetupRequest, SetupResult, SetupStage
from .palette import PALETTE, allocate, normalize_emoji
from .reconciler import ReactionAction, ReactionEvent, ReactionReconciler, ReconcileOutcome
from .resolver import RoleIndex, resolve_all
from .tokens import parse_tokens

__all__ = [
    "BindingSet",
    "GuildRole",
    "ReferenceKind",
    "ResolvedBinding",
    "RoleReference",
    "SetupOrchestrator",
    "SetupRequest",
    "SetupResult",
    "SetupStage",
    "PALETTE",
    "allocate",
    "normalize_emoji",
    "ReactionAction",
    "ReactionEvent",
    "ReactionReconciler",
    "ReconcileOutcome",
    "RoleIndex",
    "resolve_all",
    "parse_tokens",
]
