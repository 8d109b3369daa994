"""
Emoji palette and allocation.

The palette is the 26 regional-indicator letters, the ten keycap digits and
nine coloured circles, in that order. Allocation takes the first ``n``
glyphs, so a given role ordering always maps to the same emojis.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from roles_bot.errors import PaletteExhausted

from .models import ResolvedBinding

_LETTERS = tuple(chr(0x1F1E6 + i) for i in range(26))
_DIGITS = tuple(f"{d}\ufe0f\u20e3" for d in range(10))
_CIRCLES = ("🔴", "🟠", "🟡", "🟢", "🔵", "🟣", "🟤", "⚫", "⚪")

PALETTE: Tuple[str, ...] = _LETTERS + _DIGITS + _CIRCLES


def normalize_emoji(emoji: str) -> str:
    """Drop variation selectors; gateways disagree on whether to send them."""
    return emoji.replace("\ufe0f", "")


def allocate(role_ids: Sequence[int], palette: Sequence[str] = PALETTE) -> List[ResolvedBinding]:
    """
    Pair each role id with a palette glyph, in order.

    :raises PaletteExhausted: when there are more roles than glyphs.
    """

    if len(role_ids) > len(palette):
        raise PaletteExhausted(len(role_ids), len(palette))
    return [ResolvedBinding(emoji=emoji, role_id=rid) for emoji, rid in zip(palette, role_ids)]


__all__ = ["PALETTE", "allocate", "normalize_emoji"]
