import pytest

from roles_bot.binding.models import ResolvedBinding
from roles_bot.binding.palette import PALETTE, allocate, normalize_emoji
from roles_bot.errors import PaletteExhausted


def test_palette_is_large_and_distinct():
    assert len(PALETTE) >= 36
    assert len(set(PALETTE)) == len(PALETTE)
    assert len({normalize_emoji(e) for e in PALETTE}) == len(PALETTE)


def test_allocate_takes_palette_prefix_in_order():
    bindings = allocate([111, 222], ["A", "B", "C"])

    assert bindings == [ResolvedBinding("A", 111), ResolvedBinding("B", 222)]


def test_allocate_is_deterministic():
    role_ids = [5, 3, 9, 1]
    assert allocate(role_ids) == allocate(list(role_ids))
    assert [b.emoji for b in allocate(role_ids)] == list(PALETTE[:4])


def test_allocate_refuses_to_truncate():
    with pytest.raises(PaletteExhausted) as exc_info:
        allocate([1, 2, 3, 4], ["A", "B", "C"])

    assert exc_info.value.requested == 4
    assert exc_info.value.available == 3


def test_allocate_empty_sequence():
    assert allocate([]) == []


def test_normalize_emoji_strips_variation_selector():
    assert normalize_emoji("1\ufe0f\u20e3") == "1\u20e3"
    assert normalize_emoji("🇦") == "🇦"
