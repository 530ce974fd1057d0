"""
Target-slot matchers: exact name, bounds prefix, indexed proxy, single-slot fallback, custom order.
"""

from __future__ import annotations

import pytest

from remapper.core.error_codes import SlotResolutionError
from remapper.core.matching import (
    DEFAULT_SLOT_MATCHERS,
    SlotMatcher,
    find_target_slot,
    match_exact_name,
    resolve_target_slot,
)
from remapper.core.types import Rect, TargetSlot, Template


def _template(*names: str) -> Template:
    slots = tuple(
        TargetSlot(id=str(i), name=n, original_name=f"!!{n}", bounds=Rect(0, i * 10, 10, 10))
        for i, n in enumerate(names)
    )
    return Template(canvas_width=100, canvas_height=100, slots=slots)


def test_default_matcher_order() -> None:
    assert [m.name for m in DEFAULT_SLOT_MATCHERS] == [
        "exact_name",
        "bounds_prefix",
        "indexed_proxy",
        "single_slot_fallback",
    ]


def test_exact_name() -> None:
    slot, how = find_target_slot(_template("BG", "TITLE"), "TITLE")  # type: ignore[misc]
    assert slot.name == "TITLE" and how == "exact_name"


def test_bounds_prefix() -> None:
    slot, how = find_target_slot(_template("BG", "TITLE"), "slot-bounds-BG")  # type: ignore[misc]
    assert slot.name == "BG" and how == "bounds_prefix"


def test_indexed_proxy() -> None:
    slot, how = find_target_slot(_template("BG", "TITLE", "LOGO"), "target-out-2")  # type: ignore[misc]
    assert slot.name == "LOGO" and how == "indexed_proxy"


def test_indexed_proxy_out_of_range() -> None:
    assert find_target_slot(_template("BG", "TITLE"), "target-out-5") is None


def test_single_slot_fallback() -> None:
    slot, how = find_target_slot(_template("BG"), "anything")  # type: ignore[misc]
    assert slot.name == "BG" and how == "single_slot_fallback"


def test_exact_name_wins_over_proxy() -> None:
    # A slot literally named like a proxy handle is matched by name first
    slot, how = find_target_slot(_template("A", "target-out-0"), "target-out-0")  # type: ignore[misc]
    assert slot.name == "target-out-0" and how == "exact_name"


def test_unresolved_raises() -> None:
    with pytest.raises(SlotResolutionError) as exc:
        resolve_target_slot(_template("BG", "TITLE"), "MISSING")
    assert exc.value.code == "slot_not_found"
    with pytest.raises(SlotResolutionError):
        resolve_target_slot(_template(), "BG")


def test_custom_matchers() -> None:
    def lowercase(template: Template, handle: str) -> TargetSlot | None:
        return template.slot_by_name(handle.upper())

    matchers = (SlotMatcher("exact_name", match_exact_name), SlotMatcher("case_insensitive", lowercase))
    slot = resolve_target_slot(_template("BG", "TITLE"), "title", matchers)
    assert slot.name == "TITLE"
