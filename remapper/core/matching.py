# remapper/core/matching.py
"""
Resolve a wiring handle to a template slot with an ordered list of named matchers.
Matchers are tried in sequence; the first that returns a slot wins. Append new matchers
to DEFAULT_SLOT_MATCHERS (or pass a custom tuple) without touching resolution order logic.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Sequence

from remapper.core.config import PROXY_HANDLE_PATTERN, SLOT_BOUNDS_PREFIX
from remapper.core.error_codes import SlotResolutionError
from remapper.core.types import TargetSlot, Template

_PROXY_RE = re.compile(PROXY_HANDLE_PATTERN)


@dataclass(frozen=True)
class SlotMatcher:
    name: str
    match: Callable[[Template, str], TargetSlot | None]


def match_exact_name(template: Template, handle: str) -> TargetSlot | None:
    """'BG' -> slot named BG."""
    return template.slot_by_name(handle)


def match_bounds_prefix(template: Template, handle: str) -> TargetSlot | None:
    """'slot-bounds-BG' -> slot named BG."""
    if not handle.startswith(SLOT_BOUNDS_PREFIX):
        return None
    return template.slot_by_name(handle[len(SLOT_BOUNDS_PREFIX):])


def match_indexed_proxy(template: Template, handle: str) -> TargetSlot | None:
    """'target-out-2' -> third slot, if it exists."""
    m = _PROXY_RE.match(handle)
    if not m:
        return None
    index = int(m.group(1))
    if index < len(template.slots):
        return template.slots[index]
    return None


def match_single_slot(template: Template, handle: str) -> TargetSlot | None:
    """Any handle resolves to the only slot of a one-slot template."""
    if len(template.slots) == 1:
        return template.slots[0]
    return None


DEFAULT_SLOT_MATCHERS: tuple[SlotMatcher, ...] = (
    SlotMatcher("exact_name", match_exact_name),
    SlotMatcher("bounds_prefix", match_bounds_prefix),
    SlotMatcher("indexed_proxy", match_indexed_proxy),
    SlotMatcher("single_slot_fallback", match_single_slot),
)


def find_target_slot(
    template: Template,
    handle: str,
    matchers: Sequence[SlotMatcher] = DEFAULT_SLOT_MATCHERS,
) -> tuple[TargetSlot, str] | None:
    """Return (slot, matcher name) for the first matcher that resolves handle, else None."""
    for matcher in matchers:
        slot = matcher.match(template, handle)
        if slot is not None:
            return slot, matcher.name
    return None


def resolve_target_slot(
    template: Template,
    handle: str,
    matchers: Sequence[SlotMatcher] = DEFAULT_SLOT_MATCHERS,
) -> TargetSlot:
    """Like find_target_slot but raises SlotResolutionError when nothing matches."""
    found = find_target_slot(template, handle, matchers)
    if found is None:
        names = ", ".join(s.name for s in template.slots) or "<none>"
        raise SlotResolutionError(f"No template slot matches handle {handle!r} (slots: {names})")
    return found[0]
