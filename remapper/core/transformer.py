# remapper/core/transformer.py
"""
Recursive tree transformer: places every element of a source tree in target space.

Per element: relative position in the source rect -> base scale/anchor -> inherited delta ->
optional absolute override (which starts a new delta for its subtree) -> vertical bleed clamp.
Horizontal position is never clamped.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Sequence

from remapper.core.config import MAX_BOUNDARY_VIOLATION_PERCENT, REMAP_DEBUG
from remapper.core.geometry import bleed_band, clamp, require_positive_size
from remapper.core.types import (
    AppliedTransform,
    Element,
    LayoutStrategy,
    Rect,
    TransformedElement,
)

logger = logging.getLogger(__name__)


def duplicate_override_ids(strategy: LayoutStrategy | None) -> list[str]:
    """Element ids targeted by more than one override, in first-seen order."""
    if strategy is None or not strategy.overrides:
        return []
    counts = Counter(o.layer_id for o in strategy.overrides)
    seen: list[str] = []
    for o in strategy.overrides:
        if counts[o.layer_id] > 1 and o.layer_id not in seen:
            seen.append(o.layer_id)
    return seen


def _transform_one(
    el: Element,
    source: Rect,
    target: Rect,
    base_scale: float,
    anchor_x: float,
    anchor_y: float,
    strategy: LayoutStrategy | None,
    dx: float,
    dy: float,
    band: tuple[float, float],
) -> TransformedElement:
    rel_x = (el.rect.x - source.x) / source.w
    rel_y = (el.rect.y - source.y) / source.h
    geom_x = anchor_x + rel_x * (source.w * base_scale)
    geom_y = anchor_y + rel_y * (source.h * base_scale)

    final_x = geom_x + dx
    final_y = geom_y + dy
    scale_x = base_scale
    scale_y = base_scale
    child_dx, child_dy = dx, dy

    override = strategy.override_for(el.id) if strategy is not None else None
    if override is not None:
        final_x = target.x + override.x_offset
        final_y = target.y + override.y_offset
        # children follow the overridden element, not the pure geometric placement
        child_dx = final_x - geom_x
        child_dy = final_y - geom_y
        scale_x *= override.individual_scale
        scale_y *= override.individual_scale

    clamped_y = clamp(final_y, band[0], band[1])
    was_clamped = clamped_y != final_y
    final_y = clamped_y

    if REMAP_DEBUG:
        logger.debug(
            "transform %s: geom=(%.3f, %.3f) final=(%.3f, %.3f) scale=%.4f override=%s clamped=%s",
            el.id, geom_x, geom_y, final_x, final_y, scale_x, override is not None, was_clamped,
        )

    children: tuple[TransformedElement, ...] = ()
    if el.kind == "group" and el.children:
        children = tuple(
            _transform_one(
                child, source, target, base_scale, anchor_x, anchor_y,
                strategy, child_dx, child_dy, band,
            )
            for child in el.children
        )

    return TransformedElement(
        id=el.id,
        kind=el.kind,
        visible=el.visible,
        opacity=el.opacity,
        rect=Rect(x=final_x, y=final_y, w=el.rect.w * scale_x, h=el.rect.h * scale_y),
        transform=AppliedTransform(scale_x=scale_x, scale_y=scale_y, offset_x=final_x, offset_y=final_y),
        children=children,
        name=el.name,
        clamped=was_clamped,
    )


def transform_elements(
    elements: Sequence[Element],
    source_rect: Rect,
    target_rect: Rect,
    base_scale: float,
    anchor_x: float,
    anchor_y: float,
    strategy: LayoutStrategy | None = None,
    inherited_dx: float = 0.0,
    inherited_dy: float = 0.0,
    bleed_percent: float = MAX_BOUNDARY_VIOLATION_PERCENT,
) -> list[TransformedElement]:
    """
    Transform a source element tree into target space, preserving ids, kinds and child order.
    Overrides for ids not in the tree are unused. When several overrides target one id the
    first one wins.
    """
    require_positive_size(source_rect, "source")
    for dup in duplicate_override_ids(strategy):
        logger.warning("Multiple overrides target element %s; using the first one.", dup)
    band = bleed_band(target_rect, bleed_percent)
    return [
        _transform_one(
            el, source_rect, target_rect, base_scale, anchor_x, anchor_y,
            strategy, inherited_dx, inherited_dy, band,
        )
        for el in elements
    ]
