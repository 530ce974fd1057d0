# remapper/core/resolver.py
"""
Resolve the base transform (uniform scale + anchor) of a whole element tree
from a source rect, a target rect and an optional layout strategy.
"""

from __future__ import annotations

import math

from remapper.core.error_codes import InvalidGeometryError
from remapper.core.geometry import centered_offset, require_positive_size, uniform_fit_scale
from remapper.core.types import LayoutStrategy, Rect, TransformParams


def _anchor_y(target: Rect, scaled_h: float, anchor: str) -> float:
    if anchor == "TOP":
        return target.y
    if anchor == "BOTTOM":
        return target.y + (target.h - scaled_h)
    # CENTER, STRETCH and unknown values: vertically centered
    return centered_offset(target.y, target.h, scaled_h)


def resolve_transform(
    source_rect: Rect,
    target_rect: Rect,
    strategy: LayoutStrategy | None = None,
) -> TransformParams:
    """
    Without a strategy: uniform fit, centered on both axes.
    With a strategy: its suggested scale as given, centered horizontally, vertical anchor per strategy.anchor.
    Raises InvalidGeometryError for a zero/negative source size or an unusable suggested scale.
    """
    require_positive_size(source_rect, "source")

    if strategy is None:
        scale = uniform_fit_scale(source_rect, target_rect)
        scaled_w = source_rect.w * scale
        scaled_h = source_rect.h * scale
        return TransformParams(
            scale=scale,
            anchor_x=centered_offset(target_rect.x, target_rect.w, scaled_w),
            anchor_y=centered_offset(target_rect.y, target_rect.h, scaled_h),
        )

    scale = strategy.suggested_scale
    if not math.isfinite(scale) or scale <= 0:
        raise InvalidGeometryError(f"Strategy suggested scale must be positive and finite, got {scale!r}")
    scaled_w = source_rect.w * scale
    scaled_h = source_rect.h * scale
    return TransformParams(
        scale=scale,
        anchor_x=centered_offset(target_rect.x, target_rect.w, scaled_w),
        anchor_y=_anchor_y(target_rect, scaled_h, strategy.anchor),
    )
