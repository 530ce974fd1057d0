"""
Boundary diagnostics for a transformed tree: which elements were clamped vertically and
which still leave the target's bleed region. Diagnostics only; placement is not changed.
"""

from __future__ import annotations

from typing import Sequence

from remapper.core.config import GEOMETRY_TOLERANCE, MAX_BOUNDARY_VIOLATION_PERCENT
from remapper.core.geometry import bleed_region, element_tree_bounds, iter_tree, rect_contains_with_tol
from remapper.core.types import Rect, SafetyReport, TransformedElement


def safety_report(
    elements: Sequence[TransformedElement],
    target_rect: Rect,
    bleed_percent: float = MAX_BOUNDARY_VIOLATION_PERCENT,
    tolerance: float = GEOMETRY_TOLERANCE,
) -> SafetyReport:
    """
    violation_count counts each element at most once, whether it was clamped,
    lies outside the bleed region, or both.
    content_bounds is the extent of the whole transformed tree (None when empty).
    Raises InvalidGeometryError for a negative or non-finite bleed_percent.
    """
    region = bleed_region(target_rect, bleed_percent)
    clamped: list[str] = []
    outside: list[str] = []
    for el in iter_tree(elements):
        if el.clamped:
            clamped.append(el.id)
        if not rect_contains_with_tol(region, el.rect, tolerance=tolerance):
            outside.append(el.id)
    return SafetyReport(
        allowed_bleed=bleed_percent > 0,
        violation_count=len(set(clamped) | set(outside)),
        clamped_ids=tuple(clamped),
        outside_ids=tuple(outside),
        content_bounds=element_tree_bounds(elements),
    )
