# remapper/core/geometry.py
"""
Geometry helpers: rect <-> polygon, bounds of element trees, uniform-fit scale,
centered anchoring, bleed band and clamping, containment with tolerance.
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

import numpy as np
from shapely.geometry import Point, Polygon, box
from shapely.geometry.base import BaseGeometry

from remapper.core.config import GEOMETRY_TOLERANCE
from remapper.core.error_codes import InvalidGeometryError
from remapper.core.types import Element, Rect, TransformedElement


def rect_to_polygon(rect: Rect) -> Polygon:
    """Rect as a shapely box; zero-area rects give a degenerate (empty-area) polygon."""
    return box(rect.x, rect.y, rect.right, rect.bottom)


def rect_bounds(rect: Rect) -> tuple[float, float, float, float]:
    """Return (minx, miny, maxx, maxy)."""
    return (rect.x, rect.y, rect.right, rect.bottom)


def require_positive_size(rect: Rect, what: str = "source") -> None:
    """Reject zero/negative or non-finite dimensions before any division by them."""
    if not (math.isfinite(rect.w) and math.isfinite(rect.h)) or rect.w <= 0 or rect.h <= 0:
        raise InvalidGeometryError(
            f"{what} rect must have positive width and height, got w={rect.w}, h={rect.h}"
        )


def uniform_fit_scale(source: Rect, target: Rect) -> float:
    """min(tw/sw, th/sh): the largest uniform scale that fits source inside target."""
    require_positive_size(source, "source")
    return min(target.w / source.w, target.h / source.h)


def centered_offset(origin: float, extent: float, content: float) -> float:
    """Position that centers `content` inside [origin, origin + extent]."""
    return origin + (extent - content) / 2.0


def require_bleed_percent(bleed_percent: float) -> None:
    """Bleed must be finite and non-negative; raises InvalidGeometryError otherwise."""
    if not math.isfinite(bleed_percent) or bleed_percent < 0:
        raise InvalidGeometryError(f"bleed percent must be finite and >= 0, got {bleed_percent!r}")


def bleed_band(target: Rect, bleed_percent: float) -> tuple[float, float]:
    """Allowed vertical range for a final top position: target height +/- bleed."""
    require_bleed_percent(bleed_percent)
    bleed = target.h * bleed_percent
    return (target.y - bleed, target.y + target.h + bleed)


def clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(value, hi))


def bleed_region(target: Rect, bleed_percent: float) -> Polygon:
    """Target rect grown by the bleed fraction of its size on every side."""
    require_bleed_percent(bleed_percent)
    bx = target.w * bleed_percent
    by = target.h * bleed_percent
    return box(target.x - bx, target.y - by, target.right + bx, target.bottom + by)


def union_rect(rects: Sequence[Rect]) -> Rect | None:
    """Smallest rect covering all rects; None for an empty sequence."""
    if not rects:
        return None
    arr = np.array([rect_bounds(r) for r in rects], dtype=float)
    minx = float(np.min(arr[:, 0]))
    miny = float(np.min(arr[:, 1]))
    maxx = float(np.max(arr[:, 2]))
    maxy = float(np.max(arr[:, 3]))
    return Rect.from_edges(minx, miny, maxx, maxy)


def iter_tree(elements: Iterable[Element | TransformedElement]):
    """Depth-first, pre-order walk over an element tree."""
    for el in elements:
        yield el
        if el.children:
            yield from iter_tree(el.children)


def element_tree_bounds(elements: Iterable[Element | TransformedElement]) -> Rect | None:
    """Bounds of every rect in the tree (children may lie outside their parents)."""
    return union_rect([el.rect for el in iter_tree(elements)])


def rect_contains_with_tol(
    outer: BaseGeometry,
    rect: Rect,
    tolerance: float = GEOMETRY_TOLERANCE,
) -> bool:
    """
    True if rect lies inside outer, allowing `tolerance` of overflow.
    Zero-area rects are tested by their two corners.
    """
    if outer is None or outer.is_empty:
        return False
    grown = outer.buffer(tolerance, join_style=2) if tolerance > 0 else outer
    if rect.w == 0 or rect.h == 0:
        return grown.covers(Point(rect.x, rect.y)) and grown.covers(Point(rect.right, rect.bottom))
    return grown.covers(rect_to_polygon(rect))
