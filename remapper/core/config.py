# remapper/core/config.py
"""
Central configuration for procedural remapping and reconstruction.
All tunable values live here; no magic numbers in other modules.
"""

from __future__ import annotations
import os

# ----- Paths (repo-relative) -----
REPORTS_DIR: str = "reports"

OUTPUT_DOCUMENT_NAME: str = "output_document.json"
"""File name of the reconstructed document inside a run's report dir."""

EXPORT_NAME_PREFIX: str = "PROCEDURAL_EXPORT"
"""Stem used for exported documents when no explicit name is given."""

SCHEMA_VERSION: str = "1.0"

# ----- Boundary enforcement -----
MAX_BOUNDARY_VIOLATION_PERCENT: float = 0.03
"""Bleed: fraction of target height content may overflow vertically before clamping."""

GEOMETRY_TOLERANCE: float = 1e-6
"""Tolerance for rect containment checks in the safety report."""

# ----- Heavy document format -----
OPACITY_MAX: int = 255
"""Integer opacity domain of heavy layers: 0 (transparent) .. OPACITY_MAX (opaque)."""

CONTAINER_PREFIX: str = "!!"
"""Top-level groups whose name starts with this prefix are template containers."""

ID_PATH_SEPARATOR: str = "."
"""Separator for index-path identifiers ("0.2.1") of layers without an explicit id."""

# ----- Slot matching -----
SLOT_BOUNDS_PREFIX: str = "slot-bounds-"
"""Handle prefix for bounds outputs, e.g. 'slot-bounds-BG'."""

PROXY_HANDLE_PATTERN: str = r"^target-out-(\d+)$"
"""Indexed proxy handles resolve to the template slot at that index."""

# ----- Layout strategy -----
ANCHOR_MODES: tuple[str, ...] = ("TOP", "CENTER", "BOTTOM", "STRETCH")
DEFAULT_ANCHOR: str = "CENTER"

# ----- Debug flags -----
REMAP_DEBUG: bool = os.environ.get("REMAP_DEBUG", "").lower() in ("1", "true", "yes")
"""Trace per-element placement at debug level. Set env REMAP_DEBUG=1 to enable."""
