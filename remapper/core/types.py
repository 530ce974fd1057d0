# remapper/core/types.py
"""
Dataclasses for geometry, element trees, templates, strategies, payloads and assembly reports.
Value types are frozen; a Payload is superseded wholesale by the next computation, never mutated.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Literal

from remapper.core import error_codes
from remapper.core.error_codes import InvalidGeometryError


ElementKind = Literal["leaf", "group"]
AnchorMode = Literal["TOP", "CENTER", "BOTTOM", "STRETCH"]
PayloadStatus = Literal["success", "error", "idle"]

HeavyLayer = dict[str, Any]
"""A heavy layer: opaque original properties plus name/top/left/bottom/right/hidden/opacity/children."""


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rect, origin top-left, y increasing downward."""
    x: float
    y: float
    w: float
    h: float

    def __post_init__(self) -> None:
        for name in ("x", "y", "w", "h"):
            if not math.isfinite(getattr(self, name)):
                raise InvalidGeometryError(f"Rect.{name} must be finite, got {getattr(self, name)!r}")
        if self.w < 0 or self.h < 0:
            raise InvalidGeometryError(f"Rect size must be non-negative, got w={self.w}, h={self.h}")

    @property
    def right(self) -> float:
        return self.x + self.w

    @property
    def bottom(self) -> float:
        return self.y + self.h

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.x, self.y, self.w, self.h)

    @classmethod
    def from_edges(cls, left: float, top: float, right: float, bottom: float) -> Rect:
        return cls(x=left, y=top, w=right - left, h=bottom - top)


@dataclass(frozen=True)
class Element:
    """A source element (leaf or group) in the lightweight tree extracted from a document."""
    id: str
    kind: ElementKind
    visible: bool
    opacity: float  # [0, 1]
    rect: Rect
    children: tuple[Element, ...] = ()
    name: str = ""


@dataclass(frozen=True)
class AppliedTransform:
    """Scale and final top-left position actually applied to one element."""
    scale_x: float
    scale_y: float
    offset_x: float
    offset_y: float


@dataclass(frozen=True)
class TransformedElement:
    """Element with its resolved placement. Same id, kind and child order as its source."""
    id: str
    kind: ElementKind
    visible: bool
    opacity: float
    rect: Rect
    transform: AppliedTransform
    children: tuple[TransformedElement, ...] = ()
    name: str = ""
    clamped: bool = False


@dataclass(frozen=True)
class TargetSlot:
    """A named destination region of a template."""
    id: str
    name: str
    original_name: str
    bounds: Rect

    def normalized(self, canvas_width: float, canvas_height: float) -> Rect:
        """Bounds as fractions of the canvas; zero-sized canvas axes map to 0."""
        sx = 1.0 / canvas_width if canvas_width > 0 else 0.0
        sy = 1.0 / canvas_height if canvas_height > 0 else 0.0
        b = self.bounds
        return Rect(x=b.x * sx, y=b.y * sy, w=b.w * sx, h=b.h * sy)


@dataclass(frozen=True)
class Template:
    """Ordered slots plus canvas dimensions. Slot names are unique."""
    canvas_width: float
    canvas_height: float
    slots: tuple[TargetSlot, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for slot in self.slots:
            if slot.name in seen:
                raise ValueError(f"Duplicate slot name in template: {slot.name!r}")
            seen.add(slot.name)

    def slot_by_name(self, name: str) -> TargetSlot | None:
        for slot in self.slots:
            if slot.name == name:
                return slot
        return None


@dataclass(frozen=True)
class LayerOverride:
    """Absolute placement (relative to the target slot origin) and scale multiplier for one element."""
    layer_id: str
    x_offset: float
    y_offset: float
    individual_scale: float = 1.0


@dataclass(frozen=True)
class LayoutStrategy:
    """Externally supplied placement override. Consumed, never generated, by the engine."""
    suggested_scale: float
    anchor: AnchorMode = "CENTER"
    overrides: tuple[LayerOverride, ...] = ()
    generative_prompt: str = ""
    reasoning: str = ""

    def override_for(self, layer_id: str) -> LayerOverride | None:
        """First matching override wins."""
        for override in self.overrides:
            if override.layer_id == layer_id:
                return override
        return None


@dataclass(frozen=True)
class SourceContext:
    """One source container: its bounds, element tree and (optionally) an injected strategy."""
    container_name: str
    bounds: Rect
    elements: tuple[Element, ...]
    document_id: str
    strategy: LayoutStrategy | None = None


@dataclass(frozen=True)
class TransformParams:
    """Base transform for a whole element tree."""
    scale: float
    anchor_x: float
    anchor_y: float


@dataclass(frozen=True)
class PayloadMetrics:
    source_w: float
    source_h: float
    target_w: float
    target_h: float


@dataclass(frozen=True)
class SafetyReport:
    """Boundary diagnostics of one payload."""
    allowed_bleed: bool
    violation_count: int
    clamped_ids: tuple[str, ...] = ()
    outside_ids: tuple[str, ...] = ()
    content_bounds: Rect | None = None


@dataclass(frozen=True)
class Payload:
    """Result of one remap: transformed tree plus its declared destination."""
    source_document_id: str
    source_container: str
    target_container: str
    elements: tuple[TransformedElement, ...]
    scale_factor: float
    metrics: PayloadMetrics
    strategy_used: bool = False
    safety: SafetyReport | None = None
    status: PayloadStatus = "success"


@dataclass(frozen=True)
class SlotWiring:
    """A connection of a payload (or nothing yet) to a slot of the export template."""
    slot_name: str
    payload: Payload | None = None


@dataclass(frozen=True)
class ValidationIssue:
    """A wiring the validator refused to count as filled."""
    slot_name: str
    declared_destination: str
    code: str
    message: str
    type: str = "PROCEDURAL_VIOLATION"


@dataclass(frozen=True)
class SlotStatus:
    slot_name: str
    is_filled: bool
    assigned_element_count: int = 0


@dataclass
class AssemblyReport:
    """Validator output: per-slot status, violations and the matched payload per slot."""
    template_resolved: bool
    total_slots: int
    filled_slots: int
    violations: list[ValidationIssue] = field(default_factory=list)
    slots: list[SlotStatus] = field(default_factory=list)
    assignments: dict[str, Payload] = field(default_factory=dict)

    @property
    def is_fully_assembled(self) -> bool:
        return (
            self.template_resolved
            and self.filled_slots == self.total_slots
            and self.total_slots > 0
            and not self.violations
        )

    def blocking_reason(self) -> str | None:
        """Error key explaining why export is disabled, or None when export-ready."""
        if not self.template_resolved:
            return error_codes.TEMPLATE_MISSING
        if self.violations:
            return self.violations[0].code
        if self.total_slots == 0 or self.filled_slots < self.total_slots:
            return error_codes.INCOMPLETE_ASSEMBLY
        return None


@dataclass
class Document:
    """Heavy document: canvas size and top-level heavy layers."""
    width: float
    height: float
    children: list[HeavyLayer] = field(default_factory=list)


@dataclass
class RemapOutcome:
    """Result of one remap instance; either a payload or an error key with message."""
    index: int
    payload: Payload | None = None
    error_key: str | None = None
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.payload is not None and self.error_key is None
