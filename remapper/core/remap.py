# remapper/core/remap.py
"""
Remap pipeline for one source -> target wiring: resolve transform, transform the tree,
package a Payload. Multiple instances are computed independently; a failure in one is
captured in its RemapOutcome and never affects the others.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from remapper.core.config import MAX_BOUNDARY_VIOLATION_PERCENT
from remapper.core.error_codes import RemapError
from remapper.core.matching import DEFAULT_SLOT_MATCHERS, SlotMatcher, resolve_target_slot
from remapper.core.resolver import resolve_transform
from remapper.core.safety import safety_report
from remapper.core.transformer import transform_elements
from remapper.core.types import (
    Payload,
    PayloadMetrics,
    RemapOutcome,
    SourceContext,
    TargetSlot,
    Template,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemapInstance:
    """One wiring: a source container and a target handle on a template. Either side may be unconnected."""
    source: SourceContext | None
    template: Template | None
    target_handle: str | None


def compute_payload(
    source: SourceContext,
    target: TargetSlot,
    bleed_percent: float = MAX_BOUNDARY_VIOLATION_PERCENT,
) -> Payload:
    """
    Resolver -> transformer -> Payload. The payload declares target.name as its destination.
    Raises InvalidGeometryError for unusable source bounds or strategy scale.
    """
    params = resolve_transform(source.bounds, target.bounds, source.strategy)
    transformed = transform_elements(
        source.elements,
        source.bounds,
        target.bounds,
        params.scale,
        params.anchor_x,
        params.anchor_y,
        strategy=source.strategy,
        bleed_percent=bleed_percent,
    )
    return Payload(
        source_document_id=source.document_id,
        source_container=source.container_name,
        target_container=target.name,
        elements=tuple(transformed),
        scale_factor=params.scale,
        metrics=PayloadMetrics(
            source_w=source.bounds.w,
            source_h=source.bounds.h,
            target_w=target.bounds.w,
            target_h=target.bounds.h,
        ),
        strategy_used=source.strategy is not None,
        safety=safety_report(transformed, target.bounds, bleed_percent=bleed_percent),
    )


def remap(
    source: SourceContext,
    template: Template,
    target_handle: str,
    matchers: Sequence[SlotMatcher] = DEFAULT_SLOT_MATCHERS,
    bleed_percent: float = MAX_BOUNDARY_VIOLATION_PERCENT,
) -> Payload:
    """Resolve target_handle against template, then compute the payload."""
    target = resolve_target_slot(template, target_handle, matchers)
    return compute_payload(source, target, bleed_percent=bleed_percent)


def run_remap_instance(
    index: int,
    instance: RemapInstance,
    matchers: Sequence[SlotMatcher] = DEFAULT_SLOT_MATCHERS,
    bleed_percent: float = MAX_BOUNDARY_VIOLATION_PERCENT,
) -> RemapOutcome:
    """Unconnected instances give an empty outcome; pipeline errors are recorded, not raised."""
    if instance.source is None or instance.template is None or not instance.target_handle:
        return RemapOutcome(index=index)
    try:
        payload = remap(
            instance.source,
            instance.template,
            instance.target_handle,
            matchers=matchers,
            bleed_percent=bleed_percent,
        )
    except RemapError as e:
        logger.warning("Remap instance %d (%s -> %s) failed: %s",
                       index, instance.source.container_name, instance.target_handle, e)
        return RemapOutcome(index=index, error_key=e.code, message=str(e))
    return RemapOutcome(index=index, payload=payload)


def run_remap_instances(
    instances: Sequence[RemapInstance],
    matchers: Sequence[SlotMatcher] = DEFAULT_SLOT_MATCHERS,
    bleed_percent: float = MAX_BOUNDARY_VIOLATION_PERCENT,
) -> list[RemapOutcome]:
    """Compute every instance in isolation, in input order."""
    outcomes = [
        run_remap_instance(i, inst, matchers=matchers, bleed_percent=bleed_percent)
        for i, inst in enumerate(instances)
    ]
    failed = sum(1 for o in outcomes if o.error_key is not None)
    if failed:
        logger.info("Remapped %d instance(s), %d failed.", len(outcomes) - failed, failed)
    return outcomes

