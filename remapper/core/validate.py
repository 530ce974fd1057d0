# remapper/core/validate.py
"""
Procedural integrity: every payload must be wired to the slot it declares as its destination.
A connected but mismatched wiring counts as unfilled, never as filled-but-wrong.
"""

from __future__ import annotations

import logging
from typing import Iterable

from remapper.core.error_codes import (
    DESTINATION_MISMATCH,
    DUPLICATE_SLOT_WIRING,
    UNKNOWN_SLOT,
)
from remapper.core.geometry import iter_tree
from remapper.core.types import (
    AssemblyReport,
    Payload,
    SlotStatus,
    SlotWiring,
    Template,
    ValidationIssue,
)

logger = logging.getLogger(__name__)


def _issue(slot_name: str, payload: Payload, code: str) -> ValidationIssue:
    declared = payload.target_container
    if code == DESTINATION_MISMATCH:
        msg = f"PROCEDURAL VIOLATION: Payload targeting '{declared}' is miswired to slot '{slot_name}'."
    elif code == UNKNOWN_SLOT:
        msg = f"PROCEDURAL VIOLATION: Slot '{slot_name}' does not exist in the template."
    else:
        msg = f"PROCEDURAL VIOLATION: Slot '{slot_name}' already has a payload; extra wiring ignored."
    return ValidationIssue(slot_name=slot_name, declared_destination=declared, code=code, message=msg)


def validate_assembly(template: Template | None, wirings: Iterable[SlotWiring]) -> AssemblyReport:
    """
    Cross-check each wired payload's declared destination against the slot it occupies.
    Export-ready iff template resolved, every slot filled by a matching payload, at least one
    slot, and no violations (see AssemblyReport.is_fully_assembled).
    """
    if template is None:
        return AssemblyReport(template_resolved=False, total_slots=0, filled_slots=0)

    slot_names = {s.name for s in template.slots}
    assignments: dict[str, Payload] = {}
    violations: list[ValidationIssue] = []

    for wiring in wirings:
        payload = wiring.payload
        if payload is None:
            continue
        if payload.target_container != wiring.slot_name:
            violations.append(_issue(wiring.slot_name, payload, DESTINATION_MISMATCH))
        elif wiring.slot_name not in slot_names:
            violations.append(_issue(wiring.slot_name, payload, UNKNOWN_SLOT))
        elif wiring.slot_name in assignments:
            violations.append(_issue(wiring.slot_name, payload, DUPLICATE_SLOT_WIRING))
        else:
            assignments[wiring.slot_name] = payload

    for v in violations:
        logger.error(v.message)

    slots = [
        SlotStatus(
            slot_name=s.name,
            is_filled=s.name in assignments,
            assigned_element_count=(
                sum(1 for _ in iter_tree(assignments[s.name].elements)) if s.name in assignments else 0
            ),
        )
        for s in template.slots
    ]
    return AssemblyReport(
        template_resolved=True,
        total_slots=len(template.slots),
        filled_slots=len(assignments),
        violations=violations,
        slots=slots,
        assignments=assignments,
    )
