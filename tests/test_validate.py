"""
Procedural integrity validator: destination mismatches, unknown slots, duplicate wirings,
slot status and export readiness.
"""

from __future__ import annotations

from remapper.core import error_codes
from remapper.core.types import (
    AppliedTransform,
    Payload,
    PayloadMetrics,
    Rect,
    SlotWiring,
    TargetSlot,
    Template,
    TransformedElement,
)
from remapper.core.validate import validate_assembly


def _template(*names: str) -> Template:
    return Template(
        canvas_width=100,
        canvas_height=100,
        slots=tuple(
            TargetSlot(id=str(i), name=n, original_name=f"!!{n}", bounds=Rect(0, 0, 10, 10))
            for i, n in enumerate(names)
        ),
    )


def _payload(target: str, n_children: int = 0) -> Payload:
    t = AppliedTransform(1.0, 1.0, 0.0, 0.0)
    children = tuple(
        TransformedElement(id=f"{target}-c{i}", kind="leaf", visible=True, opacity=1.0,
                           rect=Rect(0, 0, 1, 1), transform=t)
        for i in range(n_children)
    )
    root = TransformedElement(id=f"{target}-root", kind="group", visible=True, opacity=1.0,
                              rect=Rect(0, 0, 10, 10), transform=t, children=children)
    return Payload(
        source_document_id="doc",
        source_container=target,
        target_container=target,
        elements=(root,),
        scale_factor=1.0,
        metrics=PayloadMetrics(10, 10, 10, 10),
    )


def test_all_slots_matched_is_fully_assembled() -> None:
    template = _template("BG", "TITLE")
    report = validate_assembly(template, [SlotWiring("BG", _payload("BG")), SlotWiring("TITLE", _payload("TITLE"))])
    assert report.filled_slots == 2
    assert report.violations == []
    assert report.is_fully_assembled is True
    assert report.blocking_reason() is None
    assert set(report.assignments) == {"BG", "TITLE"}


def test_one_miswired_slot_of_n() -> None:
    template = _template("A", "B", "C", "D")
    wirings = [
        SlotWiring("A", _payload("A")),
        SlotWiring("B", _payload("B")),
        SlotWiring("C", _payload("C")),
        SlotWiring("D", _payload("C")),
    ]
    report = validate_assembly(template, wirings)
    assert report.filled_slots == 3
    assert len(report.violations) == 1
    assert report.is_fully_assembled is False
    v = report.violations[0]
    assert v.slot_name == "D"
    assert v.declared_destination == "C"
    assert v.code == error_codes.DESTINATION_MISMATCH
    assert v.type == "PROCEDURAL_VIOLATION"
    assert "'C'" in v.message and "'D'" in v.message
    assert "D" not in report.assignments
    assert report.blocking_reason() == error_codes.DESTINATION_MISMATCH


def test_unfilled_slot_is_incomplete() -> None:
    report = validate_assembly(_template("BG", "TITLE"), [SlotWiring("BG", _payload("BG")), SlotWiring("TITLE")])
    assert report.filled_slots == 1
    assert report.violations == []
    assert report.is_fully_assembled is False
    assert report.blocking_reason() == error_codes.INCOMPLETE_ASSEMBLY


def test_no_template_not_ready() -> None:
    report = validate_assembly(None, [SlotWiring("BG", _payload("BG"))])
    assert report.template_resolved is False
    assert report.is_fully_assembled is False
    assert report.blocking_reason() == error_codes.TEMPLATE_MISSING


def test_empty_template_not_ready() -> None:
    report = validate_assembly(_template(), [])
    assert report.total_slots == 0
    assert report.is_fully_assembled is False
    assert report.blocking_reason() == error_codes.INCOMPLETE_ASSEMBLY


def test_unknown_slot_is_violation() -> None:
    report = validate_assembly(_template("BG"), [SlotWiring("BG", _payload("BG")), SlotWiring("X", _payload("X"))])
    assert report.filled_slots == 1
    assert [v.code for v in report.violations] == [error_codes.UNKNOWN_SLOT]
    assert report.is_fully_assembled is False


def test_duplicate_wiring_keeps_first() -> None:
    first = _payload("BG", n_children=1)
    second = _payload("BG", n_children=2)
    report = validate_assembly(_template("BG"), [SlotWiring("BG", first), SlotWiring("BG", second)])
    assert report.assignments["BG"] is first
    assert [v.code for v in report.violations] == [error_codes.DUPLICATE_SLOT_WIRING]
    assert report.is_fully_assembled is False


def test_slot_status_in_template_order() -> None:
    template = _template("BG", "TITLE", "LOGO")
    report = validate_assembly(template, [SlotWiring("LOGO", _payload("LOGO", n_children=3)), SlotWiring("BG", _payload("BG"))])
    assert [s.slot_name for s in report.slots] == ["BG", "TITLE", "LOGO"]
    assert [s.is_filled for s in report.slots] == [True, False, True]
    assert report.slots[2].assigned_element_count == 4
    assert report.slots[0].assigned_element_count == 1
    assert report.slots[1].assigned_element_count == 0
