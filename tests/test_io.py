"""
Loaders and element extraction: ids, opacity scaling, container discovery, strategies and wiring.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from remapper.core.error_codes import MissingSourceContainerError
from remapper.core.io import (
    document_from_dict,
    extract_elements,
    extract_source_context,
    load_json,
    load_strategies,
    load_template,
    load_wiring_manifest,
    strategy_from_dict,
    template_from_document,
)

DOC = {
    "width": 100,
    "height": 300,
    "children": [
        {
            "name": "!!BG", "left": 0, "top": 0, "right": 100, "bottom": 200,
            "children": [
                {"id": "bg-fill", "name": "Fill", "left": 0, "top": 0, "right": 100, "bottom": 200},
                {"name": "Logo", "left": 10, "top": 20, "right": 50, "bottom": 60, "hidden": True, "opacity": 51,
                 "children": [{"name": "Mark", "left": 12, "top": 22, "right": 20, "bottom": 30}]},
            ],
        },
        {"name": "loose", "left": 0, "top": 0, "right": 5, "bottom": 5},
        {"name": "!!TITLE", "left": 0, "top": 200, "right": 100, "bottom": 300, "children": []},
        {"name": "!!not-a-group", "left": 0, "top": 0, "right": 1, "bottom": 1},
    ],
}


def _write(tmp: str, name: str, data: object) -> Path:
    p = Path(tmp) / name
    p.write_text(json.dumps(data), encoding="utf-8")
    return p


def test_extract_elements_ids_and_values() -> None:
    elements = extract_elements(document_from_dict(DOC))
    assert [e.id for e in elements] == ["0", "1", "2", "3"]
    bg = elements[0]
    assert bg.kind == "group"
    assert [c.id for c in bg.children] == ["bg-fill", "0.1"]
    logo = bg.children[1]
    assert logo.visible is False
    assert logo.opacity == pytest.approx(0.2)
    assert logo.rect.as_tuple() == (10, 20, 40, 40)
    assert logo.children[0].id == "0.1.0"
    assert bg.children[0].opacity == 1.0
    assert elements[1].kind == "leaf"


def test_template_from_document_uses_prefixed_groups() -> None:
    template = template_from_document(document_from_dict(DOC))
    assert [s.name for s in template.slots] == ["BG", "TITLE"]
    assert [s.original_name for s in template.slots] == ["!!BG", "!!TITLE"]
    assert template.slots[1].bounds.as_tuple() == (0, 200, 100, 100)
    assert (template.canvas_width, template.canvas_height) == (100, 300)
    assert template.slots[1].normalized(100, 300).as_tuple() == pytest.approx((0, 2 / 3, 1, 1 / 3))
    assert template.slots[1].normalized(0, 0).as_tuple() == (0, 0, 0, 0)


def test_extract_source_context() -> None:
    ctx = extract_source_context(document_from_dict(DOC), "BG", "src")
    assert ctx.bounds.as_tuple() == (0, 0, 100, 200)
    assert ctx.document_id == "src"
    assert [e.id for e in ctx.elements] == ["bg-fill", "0.1"]
    assert ctx.strategy is None


def test_extract_source_context_missing_container() -> None:
    with pytest.raises(LookupError) as exc:
        extract_source_context(document_from_dict(DOC), "LOGO", "src")
    assert isinstance(exc.value, MissingSourceContainerError)
    assert exc.value.code == "missing_source_container"


def test_load_template_json_and_document() -> None:
    template_json = {
        "canvas": {"width": 60, "height": 80},
        "containers": [
            {"id": "c0", "name": "BG", "originalName": "!!BG", "bounds": {"x": 10, "y": 10, "w": 50, "h": 50}},
            {"name": "TITLE", "bounds": {"x": 0, "y": 60, "w": 60, "h": 20}},
        ],
    }
    with tempfile.TemporaryDirectory() as tmp:
        t1 = load_template(_write(tmp, "template.json", template_json))
        _write(tmp, "doc.json", DOC)
        t2 = load_template("doc.json", repo_root=Path(tmp))
    assert [s.name for s in t1.slots] == ["BG", "TITLE"]
    assert t1.slots[1].original_name == "TITLE"
    assert t1.slots[1].id == "1"
    assert t1.slots[0].bounds.as_tuple() == (10, 10, 50, 50)
    assert [s.name for s in t2.slots] == ["BG", "TITLE"]


def test_strategy_from_dict() -> None:
    strategy = strategy_from_dict({
        "suggestedScale": 0.5,
        "anchor": "TOP",
        "overrides": [{"layerId": "bg-fill", "xOffset": 3, "yOffset": 4}],
        "reasoning": "fit width",
    })
    assert strategy.suggested_scale == 0.5
    assert strategy.anchor == "TOP"
    assert strategy.overrides[0].individual_scale == 1.0
    assert strategy.override_for("bg-fill").x_offset == 3  # type: ignore[union-attr]
    assert strategy_from_dict({"suggestedScale": 1}).anchor == "CENTER"
    assert strategy_from_dict({"suggestedScale": 1, "anchor": "middle"}).anchor == "CENTER"
    assert strategy_from_dict({"suggestedScale": 1, "anchor": "bottom"}).anchor == "BOTTOM"
    with pytest.raises(ValueError):
        strategy_from_dict({"anchor": "TOP"})


def test_load_strategies_and_wiring() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        strategies = load_strategies(_write(tmp, "s.json", {"BG": {"suggestedScale": 0.3}}))
        wiring = load_wiring_manifest(_write(tmp, "w.json", [
            {"source": "BG", "target": "BG"},
            {"source": "TITLE", "target": "slot-bounds-TITLE", "slot": "TITLE"},
        ]))
        with pytest.raises(ValueError):
            load_wiring_manifest(_write(tmp, "bad.json", [{"source": "BG"}]))
    assert strategies["BG"].suggested_scale == 0.3
    assert wiring[0]["slot"] == "BG"
    assert wiring[1] == {"source": "TITLE", "target": "slot-bounds-TITLE", "slot": "TITLE"}


def test_load_json_errors() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        with pytest.raises(FileNotFoundError):
            load_json(Path(tmp) / "missing.json")
        bad = Path(tmp) / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError):
            load_json(bad)
