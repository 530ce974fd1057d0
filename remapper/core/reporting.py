# remapper/core/reporting.py
"""
Create reports/<run_name>/ and write the output document, assembly report, payloads
and run_metadata.json.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

from remapper.core.config import (
    EXPORT_NAME_PREFIX,
    GEOMETRY_TOLERANCE,
    MAX_BOUNDARY_VIOLATION_PERCENT,
    OPACITY_MAX,
    OUTPUT_DOCUMENT_NAME,
    REPORTS_DIR,
    SCHEMA_VERSION,
)
from remapper.core.error_codes import user_message
from remapper.core.types import (
    AssemblyReport,
    Document,
    Payload,
    Rect,
    RemapOutcome,
    Template,
    TransformedElement,
)


def rect_to_dict(rect: Rect) -> dict:
    return {"x": rect.x, "y": rect.y, "w": rect.w, "h": rect.h}


def transformed_to_dict(el: TransformedElement) -> dict:
    out = {
        "id": el.id,
        "name": el.name,
        "type": el.kind,
        "isVisible": el.visible,
        "opacity": el.opacity,
        "coords": rect_to_dict(el.rect),
        "transform": {
            "scaleX": el.transform.scale_x,
            "scaleY": el.transform.scale_y,
            "offsetX": el.transform.offset_x,
            "offsetY": el.transform.offset_y,
        },
    }
    if el.kind == "group":
        out["children"] = [transformed_to_dict(c) for c in el.children]
    return out


def payload_to_dict(payload: Payload) -> dict:
    """Payload as JSON-ready dict."""
    out = {
        "schema_version": SCHEMA_VERSION,
        "status": payload.status,
        "sourceDocumentId": payload.source_document_id,
        "sourceContainer": payload.source_container,
        "targetContainer": payload.target_container,
        "scaleFactor": payload.scale_factor,
        "strategyUsed": payload.strategy_used,
        "metrics": {
            "source": {"w": payload.metrics.source_w, "h": payload.metrics.source_h},
            "target": {"w": payload.metrics.target_w, "h": payload.metrics.target_h},
        },
        "layers": [transformed_to_dict(el) for el in payload.elements],
    }
    if payload.safety is not None:
        out["safetyReport"] = {
            "allowedBleed": payload.safety.allowed_bleed,
            "violationCount": payload.safety.violation_count,
            "clampedIds": list(payload.safety.clamped_ids),
            "outsideIds": list(payload.safety.outside_ids),
            "contentBounds": (
                rect_to_dict(payload.safety.content_bounds) if payload.safety.content_bounds is not None else None
            ),
        }
    return out


def outcome_to_dict(outcome: RemapOutcome) -> dict:
    return {
        "index": outcome.index,
        "ok": outcome.ok,
        "error": outcome.error_key,
        "message": outcome.message,
        "payload": payload_to_dict(outcome.payload) if outcome.payload is not None else None,
    }


def assembly_report_to_dict(report: AssemblyReport) -> dict:
    reason = report.blocking_reason()
    return {
        "schema_version": SCHEMA_VERSION,
        "isFullyAssembled": report.is_fully_assembled,
        "templateResolved": report.template_resolved,
        "totalSlots": report.total_slots,
        "filledSlots": report.filled_slots,
        "blockingReason": reason,
        "blockingMessage": user_message(reason) if reason else None,
        "slots": [
            {
                "containerName": s.slot_name,
                "isFilled": s.is_filled,
                "assignedLayerCount": s.assigned_element_count,
            }
            for s in report.slots
        ],
        "violations": [
            {
                "type": v.type,
                "code": v.code,
                "slotName": v.slot_name,
                "declaredDestination": v.declared_destination,
                "message": v.message,
            }
            for v in report.violations
        ],
    }


def template_to_dict(template: Template) -> dict:
    """Template in the loader's JSON shape, plus each slot's bounds normalized to the canvas."""
    return {
        "schema_version": SCHEMA_VERSION,
        "canvas": {"width": template.canvas_width, "height": template.canvas_height},
        "containers": [
            {
                "id": s.id,
                "name": s.name,
                "originalName": s.original_name,
                "bounds": rect_to_dict(s.bounds),
                "normalized": rect_to_dict(s.normalized(template.canvas_width, template.canvas_height)),
            }
            for s in template.slots
        ],
    }


def document_to_dict(document: Document) -> dict:
    return {"width": document.width, "height": document.height, "children": document.children}


def export_name(now: datetime | None = None) -> str:
    """Default export stem: PROCEDURAL_EXPORT_<unix ms>."""
    ts = now or datetime.now(timezone.utc)
    return f"{EXPORT_NAME_PREFIX}_{int(ts.timestamp() * 1000)}"


def run_metadata_dict(
    run_name: str,
    source_path: str,
    template_path: str,
    wiring_path: str,
    strategy_path: str | None,
    bleed_percent: float,
) -> dict:
    """Timestamp and config snapshot for run_metadata.json."""
    return {
        "run_name": run_name,
        "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        "source_path": source_path,
        "template_path": template_path,
        "wiring_path": wiring_path,
        "strategy_path": strategy_path,
        "bleed_percent": bleed_percent,
        "config": {
            "MAX_BOUNDARY_VIOLATION_PERCENT": MAX_BOUNDARY_VIOLATION_PERCENT,
            "GEOMETRY_TOLERANCE": GEOMETRY_TOLERANCE,
            "OPACITY_MAX": OPACITY_MAX,
            "SCHEMA_VERSION": SCHEMA_VERSION,
        },
    }


def ensure_report_dir(
    repo_root: Path,
    run_name: str,
    output_dir: str | None = None,
) -> Path:
    """Create output_dir/<run_name>/ under repo_root; return path. Default output_dir from config."""
    base = output_dir if output_dir is not None else REPORTS_DIR
    out = (repo_root / base).resolve() / run_name
    out.mkdir(parents=True, exist_ok=True)
    return out


def _write_json(path: Path, data: object) -> Path:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


def write_document_json(report_dir: Path, document: Document, name: str = OUTPUT_DOCUMENT_NAME) -> Path:
    """Write the reconstructed document for an external writer. Returns path to file."""
    return _write_json(report_dir / name, document_to_dict(document))


def write_assembly_report_json(report_dir: Path, report: AssemblyReport) -> Path:
    return _write_json(report_dir / "assembly_report.json", assembly_report_to_dict(report))


def write_template_json(report_dir: Path, template: Template) -> Path:
    return _write_json(report_dir / "template.json", template_to_dict(template))


def write_payloads_json(report_dir: Path, outcomes: Sequence[RemapOutcome]) -> Path:
    return _write_json(report_dir / "payloads.json", [outcome_to_dict(o) for o in outcomes])


def write_run_metadata_json(
    report_dir: Path,
    run_name: str,
    source_path: str,
    template_path: str,
    wiring_path: str,
    strategy_path: str | None,
    bleed_percent: float,
) -> Path:
    """Write run_metadata.json to report_dir."""
    data = run_metadata_dict(run_name, source_path, template_path, wiring_path, strategy_path, bleed_percent)
    return _write_json(report_dir / "run_metadata.json", data)
