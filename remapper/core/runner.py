# remapper/core/runner.py
"""
CLI entrypoint: load source document, template, wiring and optional strategies; remap every
wiring; validate the assembly; reconstruct and export the output document when fully assembled.
"""

from __future__ import annotations

import argparse
import logging
import math
import os
import sys
from dataclasses import dataclass
from pathlib import Path

from remapper.core.config import MAX_BOUNDARY_VIOLATION_PERCENT
from remapper.core.error_codes import MissingSourceContainerError, RemapError, user_message
from remapper.core.io import (
    extract_source_context,
    load_document,
    load_strategies,
    load_template,
    load_wiring_manifest,
)
from remapper.core.reconstruct import build_content_index, build_output_document
from remapper.core.remap import RemapInstance, run_remap_instances
from remapper.core.reporting import (
    ensure_report_dir,
    export_name,
    write_assembly_report_json,
    write_document_json,
    write_payloads_json,
    write_run_metadata_json,
    write_template_json,
)
from remapper.core.types import (
    AssemblyReport,
    Document,
    LayoutStrategy,
    RemapOutcome,
    SlotWiring,
    Template,
)
from remapper.core.validate import validate_assembly

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    outcomes: list[RemapOutcome]
    report: AssemblyReport
    document: Document | None
    error_key: str | None = None
    error_message: str | None = None


def run_pipeline(
    source: Document,
    source_id: str,
    template: Template,
    wiring: list[dict[str, str]],
    strategies: dict[str, LayoutStrategy] | None = None,
    bleed_percent: float = MAX_BOUNDARY_VIOLATION_PERCENT,
) -> PipelineResult:
    """
    Remap each wiring row, validate, and reconstruct when export-ready.
    Reconstruction failures are reported on the result; no partial document is returned.
    """
    strategies = strategies or {}
    instances: list[RemapInstance] = []
    source_errors: dict[int, RemapError] = {}
    for i, row in enumerate(wiring):
        try:
            ctx = extract_source_context(source, row["source"], source_id, strategies.get(row["source"]))
        except MissingSourceContainerError as e:
            logger.warning("Wiring %s -> %s: %s", row["source"], row["target"], e)
            source_errors[i] = e
            ctx = None
        instances.append(RemapInstance(source=ctx, template=template, target_handle=row["target"]))

    outcomes = run_remap_instances(instances, bleed_percent=bleed_percent)
    for i, e in source_errors.items():
        outcomes[i] = RemapOutcome(index=i, error_key=e.code, message=str(e))
    wirings = [
        SlotWiring(slot_name=row["slot"], payload=outcome.payload)
        for row, outcome in zip(wiring, outcomes)
    ]
    report = validate_assembly(template, wirings)
    if not report.is_fully_assembled:
        return PipelineResult(outcomes=outcomes, report=report, document=None)

    try:
        indexes = {source_id: build_content_index(source, source_id)}
        document = build_output_document(template, report.assignments, indexes)
    except RemapError as e:
        logger.error("Export failed: %s", e)
        return PipelineResult(outcomes=outcomes, report=report, document=None,
                              error_key=e.code, error_message=str(e))
    return PipelineResult(outcomes=outcomes, report=report, document=document)


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Procedural remap and reconstruction.")
    p.add_argument("--source", type=str, required=True, help="Source document JSON (repo-relative)")
    p.add_argument("--source-id", type=str, default=None, dest="source_id", help="Source document id (default: file stem)")
    p.add_argument("--template", type=str, required=True, help="Template JSON or template document JSON")
    p.add_argument("--wiring", type=str, required=True, help="Wiring manifest JSON")
    p.add_argument("--strategy", type=str, default=None, help="Strategies JSON keyed by source container")
    p.add_argument("--bleed-percent", type=float, default=MAX_BOUNDARY_VIOLATION_PERCENT, dest="bleed_percent",
                   help="Vertical bleed fraction of target height")
    p.add_argument("--run-name", type=str, default="run", dest="run_name", help="Reports subdir name")
    p.add_argument("--output-dir", type=str, default="reports", dest="output_dir", help="Output directory (repo-relative)")
    p.add_argument("--output-name", type=str, default=None, dest="output_name", help="Output document file stem")
    p.add_argument("--repo-root", type=str, default=None, dest="repo_root", help="Repo root (default: cwd)")
    args = p.parse_args(argv)
    if not math.isfinite(args.bleed_percent) or args.bleed_percent < 0:
        p.error(f"--bleed-percent must be finite and >= 0, got {args.bleed_percent}")
    return args


def main(argv: list[str] | None = None) -> int:
    log_level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, log_level_name, logging.INFO))

    args = _parse_args(argv)
    repo_root = Path(args.repo_root).resolve() if args.repo_root else Path.cwd().resolve()

    source = load_document(args.source, repo_root)
    source_id = args.source_id or Path(args.source).stem
    template = load_template(args.template, repo_root)
    wiring = load_wiring_manifest(args.wiring, repo_root)
    strategies = load_strategies(args.strategy, repo_root) if args.strategy else {}

    result = run_pipeline(source, source_id, template, wiring, strategies, bleed_percent=args.bleed_percent)

    report_dir = ensure_report_dir(repo_root, args.run_name, output_dir=args.output_dir)
    paths = [
        write_payloads_json(report_dir, result.outcomes),
        write_assembly_report_json(report_dir, result.report),
        write_template_json(report_dir, template),
        write_run_metadata_json(
            report_dir, args.run_name, args.source, args.template, args.wiring,
            args.strategy, args.bleed_percent,
        ),
    ]
    if result.document is not None:
        stem = args.output_name or export_name()
        paths.append(write_document_json(report_dir, result.document, name=f"{stem}.json"))

    for p in paths:
        print(p)

    if result.error_key is not None:
        print("Export failed:", user_message(result.error_key), file=sys.stderr)
        return 1
    if not result.report.is_fully_assembled:
        reason = result.report.blocking_reason()
        print("Not exported:", user_message(reason), file=sys.stderr)
        for v in result.report.violations:
            print(v.message, file=sys.stderr)
        return 2
    print("Exported slots:", result.report.filled_slots)
    return 0


if __name__ == "__main__":
    sys.exit(main())
