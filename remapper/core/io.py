# remapper/core/io.py
"""
Load heavy documents, templates, strategies and wiring manifests from JSON, and extract the
lightweight element tree the transformer works on.
Heavy layers use top/left/bottom/right edges and 0..OPACITY_MAX opacity; elements use
x/y/w/h rects and [0, 1] opacity.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator, Mapping, Sequence

from remapper.core.config import (
    ANCHOR_MODES,
    CONTAINER_PREFIX,
    DEFAULT_ANCHOR,
    ID_PATH_SEPARATOR,
    OPACITY_MAX,
)
from remapper.core.error_codes import MissingSourceContainerError
from remapper.core.types import (
    Document,
    Element,
    HeavyLayer,
    LayerOverride,
    LayoutStrategy,
    Rect,
    SourceContext,
    TargetSlot,
    Template,
)

logger = logging.getLogger(__name__)


def _resolve_path(path: str | Path, repo_root: Path | None) -> Path:
    """Resolve path; if relative, against repo_root (or cwd if repo_root is None)."""
    p = Path(path)
    if not p.is_absolute() and repo_root is not None:
        p = repo_root / p
    return p.resolve()


def load_json(path: str | Path, repo_root: Path | None = None) -> Any:
    """Read a JSON file. Raises FileNotFoundError if missing, ValueError if not valid JSON."""
    resolved = _resolve_path(path, repo_root)
    if not resolved.exists():
        raise FileNotFoundError(f"Input file not found: {resolved}")
    try:
        return json.loads(resolved.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {resolved}: {e}") from e


# ----- Heavy documents -----

def layer_identifier(layer: Mapping[str, Any], path: str) -> str:
    """Explicit 'id' when the layer has one, else its index path (e.g. '0.2.1')."""
    explicit = layer.get("id")
    if explicit is not None and str(explicit) != "":
        return str(explicit)
    return path


def walk_layers(
    children: Sequence[HeavyLayer],
    prefix: str = "",
) -> Iterator[tuple[str, HeavyLayer]]:
    """Yield (identifier, layer) for every heavy layer, depth-first, pre-order."""
    for i, layer in enumerate(children):
        path = f"{prefix}{ID_PATH_SEPARATOR}{i}" if prefix else str(i)
        yield layer_identifier(layer, path), layer
        sub = layer.get("children")
        if sub:
            yield from walk_layers(sub, path)


def is_group(layer: Mapping[str, Any]) -> bool:
    return isinstance(layer.get("children"), list)


def layer_rect(layer: Mapping[str, Any]) -> Rect:
    left = float(layer.get("left", 0.0))
    top = float(layer.get("top", 0.0))
    right = float(layer.get("right", left))
    bottom = float(layer.get("bottom", top))
    return Rect.from_edges(left, top, max(left, right), max(top, bottom))


def document_from_dict(data: Mapping[str, Any]) -> Document:
    if not isinstance(data, Mapping):
        raise ValueError("Document JSON must be an object")
    children = data.get("children") or []
    if not isinstance(children, list):
        raise ValueError("Document 'children' must be a list")
    return Document(
        width=float(data.get("width", 0.0)),
        height=float(data.get("height", 0.0)),
        children=list(children),
    )


def load_document(path: str | Path, repo_root: Path | None = None) -> Document:
    """Load a heavy document from JSON."""
    return document_from_dict(load_json(path, repo_root))


def _element_from_layer(layer: HeavyLayer, path: str) -> Element:
    opacity = float(layer.get("opacity", OPACITY_MAX)) / OPACITY_MAX
    children: tuple[Element, ...] = ()
    group = is_group(layer)
    if group:
        children = tuple(
            _element_from_layer(child, f"{path}{ID_PATH_SEPARATOR}{i}")
            for i, child in enumerate(layer["children"])
        )
    return Element(
        id=layer_identifier(layer, path),
        kind="group" if group else "leaf",
        visible=not bool(layer.get("hidden", False)),
        opacity=min(1.0, max(0.0, opacity)),
        rect=layer_rect(layer),
        children=children,
        name=str(layer.get("name", "")),
    )


def extract_elements(document: Document) -> list[Element]:
    """Lightweight element tree of a whole document; ids match walk_layers."""
    return [_element_from_layer(layer, str(i)) for i, layer in enumerate(document.children)]


def _container_name(layer: Mapping[str, Any]) -> str | None:
    name = str(layer.get("name", ""))
    if is_group(layer) and name.startswith(CONTAINER_PREFIX):
        return name[len(CONTAINER_PREFIX):]
    return None


def template_from_document(document: Document) -> Template:
    """Top-level groups named '<CONTAINER_PREFIX><name>' become slots, in document order."""
    slots: list[TargetSlot] = []
    for i, layer in enumerate(document.children):
        name = _container_name(layer)
        if name is None:
            continue
        slots.append(TargetSlot(
            id=layer_identifier(layer, str(i)),
            name=name,
            original_name=str(layer.get("name", "")),
            bounds=layer_rect(layer),
        ))
    return Template(canvas_width=document.width, canvas_height=document.height, slots=tuple(slots))


def extract_source_context(
    document: Document,
    container_name: str,
    document_id: str,
    strategy: LayoutStrategy | None = None,
) -> SourceContext:
    """
    Source context of one container group: its children are the element tree, its bounds the source rect.
    Raises MissingSourceContainerError (a LookupError) if the document has no such container.
    """
    for i, layer in enumerate(document.children):
        if _container_name(layer) != container_name:
            continue
        path = str(i)
        elements = tuple(
            _element_from_layer(child, f"{path}{ID_PATH_SEPARATOR}{j}")
            for j, child in enumerate(layer["children"])
        )
        return SourceContext(
            container_name=container_name,
            bounds=layer_rect(layer),
            elements=elements,
            document_id=document_id,
            strategy=strategy,
        )
    raise MissingSourceContainerError(f"Container {container_name!r} not found in document {document_id!r}")


# ----- Templates -----

def _rect_from_dict(data: Mapping[str, Any]) -> Rect:
    return Rect(
        x=float(data.get("x", 0.0)),
        y=float(data.get("y", 0.0)),
        w=float(data.get("w", 0.0)),
        h=float(data.get("h", 0.0)),
    )


def template_from_dict(data: Mapping[str, Any]) -> Template:
    """Template JSON: {canvas: {width, height}, containers: [{id, name, originalName, bounds}]}."""
    canvas = data.get("canvas") or {}
    slots = []
    for i, c in enumerate(data.get("containers") or []):
        name = str(c["name"])
        slots.append(TargetSlot(
            id=str(c.get("id", i)),
            name=name,
            original_name=str(c.get("originalName") or name),
            bounds=_rect_from_dict(c.get("bounds") or {}),
        ))
    return Template(
        canvas_width=float(canvas.get("width", 0.0)),
        canvas_height=float(canvas.get("height", 0.0)),
        slots=tuple(slots),
    )


def load_template(path: str | Path, repo_root: Path | None = None) -> Template:
    """Load a template: either template JSON or a heavy document with container groups."""
    data = load_json(path, repo_root)
    if isinstance(data, Mapping) and "containers" in data:
        return template_from_dict(data)
    return template_from_document(document_from_dict(data))


# ----- Strategies -----

def strategy_from_dict(data: Mapping[str, Any]) -> LayoutStrategy:
    """Strategy JSON: {suggestedScale, anchor, overrides: [{layerId, xOffset, yOffset, individualScale}]}."""
    if "suggestedScale" not in data:
        raise ValueError("Strategy is missing 'suggestedScale'")
    overrides = tuple(
        LayerOverride(
            layer_id=str(o["layerId"]),
            x_offset=float(o.get("xOffset", 0.0)),
            y_offset=float(o.get("yOffset", 0.0)),
            individual_scale=float(o.get("individualScale", 1.0)),
        )
        for o in (data.get("overrides") or [])
    )
    anchor = str(data.get("anchor") or DEFAULT_ANCHOR).upper()
    if anchor not in ANCHOR_MODES:
        logger.warning("Unknown anchor %r; using %s.", anchor, DEFAULT_ANCHOR)
        anchor = DEFAULT_ANCHOR
    return LayoutStrategy(
        suggested_scale=float(data["suggestedScale"]),
        anchor=anchor,  # type: ignore[arg-type]
        overrides=overrides,
        generative_prompt=str(data.get("generativePrompt", "")),
        reasoning=str(data.get("reasoning", "")),
    )


def load_strategies(path: str | Path, repo_root: Path | None = None) -> dict[str, LayoutStrategy]:
    """Strategies keyed by source container name: {"BG": {...}, ...}."""
    data = load_json(path, repo_root)
    if not isinstance(data, Mapping):
        raise ValueError("Strategy file must map container names to strategies")
    return {str(k): strategy_from_dict(v) for k, v in data.items()}


# ----- Wiring -----

def load_wiring_manifest(path: str | Path, repo_root: Path | None = None) -> list[dict[str, str]]:
    """
    Wiring JSON: [{"source": "<container>", "target": "<handle>", "slot": "<export slot>"}].
    'slot' defaults to the handle; it is where the payload is plugged into the export.
    """
    data = load_json(path, repo_root)
    if not isinstance(data, list):
        raise ValueError("Wiring manifest must be a list")
    out: list[dict[str, str]] = []
    for i, row in enumerate(data):
        if "source" not in row or "target" not in row:
            raise ValueError(f"Wiring row {i} needs 'source' and 'target'")
        out.append({
            "source": str(row["source"]),
            "target": str(row["target"]),
            "slot": str(row.get("slot") or row["target"]),
        })
    return out
