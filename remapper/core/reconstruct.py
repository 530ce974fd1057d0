# remapper/core/reconstruct.py
"""
Rebuild heavy layers from transformed (metadata-only) trees.

Each transformed element is bound back to its original heavy layer by stable id through a
ContentIndex built once per document. The copy keeps every original property and overrides
only bounds, visibility, opacity and children. Per filled slot the content is wrapped in a
synthetic group named after the slot's original name, in template slot order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from remapper.core.config import OPACITY_MAX
from remapper.core.error_codes import (
    DuplicateLayerIdError,
    MissingOriginalContentError,
    MissingSourceDocumentError,
)
from remapper.core.geometry import clamp
from remapper.core.io import walk_layers
from remapper.core.types import Document, HeavyLayer, Payload, Rect, Template, TransformedElement

logger = logging.getLogger(__name__)


@dataclass
class ContentIndex:
    """id -> heavy layer for one loaded document."""
    document_id: str
    layers: dict[str, HeavyLayer] = field(default_factory=dict)

    def __contains__(self, element_id: str) -> bool:
        return element_id in self.layers

    def __len__(self) -> int:
        return len(self.layers)

    def lookup(self, element_id: str) -> HeavyLayer:
        try:
            return self.layers[element_id]
        except KeyError:
            raise MissingOriginalContentError(
                f"Layer {element_id!r} not found in source document {self.document_id!r}; "
                "original content was not loaded.",
                element_id=element_id,
            ) from None


def build_content_index(document: Document, document_id: str) -> ContentIndex:
    """Index every heavy layer by id. Raises DuplicateLayerIdError (a ValueError) on duplicate ids."""
    index = ContentIndex(document_id=document_id)
    for layer_id, layer in walk_layers(document.children):
        if layer_id in index.layers:
            raise DuplicateLayerIdError(f"Duplicate layer id {layer_id!r} in document {document_id!r}")
        index.layers[layer_id] = layer
    return index


def to_heavy_opacity(opacity: float) -> int:
    """[0, 1] -> 0..OPACITY_MAX."""
    return int(round(clamp(opacity, 0.0, 1.0) * OPACITY_MAX))


def _edges(rect: Rect) -> dict[str, float]:
    return {"top": rect.y, "left": rect.x, "bottom": rect.bottom, "right": rect.right}


def reconstruct_hierarchy(
    transformed: Sequence[TransformedElement],
    index: ContentIndex,
) -> list[HeavyLayer]:
    """
    Shallow-copy the original layer of every transformed element with new bounds, hidden flag,
    opacity and (for groups) rebuilt, expanded children. Raises MissingOriginalContentError
    for any id the index does not know.
    """
    out: list[HeavyLayer] = []
    for meta in transformed:
        original = index.lookup(meta.id)
        layer: HeavyLayer = dict(original)
        layer.update(_edges(meta.rect))
        layer["hidden"] = not meta.visible
        layer["opacity"] = to_heavy_opacity(meta.opacity)
        layer.pop("children", None)
        if meta.kind == "group":
            layer["children"] = reconstruct_hierarchy(meta.children, index)
            layer["opened"] = True
        out.append(layer)
    return out


def slot_group(name: str, bounds: Rect, children: list[HeavyLayer]) -> HeavyLayer:
    """Synthetic, expanded container group placed at the slot bounds."""
    group: HeavyLayer = {"name": name, "children": children, "opened": True}
    group.update(_edges(bounds))
    return group


def build_output_document(
    template: Template,
    assignments: Mapping[str, Payload],
    indexes: Mapping[str, ContentIndex],
) -> Document:
    """
    Output document on the template canvas: one slot group per filled slot, in template order.
    Raises MissingSourceDocumentError / MissingOriginalContentError; no partial document is returned.
    """
    children: list[HeavyLayer] = []
    for slot in template.slots:
        payload = assignments.get(slot.name)
        if payload is None:
            continue
        index = indexes.get(payload.source_document_id)
        if index is None:
            raise MissingSourceDocumentError(
                f"Source document {payload.source_document_id!r} for slot {slot.name!r} is not loaded.",
                document_id=payload.source_document_id,
            )
        content = reconstruct_hierarchy(payload.elements, index)
        children.append(slot_group(slot.original_name, slot.bounds, content))
        logger.debug("Reconstructed slot %s: %d top-level layer(s)", slot.name, len(content))
    return Document(width=template.canvas_width, height=template.canvas_height, children=children)
