"""
Structured error codes for remap, reconstruction and assembly failures.
Use these keys in reports and exceptions; map to user-facing messages in callers.
"""

from __future__ import annotations

# Known error keys
INVALID_GEOMETRY = "invalid_geometry"
MISSING_ORIGINAL_CONTENT = "missing_original_content"
MISSING_SOURCE_DOCUMENT = "missing_source_document"
SLOT_NOT_FOUND = "slot_not_found"
MISSING_SOURCE_CONTAINER = "missing_source_container"
DUPLICATE_LAYER_ID = "duplicate_layer_id"
DESTINATION_MISMATCH = "destination_mismatch"
UNKNOWN_SLOT = "unknown_slot"
DUPLICATE_SLOT_WIRING = "duplicate_slot_wiring"
INCOMPLETE_ASSEMBLY = "incomplete_assembly"
TEMPLATE_MISSING = "template_missing"
REMAP_FAILED = "remap_failed"

# User-facing messages (short, actionable)
USER_MESSAGES: dict[str, str] = {
    INVALID_GEOMETRY: "Source or target bounds are invalid. Check that containers have a positive size.",
    MISSING_ORIGINAL_CONTENT: "Original layer content is missing. Reload the source document.",
    MISSING_SOURCE_DOCUMENT: "Source document is not loaded. Reload the source file.",
    SLOT_NOT_FOUND: "Target slot could not be resolved in the template.",
    MISSING_SOURCE_CONTAINER: "Source container was not found in the document. Check the wiring source name.",
    DUPLICATE_LAYER_ID: "Two layers in the source document share an id. Make layer ids unique.",
    DESTINATION_MISMATCH: "A payload is wired to a slot it does not target. Rewire it to its declared slot.",
    UNKNOWN_SLOT: "A payload is wired to a slot the template does not define.",
    DUPLICATE_SLOT_WIRING: "More than one payload is wired to the same slot.",
    INCOMPLETE_ASSEMBLY: "Not every template slot is filled. Connect a payload to each slot.",
    TEMPLATE_MISSING: "No target template is connected.",
    REMAP_FAILED: "Remap failed. Check geometry and inputs.",
}


def user_message(error_key: str | None, fallback: str = "Something went wrong.") -> str:
    """Return a user-facing message for the given error key."""
    if not error_key:
        return fallback
    return USER_MESSAGES.get(error_key, fallback)


class RemapError(Exception):
    """Base for errors raised by the remap pipeline; carries a stable error key."""

    code: str = REMAP_FAILED

    def user_message(self) -> str:
        return user_message(self.code)


class InvalidGeometryError(RemapError, ValueError):
    """Zero/negative source dimensions or a non-usable scale; raised before any transform math."""

    code = INVALID_GEOMETRY


class MissingOriginalContentError(RemapError, LookupError):
    """An element id from a payload has no heavy layer in the original document."""

    code = MISSING_ORIGINAL_CONTENT

    def __init__(self, message: str, element_id: str | None = None) -> None:
        super().__init__(message)
        self.element_id = element_id


class MissingSourceDocumentError(MissingOriginalContentError):
    """The payload's source document was never loaded/indexed."""

    code = MISSING_SOURCE_DOCUMENT

    def __init__(self, message: str, document_id: str | None = None) -> None:
        super().__init__(message)
        self.document_id = document_id


class SlotResolutionError(RemapError, LookupError):
    """No matcher could resolve a wiring handle to a template slot."""

    code = SLOT_NOT_FOUND


class MissingSourceContainerError(RemapError, LookupError):
    """A wiring names a container group the source document does not have."""

    code = MISSING_SOURCE_CONTAINER


class DuplicateLayerIdError(RemapError, ValueError):
    """Two heavy layers of one document resolve to the same id."""

    code = DUPLICATE_LAYER_ID
