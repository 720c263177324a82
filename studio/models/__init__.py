"""
Pydantic models for the studio.

Durable document shape and the render projection record. No imports from the
interaction layer.
"""

from studio.models.document import (
    AutoLayoutModel,
    DocumentLoadError,
    DocumentModel,
    ElementModel,
    PageModel,
    PaddingModel,
    dump_document,
    load_document,
)
from studio.models.projection import RenderNode

__all__ = [
    # Document
    "DocumentModel",
    "PageModel",
    "ElementModel",
    "AutoLayoutModel",
    "PaddingModel",
    "DocumentLoadError",
    "dump_document",
    "load_document",
    # Projection
    "RenderNode",
]
