"""
Studio Kernel — the design document model.

Components, leaf-first:
  breakpoints  — ordered registry of named viewport widths
  compositor   — (element, breakpoint) → effective element
  layout       — (page, breakpoint) → resolved boxes
  document     — pages, active page, selection, active breakpoint
  mutations    — the single writer; create/update/delete/reparent/duplicate
  interaction  — pointer/keyboard/wheel events → mutations
  projection   — flat RenderNode list for renderers and export
"""

from studio.kernel.breakpoints import BreakpointRegistry
from studio.kernel.compositor import resolve, resolve_page
from studio.kernel.document import Document, integrity_check
from studio.kernel.layout import Box, resolve_layout
from studio.kernel.library import DEFAULT_LIBRARY, ComponentCategory, ComponentLibrary, ComponentTemplate
from studio.kernel.mutations import MutationEngine
from studio.kernel.interaction import Interaction
from studio.kernel.projection import project_page, project_resolved
from studio.kernel.types import (
    AUTO,
    FILL,
    Auto,
    AutoLayout,
    Breakpoint,
    Element,
    Fill,
    Fixed,
    Outcome,
    Padding,
    Page,
)

__all__ = [
    "BreakpointRegistry",
    "resolve",
    "resolve_page",
    "Document",
    "integrity_check",
    "Box",
    "resolve_layout",
    "ComponentCategory",
    "ComponentLibrary",
    "ComponentTemplate",
    "DEFAULT_LIBRARY",
    "MutationEngine",
    "Interaction",
    "project_page",
    "project_resolved",
    "AUTO",
    "FILL",
    "Auto",
    "AutoLayout",
    "Breakpoint",
    "Element",
    "Fill",
    "Fixed",
    "Outcome",
    "Padding",
    "Page",
]
