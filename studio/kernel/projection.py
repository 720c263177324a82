"""
Studio Kernel — Code/Render Projection

Pure function: (page, breakpoint) → [RenderNode]

Flattens the active page into the records renderers, code export and live
preview consume. Elements are composited for the breakpoint first. Sizes come
from the resolved layout boxes when given (min/max clamps included); without a
box Fixed sizes are reported as-is and Auto and Fill fall back to 100.
"""

from __future__ import annotations

from studio.kernel.compositor import resolve
from studio.kernel.layout import Box, Measure, resolve_layout
from studio.kernel.types import Element, Fixed, Page, Sizing
from studio.models.projection import RenderNode

_UNRESOLVED_SIZE = 100.0


def _size(sizing: Sizing, resolved: float | None) -> float:
    if resolved is not None:
        return resolved
    if isinstance(sizing, Fixed):
        return sizing.px
    return _UNRESOLVED_SIZE


def project_element(element: Element, box: Box | None = None) -> RenderNode:
    """RenderNode for an already-composited element."""
    return RenderNode(
        id=element.id,
        type=element.type,
        x=element.x,
        y=element.y,
        width=_size(element.width, box.width if box else None),
        height=_size(element.height, box.height if box else None),
        rotation=element.rotation,
        fill=element.fill,
        stroke=element.stroke,
        stroke_width=element.stroke_width,
        opacity=element.opacity,
        corner_radius=element.corner_radius,
        text=element.text,
        font_size=element.font_size,
        font_family=element.font_family,
        image_src=element.image_src,
        children_ids=list(element.children_ids),
        parent_id=element.parent_id,
    )


def project_page(
    page: Page,
    breakpoint_id: str | None = None,
    boxes: dict[str, Box] | None = None,
) -> list[RenderNode]:
    """Project every element of a page, in arena (creation) order."""
    boxes = boxes or {}
    return [project_element(resolve(el, breakpoint_id), boxes.get(el.id)) for el in page.elements.values()]


def project_resolved(
    page: Page,
    breakpoint_id: str | None = None,
    measure: Measure | None = None,
) -> list[RenderNode]:
    """Project a page with Auto/Fill sizes taken from a fresh layout pass."""
    return project_page(page, breakpoint_id, resolve_layout(page, breakpoint_id, measure))
