"""
Studio Kernel — Override Compositor

Pure function: (element, breakpoint_id) → effective element

Merges an element's base attributes with the delta stored for the active
breakpoint:
- width, height, x, y, visible, font_size overwrite the element's own values
- gap, direction, padding merge into the auto-layout sub-object only; the
  other auto-layout fields (enabled, kind, align, distribute, wrap) are never
  overridden
- an element without auto-layout ignores gap/direction/padding overrides

No override entry for the breakpoint → the element itself is returned. The
input is never modified; a composited result is a fresh deep copy.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from studio.kernel.types import (
    OVERRIDE_ELEMENT_KEYS,
    Element,
    Padding,
    parse_sizing,
)


def resolve(element: Element, breakpoint_id: str | None) -> Element:
    """Return the effective element for the active breakpoint."""
    if breakpoint_id is None:
        return element
    overrides = element.responsive_overrides.get(breakpoint_id)
    if not overrides:
        return element

    effective = element.clone()

    for key in OVERRIDE_ELEMENT_KEYS:
        if key not in overrides:
            continue
        value = overrides[key]
        if key in ("width", "height"):
            value = parse_sizing(value)
        setattr(effective, key, value)

    if effective.auto_layout is not None:
        layout_delta: dict[str, Any] = {}
        if overrides.get("gap") is not None:
            layout_delta["gap"] = overrides["gap"]
        if overrides.get("direction"):
            layout_delta["direction"] = overrides["direction"]
        if overrides.get("padding") is not None:
            layout_delta["padding"] = Padding.coerce(overrides["padding"])
        if layout_delta:
            effective.auto_layout = dataclasses.replace(effective.auto_layout, **layout_delta)

    return effective


def resolve_page(elements: dict[str, Element], breakpoint_id: str | None) -> dict[str, Element]:
    """Composite every element of a page. Order is preserved."""
    return {eid: resolve(el, breakpoint_id) for eid, el in elements.items()}
