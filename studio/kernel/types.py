"""
Studio Kernel — Shared Types

Data classes used across the document store, compositor, layout resolver,
mutation engine and interaction state machine. These are the contracts that
bind the kernel together.

Key points:
- Sizing is a closed union: Fixed(px) | Auto | Fill
- A Page is an arena of Elements keyed by id; parent/child links are kept in
  both directions (parent_id + children_ids) and only the mutation engine
  writes them
- Every operation answers with an Outcome, never an exception
"""

from __future__ import annotations

import copy
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field, fields
from typing import Any, Literal

# ---------------------------------------------------------------------------
# Vocabularies
# ---------------------------------------------------------------------------

ElementType = Literal["rectangle", "ellipse", "text", "image", "frame", "component"]
LayoutKind = Literal["stack", "grid"]
Direction = Literal["horizontal", "vertical"]
Align = Literal["start", "center", "end", "stretch"]
Distribute = Literal["start", "center", "end", "space-between", "space-around"]
Overflow = Literal["visible", "hidden", "scroll"]
Tool = Literal["select", "hand", "rectangle", "ellipse", "text", "image", "frame"]
Handle = Literal["n", "ne", "e", "se", "s", "sw", "w", "nw"]

ELEMENT_TYPES: set[str] = {"rectangle", "ellipse", "text", "image", "frame", "component"}
LAYOUT_KINDS: set[str] = {"stack", "grid"}
DIRECTIONS: set[str] = {"horizontal", "vertical"}
ALIGNS: set[str] = {"start", "center", "end", "stretch"}
DISTRIBUTES: set[str] = {"start", "center", "end", "space-between", "space-around"}
OVERFLOWS: set[str] = {"visible", "hidden", "scroll"}
TOOLS: set[str] = {"select", "hand", "rectangle", "ellipse", "text", "image", "frame"}
DRAWING_TOOLS: set[str] = {"rectangle", "ellipse", "text", "image", "frame"}
HANDLES: set[str] = {"n", "ne", "e", "se", "s", "sw", "w", "nw"}

# Keys a responsive override may carry. The first group overwrites the element,
# the second is merged into its auto-layout only.
OVERRIDE_ELEMENT_KEYS: tuple[str, ...] = ("width", "height", "x", "y", "visible", "font_size")
OVERRIDE_LAYOUT_KEYS: tuple[str, ...] = ("gap", "direction", "padding")
OVERRIDE_KEYS: set[str] = set(OVERRIDE_ELEMENT_KEYS) | set(OVERRIDE_LAYOUT_KEYS)

# Hierarchy fields are owned by reparent/delete, never by a plain update
HIERARCHY_FIELDS: set[str] = {"id", "parent_id", "children_ids"}


# ---------------------------------------------------------------------------
# Rejection reasons
# ---------------------------------------------------------------------------

NOT_FOUND = "NOT_FOUND"
PAGE_NOT_FOUND = "PAGE_NOT_FOUND"
LAST_PAGE = "LAST_PAGE"
CYCLE_DETECTED = "CYCLE_DETECTED"
LOCKED = "LOCKED"
FLOW_CHILD = "FLOW_CHILD"
NOT_SELECTED = "NOT_SELECTED"
INVALID_HANDLE = "INVALID_HANDLE"
UNKNOWN_TOOL = "UNKNOWN_TOOL"
UNKNOWN_FIELD = "UNKNOWN_FIELD"
HIERARCHY_FIELD = "HIERARCHY_FIELD"
UNKNOWN_BREAKPOINT = "UNKNOWN_BREAKPOINT"
INVALID_VALUE = "INVALID_VALUE"
UNKNOWN_COMMAND = "UNKNOWN_COMMAND"
MISSING_FIELD = "MISSING_FIELD"
TOOL_ACTIVE = "TOOL_ACTIVE"
INVALID_INDEX = "INVALID_INDEX"
NOT_SIBLINGS = "NOT_SIBLINGS"


class MutationRejected(Exception):
    """Raised by Outcome.unwrap() when an operation was rejected."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class NotFound(MutationRejected):
    """Operation named an element, page or template that does not exist."""


class CycleDetected(MutationRejected):
    """Reparent would make an element its own ancestor."""


class ConstraintViolation(MutationRejected):
    """Locked element, flow child, wrap across parents, or a gesture without a valid target."""


class MinimumCardinalityViolation(MutationRejected):
    """Deleting the last remaining page."""


class InvalidValue(MutationRejected):
    """Unknown field, tool, breakpoint or malformed value."""


_EXCEPTIONS: dict[str, type[MutationRejected]] = {
    NOT_FOUND: NotFound,
    PAGE_NOT_FOUND: NotFound,
    CYCLE_DETECTED: CycleDetected,
    LOCKED: ConstraintViolation,
    FLOW_CHILD: ConstraintViolation,
    NOT_SELECTED: ConstraintViolation,
    TOOL_ACTIVE: ConstraintViolation,
    NOT_SIBLINGS: ConstraintViolation,
    LAST_PAGE: MinimumCardinalityViolation,
}


class Outcome:
    """
    Result of one store, mutation or interaction operation.
    Never raised — always returned, so a bad event can't end the session.
    """

    __slots__ = ("accepted", "reason", "ref", "removed")

    def __init__(
        self,
        accepted: bool,
        reason: str | None = None,
        ref: str | None = None,
        removed: list[str] | None = None,
    ) -> None:
        self.accepted = accepted
        self.reason = reason
        self.ref = ref  # id of the created/affected element or page
        self.removed = removed or []

    @property
    def code(self) -> str | None:
        if self.reason is None:
            return None
        return self.reason.split(":", 1)[0]

    def unwrap(self) -> str | None:
        """Return ref on success, raise the matching MutationRejected otherwise."""
        if self.accepted:
            return self.ref
        exc_cls = _EXCEPTIONS.get(self.code or "", InvalidValue)
        raise exc_cls(self.reason or "")

    def __repr__(self) -> str:  # pragma: no cover
        if self.accepted:
            return f"Outcome(accepted=True, ref={self.ref!r})"
        return f"Outcome(accepted=False, reason={self.reason!r})"


def ok(ref: str | None = None, removed: list[str] | None = None) -> Outcome:
    return Outcome(accepted=True, ref=ref, removed=removed)


def reject(code: str, message: str) -> Outcome:
    return Outcome(accepted=False, reason=f"{code}: {message}")


# ---------------------------------------------------------------------------
# Sizing
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Fixed:
    """Exactly `px` units along the axis."""

    px: float


@dataclass(frozen=True)
class Auto:
    """Natural/content size along the axis."""


@dataclass(frozen=True)
class Fill:
    """Share of the auto-layout parent's remaining space; Auto elsewhere."""


Sizing = Fixed | Auto | Fill

AUTO = Auto()
FILL = Fill()


def parse_sizing(value: Any) -> Sizing:
    """
    Accept the loose editor forms and return a Sizing.

      120 / 120.5  → Fixed(120.0)
      "auto"       → AUTO
      "fill"       → FILL
      Fixed/Auto/Fill instances pass through

    Raises ValueError for anything else (callers turn it into INVALID_VALUE).
    """
    if isinstance(value, (Fixed, Auto, Fill)):
        return value
    if isinstance(value, bool):
        raise ValueError(f"invalid sizing: {value!r}")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError(f"sizing must be non-negative, got {value!r}")
        return Fixed(float(value))
    if value == "auto":
        return AUTO
    if value == "fill":
        return FILL
    raise ValueError(f"invalid sizing: {value!r}")


def sizing_to_raw(value: Sizing) -> float | str:
    """Inverse of parse_sizing — number | "auto" | "fill"."""
    if isinstance(value, Fixed):
        return value.px
    if isinstance(value, Fill):
        return "fill"
    return "auto"


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _padding_side(name: str, value: Any) -> float:
    if not _is_number(value) or value < 0:
        raise ValueError(f"{name} must be a non-negative number, got {value!r}")
    return value


@dataclass(frozen=True)
class Padding:
    top: float = 0
    right: float = 0
    bottom: float = 0
    left: float = 0

    @classmethod
    def coerce(cls, value: Any) -> Padding:
        """
        Padding from a Padding, a uniform number, or a {top,right,bottom,left} dict.
        Every side must be a non-negative number.
        """
        if isinstance(value, Padding):
            value = value.to_dict()
        if _is_number(value):
            side = _padding_side("padding", value)
            return cls(side, side, side, side)
        if isinstance(value, dict):
            unknown = set(value) - {"top", "right", "bottom", "left"}
            if unknown:
                raise ValueError(f"unknown padding sides: {sorted(unknown)}")
            return cls(**{name: _padding_side(name, side) for name, side in value.items()})
        raise ValueError(f"invalid padding: {value!r}")

    def to_dict(self) -> dict[str, float]:
        return {"top": self.top, "right": self.right, "bottom": self.bottom, "left": self.left}


@dataclass(frozen=True)
class AutoLayout:
    """A container's opt-in flex-like arrangement of its direct children."""

    enabled: bool = False
    kind: LayoutKind = "stack"
    direction: Direction = "vertical"
    gap: float = 0
    padding: Padding = field(default_factory=Padding)
    align: Align = "start"
    distribute: Distribute = "start"
    wrap: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "kind": self.kind,
            "direction": self.direction,
            "gap": self.gap,
            "padding": self.padding.to_dict(),
            "align": self.align,
            "distribute": self.distribute,
            "wrap": self.wrap,
        }


def validate_auto_layout(layout: AutoLayout) -> list[str]:
    """Return a list of problems with an AutoLayout. Empty list = valid."""
    errors: list[str] = []
    if layout.kind not in LAYOUT_KINDS:
        errors.append(f"kind must be one of {sorted(LAYOUT_KINDS)}")
    if layout.direction not in DIRECTIONS:
        errors.append(f"direction must be one of {sorted(DIRECTIONS)}")
    if layout.align not in ALIGNS:
        errors.append(f"align must be one of {sorted(ALIGNS)}")
    if layout.distribute not in DISTRIBUTES:
        errors.append(f"distribute must be one of {sorted(DISTRIBUTES)}")
    if not _is_number(layout.gap) or layout.gap < 0:
        errors.append("gap must be a non-negative number")
    if not isinstance(layout.padding, Padding):
        errors.append("padding must be a Padding")
    else:
        for name, side in layout.padding.to_dict().items():
            if not _is_number(side) or side < 0:
                errors.append(f"padding {name} must be a non-negative number")
    return errors


@dataclass
class Element:
    """
    One node of a page's element tree.

    x/y are absolute page coordinates for root elements, offsets inside the
    parent for children of a plain container, and unused for flow children of
    an auto-layout container (their position is computed).
    """

    id: str
    type: ElementType
    name: str = ""

    # Geometry
    x: float = 0
    y: float = 0
    width: Sizing = field(default_factory=lambda: Fixed(100))
    height: Sizing = field(default_factory=lambda: Fixed(100))
    min_width: float | None = None
    max_width: float | None = None
    min_height: float | None = None
    max_height: float | None = None

    # Paint
    fill: str = "#3b82f6"
    stroke: str = "transparent"
    stroke_width: float = 0
    corner_radius: float = 8
    opacity: float = 1
    rotation: float = 0

    # Content
    text: str | None = None
    font_size: float | None = None
    font_weight: str | None = None
    font_family: str | None = None
    text_align: str | None = None
    line_height: float | None = None
    image_src: str | None = None

    # State
    locked: bool = False
    visible: bool = True
    overflow: Overflow = "visible"

    # Hierarchy
    parent_id: str | None = None
    children_ids: list[str] = field(default_factory=list)

    # Layout
    auto_layout: AutoLayout | None = None

    # Responsive: {breakpoint_id: {override_key: value}}
    responsive_overrides: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def has_auto_layout(self) -> bool:
        return self.auto_layout is not None and self.auto_layout.enabled

    def clone(self) -> Element:
        """Deep copy — lists and override dicts are never shared."""
        return copy.deepcopy(self)


ELEMENT_FIELDS: set[str] = {f.name for f in fields(Element)}


@dataclass
class Page:
    """A named arena of elements. Dict order is creation order."""

    id: str
    name: str
    elements: dict[str, Element] = field(default_factory=dict)

    def get(self, element_id: str | None) -> Element | None:
        if element_id is None:
            return None
        return self.elements.get(element_id)

    def roots(self) -> list[Element]:
        return [el for el in self.elements.values() if el.parent_id is None]

    def children_of(self, element_id: str) -> list[Element]:
        parent = self.elements.get(element_id)
        if parent is None:
            return []
        return [self.elements[cid] for cid in parent.children_ids if cid in self.elements]

    def descendants(self, element_id: str) -> list[str]:
        """All descendant ids of element_id (not including itself)."""
        result: list[str] = []
        seen: set[str] = {element_id}
        stack = list(reversed(self.elements[element_id].children_ids)) if element_id in self.elements else []
        while stack:
            cid = stack.pop()
            if cid in seen:
                continue
            seen.add(cid)
            result.append(cid)
            child = self.elements.get(cid)
            if child is not None:
                stack.extend(reversed(child.children_ids))
        return result

    def ancestors(self, element_id: str) -> list[str]:
        """Parent chain of element_id, nearest first. Stops on a repeated id."""
        result: list[str] = []
        seen: set[str] = {element_id}
        current = self.elements.get(element_id)
        while current is not None and current.parent_id is not None:
            if current.parent_id in seen:
                break
            seen.add(current.parent_id)
            result.append(current.parent_id)
            current = self.elements.get(current.parent_id)
        return result


@dataclass(frozen=True)
class Breakpoint:
    """A named viewport width selecting a responsive override set."""

    id: str
    name: str
    width: float
    icon: str = "desktop"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

IdFactory = Callable[[str], str]


def uuid_ids(prefix: str) -> str:
    """Default id factory: `el_1f3a9c0b2d4e`, `page_...`."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


def counter_ids() -> IdFactory:
    """Deterministic id factory (`el_1`, `el_2`, `page_1`, ...) for tests and replays."""
    counters: dict[str, int] = {}

    def make(prefix: str) -> str:
        counters[prefix] = counters.get(prefix, 0) + 1
        return f"{prefix}_{counters[prefix]}"

    return make
