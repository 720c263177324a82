"""
Studio Kernel — Selection & Interaction State Machine

Turns pointer, keyboard and wheel events into Mutation Engine calls.

States:
  idle      — no gesture in progress
  dragging  — pointer went down on an unlocked root element with `select`
  resizing  — pointer went down on one of the 8 handles of the selection

Every pointer-move while dragging/resizing commits its own update, scaled by
1/zoom. Pointer-up and Escape return to idle without rolling anything back.

The current tool is part of this state and snaps back to `select` as soon as
a drawing tool has created its element. The selection itself lives on the
Document so deletes and page switches can clear it.
"""

from __future__ import annotations

import logging
from typing import Literal

from studio.config import Settings, settings
from studio.kernel.document import Document
from studio.kernel.mutations import MutationEngine
from studio.kernel.types import (
    DRAWING_TOOLS,
    FLOW_CHILD,
    HANDLES,
    INVALID_HANDLE,
    LOCKED,
    NOT_FOUND,
    NOT_SELECTED,
    TOOL_ACTIVE,
    TOOLS,
    UNKNOWN_COMMAND,
    UNKNOWN_TOOL,
    Element,
    Fixed,
    Outcome,
    Sizing,
    ok,
    reject,
)

logger = logging.getLogger(__name__)

State = Literal["idle", "dragging", "resizing"]

TOOL_SHORTCUTS: dict[str, str] = {
    "v": "select",
    "h": "hand",
    "r": "rectangle",
    "o": "ellipse",
    "t": "text",
    "f": "frame",
}

ARROW_KEYS: dict[str, tuple[int, int]] = {
    "ArrowUp": (0, -1),
    "ArrowDown": (0, 1),
    "ArrowLeft": (-1, 0),
    "ArrowRight": (1, 0),
}

# Size a handle starts from when the dimension is Auto or Fill
_UNSIZED_START = 100.0


def _reject(code: str, message: str) -> Outcome:
    logger.debug("interaction: rejected %s: %s", code, message)
    return reject(code, message)


def _current_size(sizing: Sizing) -> float:
    return sizing.px if isinstance(sizing, Fixed) else _UNSIZED_START


class Interaction:
    """Editor session state: tool, zoom, and the gesture in progress."""

    def __init__(
        self,
        document: Document,
        engine: MutationEngine | None = None,
        config: Settings = settings,
    ) -> None:
        self.document = document
        self.engine = engine or MutationEngine(document, config)
        self.config = config

        self.state: State = "idle"
        self.tool: str = "select"
        self.zoom: float = 1.0
        self.handle: str | None = None
        self._last_point: tuple[float, float] | None = None

    # -- selection --

    @property
    def selected(self) -> Element | None:
        return self.document.selected

    def select(self, element_id: str) -> Outcome:
        if self.document.get_element(element_id) is None:
            return _reject(NOT_FOUND, f"'{element_id}' does not exist")
        self.document.selected_id = element_id
        return ok(element_id)

    def clear_selection(self) -> None:
        self.document.selected_id = None

    # -- tools --

    def set_tool(self, tool: str) -> Outcome:
        if tool not in TOOLS:
            return _reject(UNKNOWN_TOOL, f"'{tool}' is not a tool")
        self.tool = tool
        return ok(tool)

    # -- pointer --

    def pointer_down_canvas(self, point: tuple[float, float]) -> Outcome:
        """
        Pointer-down on empty canvas. With select/hand the selection is
        cleared; with a drawing tool a new element is created at the point and
        the tool returns to select.
        """
        if self.tool not in DRAWING_TOOLS:
            self.clear_selection()
            return ok(None)
        outcome = self.engine.create_element(self.tool, point, self.zoom)
        if outcome.accepted:
            self.tool = "select"
        return outcome

    def pointer_down_element(self, element_id: str, point: tuple[float, float]) -> Outcome:
        """
        Pointer-down on an element. Locked elements are ignored entirely.
        Nested elements get selected but never dragged (FLOW_CHILD): their
        position belongs to the parent.
        """
        if self.tool != "select":
            return _reject(TOOL_ACTIVE, f"'{self.tool}' is active")
        element = self.document.get_element(element_id)
        if element is None:
            return _reject(NOT_FOUND, f"'{element_id}' does not exist")
        if element.locked:
            return _reject(LOCKED, f"'{element_id}' is locked")

        self.document.selected_id = element_id
        if element.parent_id is not None:
            return _reject(FLOW_CHILD, f"'{element_id}' is nested and cannot be dragged")

        self.state = "dragging"
        self._last_point = point
        logger.debug("interaction: drag %s", element_id)
        return ok(element_id)

    def pointer_down_handle(self, handle: str, point: tuple[float, float]) -> Outcome:
        """Start resizing the selection from one of the 8 compass handles."""
        if handle not in HANDLES:
            return _reject(INVALID_HANDLE, f"'{handle}' is not a resize handle")
        element = self.selected
        if element is None:
            return _reject(NOT_SELECTED, "nothing is selected")
        if element.locked:
            return _reject(LOCKED, f"'{element.id}' is locked")
        parent = self.document.get_element(element.parent_id)
        if parent is not None and parent.has_auto_layout:
            return _reject(FLOW_CHILD, f"'{element.id}' is sized by its auto-layout parent")

        self.state = "resizing"
        self.handle = handle
        self._last_point = point
        logger.debug("interaction: resize %s from %s", element.id, handle)
        return ok(element.id)

    def pointer_move(self, point: tuple[float, float]) -> Outcome:
        if self.state == "idle" or self._last_point is None:
            return ok(None)

        element = self.selected
        if element is None:
            self._end_gesture()
            return _reject(NOT_SELECTED, "the gesture target is gone")

        dx = (point[0] - self._last_point[0]) / self.zoom
        dy = (point[1] - self._last_point[1]) / self.zoom
        self._last_point = point

        if self.state == "dragging":
            return self.engine.update_element(element.id, {"x": element.x + dx, "y": element.y + dy})
        return self.engine.update_element(element.id, self._resize(element, dx, dy))

    def _resize(self, element: Element, dx: float, dy: float) -> dict[str, float]:
        """
        e/s grow width/height; w/n grow the opposite way and shift x/y so the
        far edge stays put. Every dimension is clamped to MIN_ELEMENT_SIZE.
        """
        handle = self.handle or ""
        minimum = self.config.MIN_ELEMENT_SIZE
        width = _current_size(element.width)
        height = _current_size(element.height)
        updates: dict[str, float] = {}

        if "e" in handle:
            updates["width"] = max(minimum, width + dx)
        if "w" in handle:
            updates["width"] = max(minimum, width - dx)
            updates["x"] = element.x + (width - updates["width"])
        if "s" in handle:
            updates["height"] = max(minimum, height + dy)
        if "n" in handle:
            updates["height"] = max(minimum, height - dy)
            updates["y"] = element.y + (height - updates["height"])
        return updates

    def pointer_up(self) -> Outcome:
        self._end_gesture()
        return ok(None)

    def _end_gesture(self) -> None:
        self.state = "idle"
        self.handle = None
        self._last_point = None

    # -- keyboard --

    def key_down(self, key: str, shift: bool = False) -> Outcome:
        """
        Shortcuts:
          v h r o t f        pick a tool
          Delete, Backspace  delete the selection
          Escape             end the gesture, clear the selection, back to select
          Arrow keys         nudge the selection by 1 (10 with shift)
        """
        if key in TOOL_SHORTCUTS:
            return self.set_tool(TOOL_SHORTCUTS[key])

        if key in ("Delete", "Backspace"):
            if self.document.selected_id is None:
                return _reject(NOT_SELECTED, "nothing to delete")
            return self.engine.delete_element(self.document.selected_id)

        if key == "Escape":
            self._end_gesture()
            self.clear_selection()
            self.tool = "select"
            return ok(None)

        if key in ARROW_KEYS:
            return self._nudge(*ARROW_KEYS[key], step=10 if shift else 1)

        return _reject(UNKNOWN_COMMAND, f"no binding for {key!r}")

    def _nudge(self, sx: int, sy: int, step: int) -> Outcome:
        element = self.selected
        if element is None:
            return _reject(NOT_SELECTED, "nothing to move")
        if element.locked:
            return _reject(LOCKED, f"'{element.id}' is locked")
        if element.parent_id is not None:
            return _reject(FLOW_CHILD, f"'{element.id}' is nested and cannot be moved")
        return self.engine.update_element(element.id, {"x": element.x + sx * step, "y": element.y + sy * step})

    # -- zoom --

    def zoom_in(self) -> float:
        self.zoom = min(self.config.ZOOM_MAX, self.zoom + self.config.ZOOM_BUTTON_STEP)
        return self.zoom

    def zoom_out(self) -> float:
        self.zoom = max(self.config.ZOOM_BUTTON_MIN, self.zoom - self.config.ZOOM_BUTTON_STEP)
        return self.zoom

    def wheel(self, delta_y: float, ctrl: bool = False) -> float:
        """Ctrl/meta + wheel zooms by ZOOM_WHEEL_STEP; plain wheel leaves zoom alone."""
        if not ctrl:
            return self.zoom
        step = -self.config.ZOOM_WHEEL_STEP if delta_y > 0 else self.config.ZOOM_WHEEL_STEP
        self.zoom = min(self.config.ZOOM_MAX, max(self.config.ZOOM_MIN, self.zoom + step))
        return self.zoom
