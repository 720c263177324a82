"""
Studio Kernel — Mutation Engine

The only writer of a Document's element arenas. Every operation is
synchronous, atomic and total: it validates everything first, then applies,
and answers with an Outcome. A rejected operation leaves the document exactly
as it was.

Two entry points:
- methods (create_element, update_element, delete_element, ...)
- apply(command) / apply_all(commands) for dict commands keyed by "t":

    engine.apply({"t": "element.update", "ref": "el_1", "p": {"fill": "#000"}})
    engine.apply({"t": "element.reparent", "ref": "el_2", "parent": "el_1"})
    engine.apply({"t": "page.add"})

Tree invariants held after every accepted call:
- e.parent_id == p  ⇔  e.id in p.children_ids
- following parent_id always ends at a root (reparent rejects cycles)
- every responsive override key is a known breakpoint
"""

from __future__ import annotations

import dataclasses
import logging
import random
from collections.abc import Iterable
from typing import Any

from studio.config import Settings, settings
from studio.kernel.document import Document, clone_elements
from studio.kernel.library import ComponentTemplate
from studio.kernel.types import (
    CYCLE_DETECTED,
    DIRECTIONS,
    DRAWING_TOOLS,
    ELEMENT_FIELDS,
    ELEMENT_TYPES,
    HIERARCHY_FIELD,
    HIERARCHY_FIELDS,
    INVALID_INDEX,
    INVALID_VALUE,
    MISSING_FIELD,
    NOT_FOUND,
    NOT_SIBLINGS,
    OVERFLOWS,
    OVERRIDE_KEYS,
    UNKNOWN_BREAKPOINT,
    UNKNOWN_COMMAND,
    UNKNOWN_FIELD,
    UNKNOWN_TOOL,
    AutoLayout,
    Element,
    Fixed,
    Outcome,
    Padding,
    Page,
    Sizing,
    ok,
    parse_sizing,
    reject,
    sizing_to_raw,
    validate_auto_layout,
)

logger = logging.getLogger(__name__)

AUTO_LAYOUT_FIELDS: set[str] = {f.name for f in dataclasses.fields(AutoLayout)}

_NUMERIC_FIELDS: set[str] = {"x", "y", "stroke_width", "corner_radius", "opacity", "rotation"}
_OPTIONAL_NUMERIC_FIELDS: set[str] = {
    "min_width",
    "max_width",
    "min_height",
    "max_height",
    "font_size",
    "line_height",
}
_BOOL_FIELDS: set[str] = {"locked", "visible"}


def _reject(code: str, message: str) -> Outcome:
    if code == CYCLE_DETECTED:
        logger.warning("mutations: rejected %s: %s", code, message)
    else:
        logger.debug("mutations: rejected %s: %s", code, message)
    return reject(code, message)


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number, got {value!r}")
    return value


def _is_point(point: Any) -> bool:
    if not isinstance(point, (tuple, list)) or len(point) != 2:
        return False
    return all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in point)


def _is_index(index: Any) -> bool:
    return isinstance(index, int) and not isinstance(index, bool)


def _stored_size(sizing: Sizing) -> float:
    return sizing.px if isinstance(sizing, Fixed) else 100.0


def coerce_auto_layout(partial: dict[str, Any], base: AutoLayout) -> AutoLayout:
    """
    Merge a partial auto-layout dict into base. Padding accepts the loose
    forms of Padding.coerce. Raises ValueError on unknown keys or bad values.
    """
    unknown = set(partial) - AUTO_LAYOUT_FIELDS
    if unknown:
        raise ValueError(f"unknown auto-layout fields: {sorted(unknown)}")
    changes = dict(partial)
    if "padding" in changes:
        changes["padding"] = Padding.coerce(changes["padding"])
    if "gap" in changes:
        _number(changes["gap"], "gap")
    for flag in ("enabled", "wrap"):
        if flag in changes and not isinstance(changes[flag], bool):
            raise ValueError(f"{flag} must be a boolean")
    layout = dataclasses.replace(base, **changes)
    errors = validate_auto_layout(layout)
    if errors:
        raise ValueError("; ".join(errors))
    return layout


def coerce_field(key: str, value: Any, default_layout: AutoLayout) -> Any:
    """Normalize one element attribute. Raises ValueError when it is malformed."""
    if key in ("width", "height"):
        return parse_sizing(value)
    if key in _NUMERIC_FIELDS:
        return _number(value, key)
    if key in _OPTIONAL_NUMERIC_FIELDS:
        if value is None:
            return None
        if _number(value, key) < 0:
            raise ValueError(f"{key} must be non-negative")
        return value
    if key in _BOOL_FIELDS:
        if not isinstance(value, bool):
            raise ValueError(f"{key} must be a boolean")
        return value
    if key == "type":
        if value not in ELEMENT_TYPES:
            raise ValueError(f"type must be one of {sorted(ELEMENT_TYPES)}")
        return value
    if key == "overflow":
        if value not in OVERFLOWS:
            raise ValueError(f"overflow must be one of {sorted(OVERFLOWS)}")
        return value
    if key == "auto_layout":
        if value is None:
            return value
        if isinstance(value, AutoLayout):
            errors = validate_auto_layout(value)
            if errors:
                raise ValueError("; ".join(errors))
            return value
        if isinstance(value, dict):
            return coerce_auto_layout(value, default_layout)
        raise ValueError(f"invalid auto_layout: {value!r}")
    return value


def coerce_override(delta: dict[str, Any]) -> dict[str, Any]:
    """
    Normalize a responsive override delta to its stored form: sizing as
    number | "auto" | "fill", padding as a four-side dict.
    Unknown keys must be filtered out by the caller.
    """
    result: dict[str, Any] = {}
    for key, value in delta.items():
        if key in ("width", "height"):
            result[key] = sizing_to_raw(parse_sizing(value))
        elif key in ("x", "y"):
            result[key] = _number(value, key)
        elif key in ("font_size", "gap"):
            if _number(value, key) < 0:
                raise ValueError(f"{key} must be non-negative")
            result[key] = value
        elif key == "visible":
            if not isinstance(value, bool):
                raise ValueError("visible must be a boolean")
            result[key] = value
        elif key == "direction":
            if value not in DIRECTIONS:
                raise ValueError(f"direction must be one of {sorted(DIRECTIONS)}")
            result[key] = value
        elif key == "padding":
            result[key] = Padding.coerce(value).to_dict()
    return result


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class MutationEngine:
    """
    Single writer for a Document.

    `rng` drives the placement jitter of library instances; pass a seeded
    random.Random for reproducible placement.
    """

    def __init__(
        self,
        document: Document,
        config: Settings = settings,
        rng: random.Random | None = None,
    ) -> None:
        self.document = document
        self.config = config
        self.rng = rng or random.Random()

    @property
    def page(self) -> Page:
        return self.document.get_active_page()

    def _find(self, element_id: str | None) -> Element | None:
        return self.page.get(element_id)

    # -- create --

    def create_element(self, tool: str, point: tuple[float, float], zoom: float = 1.0) -> Outcome:
        """
        Create a root element with the drawing tool's defaults at a screen
        point. The point is divided by the zoom factor to land in page
        coordinates. The new element becomes the selection.
        """
        if tool not in DRAWING_TOOLS:
            return _reject(UNKNOWN_TOOL, f"'{tool}' does not draw elements")
        if isinstance(zoom, bool) or not isinstance(zoom, (int, float)) or zoom <= 0:
            return _reject(INVALID_VALUE, f"zoom must be positive, got {zoom!r}")
        if not _is_point(point):
            return _reject(INVALID_VALUE, f"point must be two numbers, got {point!r}")

        page = self.page
        x, y = point
        is_text = tool == "text"
        element = Element(
            id=self.document.new_id("el"),
            type=tool,  # type: ignore[arg-type]
            name=f"{tool.capitalize()} {len(page.elements) + 1}",
            x=x / zoom,
            y=y / zoom,
            width=Fixed(200) if is_text else Fixed(100),
            height=Fixed(40) if is_text else Fixed(100),
            fill="transparent" if is_text else "#3b82f6",
            corner_radius=50 if tool == "ellipse" else 8,
            text="Text" if is_text else None,
            font_size=16 if is_text else None,
            font_weight="400" if is_text else None,
        )
        if tool == "frame":
            element.auto_layout = dataclasses.replace(self.document.default_auto_layout, enabled=True)

        page.elements[element.id] = element
        self.document.selected_id = element.id
        logger.debug("mutations: created %s %s at (%s, %s)", tool, element.id, element.x, element.y)
        return ok(element.id)

    def create_from_template(self, template: str | ComponentTemplate) -> Outcome:
        """
        Instantiate a library template at the root. Every partial becomes a
        full element with a fresh id, placed at TEMPLATE_ORIGIN plus a random
        offset of up to TEMPLATE_JITTER. The first element becomes the selection.
        """
        if isinstance(template, str):
            found = self.document.library.get(template)
            if found is None:
                return _reject(NOT_FOUND, f"template '{template}' does not exist")
            template = found
        if not isinstance(template, ComponentTemplate):
            return _reject(INVALID_VALUE, f"not a template: {template!r}")

        built: list[Element] = []
        for index, partial in enumerate(template.elements):
            try:
                element = self._element_from_partial(template, index, partial)
            except ValueError as exc:
                return _reject(INVALID_VALUE, f"template '{template.id}': {exc}")
            built.append(element)

        page = self.page
        for element in built:
            page.elements[element.id] = element
        if built:
            self.document.selected_id = built[0].id
        logger.debug("mutations: instantiated template %s (%d elements)", template.id, len(built))
        return ok(built[0].id if built else None)

    def _element_from_partial(self, template: ComponentTemplate, index: int, partial: dict[str, Any]) -> Element:
        origin = self.config.TEMPLATE_ORIGIN
        jitter = self.config.TEMPLATE_JITTER
        element = Element(
            id=self.document.new_id("el"),
            type=partial.get("type", "frame"),
            name=partial.get("name") or f"{template.name} {index + 1}",
            x=origin + self.rng.random() * jitter,
            y=origin + self.rng.random() * jitter,
            width=Fixed(200),
            height=Fixed(200),
            fill="#1a1a1a",
            corner_radius=8,
            overflow="hidden",
        )
        for key, value in partial.items():
            if key in ("name", "x", "y") or key in HIERARCHY_FIELDS:
                continue
            if key not in ELEMENT_FIELDS:
                raise ValueError(f"unknown field '{key}'")
            setattr(element, key, coerce_field(key, value, self.document.default_auto_layout))
        return element

    # -- update --

    def update_element(self, element_id: str, attrs: dict[str, Any]) -> Outcome:
        """
        Shallow-merge attributes into an element. Hierarchy fields are owned by
        reparent/delete and are refused; every value is validated before any
        is written.
        """
        element = self._find(element_id)
        if element is None:
            return _reject(NOT_FOUND, f"'{element_id}' does not exist")
        if not isinstance(attrs, dict):
            return _reject(INVALID_VALUE, "attributes must be a mapping")

        staged: dict[str, Any] = {}
        for key, value in attrs.items():
            if key in HIERARCHY_FIELDS:
                return _reject(HIERARCHY_FIELD, f"'{key}' can only change through reparent or delete")
            if key not in ELEMENT_FIELDS:
                return _reject(UNKNOWN_FIELD, f"elements have no field '{key}'")
            if key == "responsive_overrides":
                overrides, problem = self._stage_overrides(value)
                if problem is not None:
                    return problem
                staged[key] = overrides
                continue
            try:
                staged[key] = coerce_field(key, value, self.document.default_auto_layout)
            except (TypeError, ValueError) as exc:
                return _reject(INVALID_VALUE, f"{key}: {exc}")

        for key, value in staged.items():
            setattr(element, key, value)
        logger.debug("mutations: updated %s (%s)", element_id, ", ".join(sorted(staged)))
        return ok(element_id)

    def _stage_overrides(self, value: Any) -> tuple[dict[str, dict[str, Any]], Outcome | None]:
        if not isinstance(value, dict):
            return {}, _reject(INVALID_VALUE, "responsive_overrides must be a mapping")
        staged: dict[str, dict[str, Any]] = {}
        for breakpoint_id, delta in value.items():
            normalized, problem = self._stage_override(breakpoint_id, delta)
            if problem is not None:
                return {}, problem
            staged[breakpoint_id] = normalized
        return staged, None

    def _stage_override(self, breakpoint_id: str, delta: Any) -> tuple[dict[str, Any], Outcome | None]:
        if breakpoint_id not in self.document.breakpoints:
            return {}, _reject(UNKNOWN_BREAKPOINT, f"'{breakpoint_id}' is not a known breakpoint")
        if not isinstance(delta, dict):
            return {}, _reject(INVALID_VALUE, f"override for '{breakpoint_id}' must be a mapping")
        unknown = set(delta) - OVERRIDE_KEYS
        if unknown:
            return {}, _reject(UNKNOWN_FIELD, f"overrides cannot set {sorted(unknown)}")
        try:
            return coerce_override(delta), None
        except (TypeError, ValueError) as exc:
            return {}, _reject(INVALID_VALUE, f"override for '{breakpoint_id}': {exc}")

    def rename_element(self, element_id: str, name: str) -> Outcome:
        return self.update_element(element_id, {"name": name})

    def toggle_visibility(self, element_id: str) -> Outcome:
        element = self._find(element_id)
        if element is None:
            return _reject(NOT_FOUND, f"'{element_id}' does not exist")
        element.visible = not element.visible
        return ok(element_id)

    def toggle_lock(self, element_id: str) -> Outcome:
        element = self._find(element_id)
        if element is None:
            return _reject(NOT_FOUND, f"'{element_id}' does not exist")
        element.locked = not element.locked
        return ok(element_id)

    def update_auto_layout(self, element_id: str, partial: dict[str, Any]) -> Outcome:
        """Merge into the element's auto-layout, or into the default one if it has none."""
        element = self._find(element_id)
        if element is None:
            return _reject(NOT_FOUND, f"'{element_id}' does not exist")
        if not isinstance(partial, dict):
            return _reject(INVALID_VALUE, "auto-layout changes must be a mapping")
        unknown = set(partial) - AUTO_LAYOUT_FIELDS
        if unknown:
            return _reject(UNKNOWN_FIELD, f"auto-layout has no fields {sorted(unknown)}")
        base = element.auto_layout or self.document.default_auto_layout
        try:
            element.auto_layout = coerce_auto_layout(partial, base)
        except (TypeError, ValueError) as exc:
            return _reject(INVALID_VALUE, str(exc))
        return ok(element_id)

    def set_responsive_override(self, element_id: str, breakpoint_id: str, partial: dict[str, Any]) -> Outcome:
        """Merge a delta into the element's override entry for one breakpoint."""
        element = self._find(element_id)
        if element is None:
            return _reject(NOT_FOUND, f"'{element_id}' does not exist")
        normalized, problem = self._stage_override(breakpoint_id, partial)
        if problem is not None:
            return problem
        entry = element.responsive_overrides.setdefault(breakpoint_id, {})
        entry.update(normalized)
        logger.debug("mutations: override %s@%s (%s)", element_id, breakpoint_id, ", ".join(sorted(normalized)))
        return ok(element_id)

    def clear_responsive_override(self, element_id: str, breakpoint_id: str) -> Outcome:
        element = self._find(element_id)
        if element is None:
            return _reject(NOT_FOUND, f"'{element_id}' does not exist")
        if breakpoint_id not in self.document.breakpoints:
            return _reject(UNKNOWN_BREAKPOINT, f"'{breakpoint_id}' is not a known breakpoint")
        element.responsive_overrides.pop(breakpoint_id, None)
        return ok(element_id)

    # -- delete --

    def delete_element(self, element_id: str) -> Outcome:
        """
        Remove an element and all its descendants, strip it from its parent's
        children, and clear the selection if it pointed into the removed set.
        """
        page = self.page
        element = page.get(element_id)
        if element is None:
            return _reject(NOT_FOUND, f"'{element_id}' does not exist")

        removed = [element_id, *page.descendants(element_id)]

        parent = page.get(element.parent_id)
        if parent is not None:
            parent.children_ids = [cid for cid in parent.children_ids if cid != element_id]
        for rid in removed:
            page.elements.pop(rid, None)

        if self.document.selected_id in removed:
            self.document.selected_id = None
        logger.debug("mutations: delete %s removed %d elements", element_id, len(removed))
        return ok(element_id, removed=removed)

    # -- hierarchy --

    def add_child_to_parent(self, parent_id: str, child_id: str, index: int | None = None) -> Outcome:
        """
        Make child_id the last child of parent_id (or insert at index). The
        child leaves its previous parent; its stored x/y are kept. Refuses to
        make an element its own ancestor.
        """
        page = self.page
        parent = page.get(parent_id)
        child = page.get(child_id)
        if parent is None:
            return _reject(NOT_FOUND, f"parent '{parent_id}' does not exist")
        if child is None:
            return _reject(NOT_FOUND, f"child '{child_id}' does not exist")
        if parent_id == child_id:
            return _reject(CYCLE_DETECTED, f"cannot make '{child_id}' its own child")
        if child_id in page.ancestors(parent_id):
            return _reject(CYCLE_DETECTED, f"moving '{child_id}' under '{parent_id}' would create a cycle")

        siblings = [cid for cid in parent.children_ids if cid != child_id]
        if index is not None and (not _is_index(index) or not 0 <= index <= len(siblings)):
            return _reject(INVALID_INDEX, f"index {index!r} outside 0..{len(siblings)}")

        self._unlink(page, child)
        if index is None:
            siblings.append(child_id)
        else:
            siblings.insert(index, child_id)
        parent.children_ids = siblings
        child.parent_id = parent_id
        logger.debug("mutations: reparent %s under %s", child_id, parent_id)
        return ok(child_id)

    def detach(self, child_id: str) -> Outcome:
        """Move an element back to the root, keeping its stored x/y."""
        page = self.page
        child = page.get(child_id)
        if child is None:
            return _reject(NOT_FOUND, f"'{child_id}' does not exist")
        self._unlink(page, child)
        return ok(child_id)

    @staticmethod
    def _unlink(page: Page, child: Element) -> None:
        old_parent = page.get(child.parent_id)
        if old_parent is not None:
            old_parent.children_ids = [cid for cid in old_parent.children_ids if cid != child.id]
        child.parent_id = None

    def reorder_child(self, parent_id: str, child_id: str, index: int) -> Outcome:
        """Move child_id to position index within its parent's flow order."""
        parent = self._find(parent_id)
        if parent is None:
            return _reject(NOT_FOUND, f"parent '{parent_id}' does not exist")
        if child_id not in parent.children_ids:
            return _reject(NOT_FOUND, f"'{child_id}' is not a child of '{parent_id}'")
        if not _is_index(index) or not 0 <= index < len(parent.children_ids):
            return _reject(INVALID_INDEX, f"index {index!r} outside 0..{len(parent.children_ids) - 1}")
        order = [cid for cid in parent.children_ids if cid != child_id]
        order.insert(index, child_id)
        parent.children_ids = order
        return ok(child_id)

    def duplicate_element(self, element_id: str) -> Outcome:
        """
        Deep-copy an element subtree under fresh ids. The copy joins the same
        parent as the last child. Copies whose position is stored (roots and
        children of plain containers) are offset by DUPLICATE_OFFSET; flow
        children keep their stored x/y. The copy becomes the selection.
        """
        page = self.page
        element = page.get(element_id)
        if element is None:
            return _reject(NOT_FOUND, f"'{element_id}' does not exist")

        subtree = [element_id, *page.descendants(element_id)]
        id_map = self.document.fresh_ids(subtree)
        copies = clone_elements((page.elements[eid] for eid in subtree if eid in page.elements), id_map)

        copy_root = copies[id_map[element_id]]
        parent = page.get(element.parent_id)
        copy_root.parent_id = parent.id if parent is not None else None
        if parent is None or not parent.has_auto_layout:
            copy_root.x += self.config.DUPLICATE_OFFSET
            copy_root.y += self.config.DUPLICATE_OFFSET

        page.elements.update(copies)
        if parent is not None:
            parent.children_ids = [*parent.children_ids, copy_root.id]
        self.document.selected_id = copy_root.id
        logger.debug("mutations: duplicated %s as %s (%d elements)", element_id, copy_root.id, len(copies))
        return ok(copy_root.id)

    def wrap_in_frame(self, element_ids: list[str]) -> Outcome:
        """
        Wrap sibling elements in a new plain frame sized to their bounding box.
        The frame takes the place of the first wrapped sibling; the wrapped
        elements keep their sibling order and get x/y relative to the frame.
        The frame becomes the selection.
        """
        if not isinstance(element_ids, (list, tuple)):
            return _reject(INVALID_VALUE, "wrap needs a list of element ids")
        page = self.page
        wanted: list[str] = []
        for element_id in element_ids:
            if not isinstance(element_id, str):
                return _reject(INVALID_VALUE, f"not an element id: {element_id!r}")
            if page.get(element_id) is None:
                return _reject(NOT_FOUND, f"'{element_id}' does not exist")
            if element_id not in wanted:
                wanted.append(element_id)
        if not wanted:
            return _reject(INVALID_VALUE, "nothing to wrap")

        elements = [page.elements[eid] for eid in wanted]
        parent_id = elements[0].parent_id
        if any(el.parent_id != parent_id for el in elements):
            return _reject(NOT_SIBLINGS, "wrapped elements must share a parent")
        parent = page.get(parent_id)
        siblings = parent.children_ids if parent is not None else [el.id for el in page.roots()]
        order = [sid for sid in siblings if sid in wanted] or wanted

        left = min(el.x for el in elements)
        top = min(el.y for el in elements)
        right = max(el.x + _stored_size(el.width) for el in elements)
        bottom = max(el.y + _stored_size(el.height) for el in elements)
        frame = Element(
            id=self.document.new_id("el"),
            type="frame",
            name=f"Frame {len(page.elements) + 1}",
            x=left,
            y=top,
            width=Fixed(right - left),
            height=Fixed(bottom - top),
            fill="transparent",
            corner_radius=0,
            parent_id=parent.id if parent is not None else None,
            children_ids=order,
        )

        if parent is not None:
            index = parent.children_ids.index(order[0])
            remaining = [cid for cid in parent.children_ids if cid not in wanted]
            remaining.insert(index, frame.id)
            parent.children_ids = remaining
        for el in elements:
            el.parent_id = frame.id
            el.x -= left
            el.y -= top
        self._insert_before(page, order[0], frame)

        self.document.selected_id = frame.id
        logger.debug("mutations: wrapped %d elements in %s", len(order), frame.id)
        return ok(frame.id)

    def unwrap(self, frame_id: str) -> Outcome:
        """
        Dissolve a container: its children take its place in the grandparent
        (or become roots), with x/y shifted by the container's own x/y. The
        first released child becomes the selection.
        """
        page = self.page
        frame = page.get(frame_id)
        if frame is None:
            return _reject(NOT_FOUND, f"'{frame_id}' does not exist")
        child_ids = [cid for cid in frame.children_ids if cid in page.elements]
        if not child_ids:
            return _reject(INVALID_VALUE, f"'{frame_id}' has no children to release")

        parent = page.get(frame.parent_id)
        for cid in child_ids:
            child = page.elements[cid]
            child.parent_id = parent.id if parent is not None else None
            child.x += frame.x
            child.y += frame.y
        if parent is not None:
            index = parent.children_ids.index(frame_id)
            parent.children_ids = [*parent.children_ids[:index], *child_ids, *parent.children_ids[index + 1 :]]
        del page.elements[frame_id]

        self.document.selected_id = child_ids[0]
        logger.debug("mutations: unwrapped %s (%d children)", frame_id, len(child_ids))
        return ok(frame_id, removed=[frame_id])

    @staticmethod
    def _insert_before(page: Page, anchor_id: str, element: Element) -> None:
        items = list(page.elements.items())
        index = next(i for i, (eid, _) in enumerate(items) if eid == anchor_id)
        items.insert(index, (element.id, element))
        page.elements.clear()
        page.elements.update(items)

    # -- command dispatch --

    def apply(self, command: dict[str, Any]) -> Outcome:
        """Apply one dict command. Unknown or malformed commands are rejected."""
        if not isinstance(command, dict):
            return _reject(INVALID_VALUE, f"command must be a mapping, got {type(command).__name__}")
        command_type = command.get("t")
        if command_type is None:
            return _reject(MISSING_FIELD, "command has no 't' field")
        if not isinstance(command_type, str):
            return _reject(UNKNOWN_COMMAND, repr(command_type))
        handler = _HANDLERS.get(command_type)
        if handler is None:
            return _reject(UNKNOWN_COMMAND, str(command_type))
        return handler(self, command)

    def apply_all(self, commands: Iterable[dict[str, Any]]) -> list[Outcome]:
        """
        Apply commands in order. Rejections are skipped, not fatal; the
        returned outcomes line up with the input.
        """
        return [self.apply(command) for command in commands]


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


_ID_KEYS: set[str] = {"ref", "parent", "breakpoint", "tool", "name"}


def _missing(command: dict[str, Any], *keys: str) -> Outcome | None:
    for key in keys:
        value = command.get(key)
        if value is None:
            return _reject(MISSING_FIELD, f"{command['t']} requires '{key}'")
        if key in _ID_KEYS and not isinstance(value, str):
            return _reject(INVALID_VALUE, f"'{key}' must be a string, got {value!r}")
    return None


def _handle_element_create(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "tool", "x", "y")
    if problem:
        return problem
    return engine.create_element(command["tool"], (command["x"], command["y"]), command.get("zoom", 1.0))


def _handle_element_create_from_template(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "template")
    if problem:
        return problem
    return engine.create_from_template(command["template"])


def _handle_element_update(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "ref")
    if problem:
        return problem
    return engine.update_element(command["ref"], command.get("p") or {})


def _handle_element_delete(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "ref")
    if problem:
        return problem
    return engine.delete_element(command["ref"])


def _handle_element_reparent(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "ref")
    if problem:
        return problem
    parent = command.get("parent", "root")
    if parent is not None and not isinstance(parent, str):
        return _reject(INVALID_VALUE, f"'parent' must be a string, got {parent!r}")
    if parent in (None, "root"):
        return engine.detach(command["ref"])
    return engine.add_child_to_parent(parent, command["ref"], command.get("position"))


def _handle_element_detach(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "ref")
    if problem:
        return problem
    return engine.detach(command["ref"])


def _handle_element_duplicate(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "ref")
    if problem:
        return problem
    return engine.duplicate_element(command["ref"])


def _handle_element_wrap(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "refs")
    if problem:
        return problem
    return engine.wrap_in_frame(command["refs"])


def _handle_element_unwrap(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "ref")
    if problem:
        return problem
    return engine.unwrap(command["ref"])


def _handle_element_reorder(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "parent", "ref", "position")
    if problem:
        return problem
    return engine.reorder_child(command["parent"], command["ref"], command["position"])


def _handle_element_override(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "ref", "breakpoint")
    if problem:
        return problem
    delta = command.get("p")
    if delta is None:
        return engine.clear_responsive_override(command["ref"], command["breakpoint"])
    return engine.set_responsive_override(command["ref"], command["breakpoint"], delta)


def _handle_page_add(engine: MutationEngine, command: dict) -> Outcome:
    return ok(engine.document.add_page())


def _handle_page_delete(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "ref")
    if problem:
        return problem
    return engine.document.delete_page(command["ref"])


def _handle_page_rename(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "ref", "name")
    if problem:
        return problem
    return engine.document.rename_page(command["ref"], command["name"])


def _handle_page_duplicate(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "ref")
    if problem:
        return problem
    return engine.document.duplicate_page(command["ref"])


def _handle_page_activate(engine: MutationEngine, command: dict) -> Outcome:
    problem = _missing(command, "ref")
    if problem:
        return problem
    return engine.document.set_active_page(command["ref"])


# ---------------------------------------------------------------------------
# Handler dispatch table
# ---------------------------------------------------------------------------

_HANDLERS: dict[str, Any] = {
    # Elements
    "element.create": _handle_element_create,
    "element.create_from_template": _handle_element_create_from_template,
    "element.update": _handle_element_update,
    "element.delete": _handle_element_delete,
    "element.reparent": _handle_element_reparent,
    "element.detach": _handle_element_detach,
    "element.duplicate": _handle_element_duplicate,
    "element.reorder": _handle_element_reorder,
    "element.wrap": _handle_element_wrap,
    "element.unwrap": _handle_element_unwrap,
    "element.override": _handle_element_override,
    # Pages
    "page.add": _handle_page_add,
    "page.delete": _handle_page_delete,
    "page.rename": _handle_page_rename,
    "page.duplicate": _handle_page_duplicate,
    "page.activate": _handle_page_activate,
}
