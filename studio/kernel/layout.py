"""
Studio Kernel — Layout Resolver

Computes the rendered box of every element on a page, honoring sizing modes
and arranging the children of auto-layout containers.

Coordinate model:
- root elements (parent_id None) sit at their own x/y in page coordinates
- children of a plain container sit at the container's origin plus their x/y
- flow children of an auto-layout container ignore their stored x/y; their
  position comes from flow order, gap, padding, align and distribute

Sizing per axis:
- Fixed(n) → n
- Auto     → natural size (hugged content for auto-layout containers, the
             `measure` hook for everything else)
- Fill     → equal share of the parent's remaining main-axis space, or the
             line's full cross extent; Auto anywhere outside an auto-layout
             parent
min/max clamps are applied after the mode is resolved.

Main-axis placement follows CSS justify-content, cross-axis placement follows
align-items. Wrapping breaks lines greedily and packs them like
align-content: stretch; grid layouts always wrap and use equal-size lines.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from studio.kernel.compositor import resolve_page
from studio.kernel.types import AutoLayout, Element, Fill, Fixed, Page, Sizing

Measure = Callable[[Element], tuple[float, float]]


def _no_measure(element: Element) -> tuple[float, float]:
    return (0.0, 0.0)


# =============================================================================
# Box
# =============================================================================


@dataclass
class Box:
    """Resolved box in absolute page coordinates."""

    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    visible: bool = True

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def inset(self, top: float, right: float, bottom: float, left: float) -> Box:
        """Return new box inset by the given amounts."""
        return Box(
            x=self.x + left,
            y=self.y + top,
            width=max(0.0, self.width - left - right),
            height=max(0.0, self.height - top - bottom),
            visible=self.visible,
        )


def _clamp(value: float, low: float | None, high: float | None) -> float:
    # min wins over max, as in CSS
    if high is not None:
        value = min(value, high)
    if low is not None:
        value = max(value, low)
    return value


def _clamp_main(el: Element, value: float, horizontal: bool) -> float:
    if horizontal:
        return _clamp(value, el.min_width, el.max_width)
    return _clamp(value, el.min_height, el.max_height)


def _clamp_cross(el: Element, value: float, horizontal: bool) -> float:
    return _clamp_main(el, value, not horizontal)


# =============================================================================
# Line model
# =============================================================================


@dataclass(eq=False)
class _Item:
    element: Element
    main: float = 0.0
    cross: float = 0.0
    main_pos: float = 0.0
    cross_pos: float = 0.0


@dataclass(eq=False)
class _Line:
    items: list[_Item]
    cross: float = 0.0


# =============================================================================
# Resolver
# =============================================================================


class _Resolver:
    def __init__(self, elements: dict[str, Element], measure: Measure) -> None:
        self.elements = elements
        self.measure = measure
        self.boxes: dict[str, Box] = {}
        self._natural: dict[str, tuple[float, float]] = {}
        self._visiting: set[str] = set()

    # -- helpers --

    def children(self, el: Element) -> list[Element]:
        return [self.elements[cid] for cid in el.children_ids if cid in self.elements]

    def flow_children(self, el: Element) -> list[Element]:
        return [child for child in self.children(el) if child.visible]

    # -- natural size --

    def natural(self, el: Element) -> tuple[float, float]:
        """Size of el when both axes are Auto."""
        cached = self._natural.get(el.id)
        if cached is not None:
            return cached
        if el.id in self._visiting:
            # cyclic tree: stop descending
            return (0.0, 0.0)
        self._visiting.add(el.id)
        try:
            if el.has_auto_layout:
                size = self._hug(el)
            else:
                size = self.measure(el)
        finally:
            self._visiting.discard(el.id)
        self._natural[el.id] = size
        return size

    def _hug(self, el: Element) -> tuple[float, float]:
        layout = el.auto_layout
        if layout is None:
            return self.measure(el)
        horizontal = layout.direction == "horizontal"
        kids = self.flow_children(el)
        main_total = 0.0
        cross_max = 0.0
        for child in kids:
            main_total += self.basis_main(child, horizontal)
            cross_max = max(cross_max, self.basis_cross(child, horizontal))
        if len(kids) > 1:
            main_total += layout.gap * (len(kids) - 1)
        pad = layout.padding
        if horizontal:
            return (main_total + pad.left + pad.right, cross_max + pad.top + pad.bottom)
        return (cross_max + pad.left + pad.right, main_total + pad.top + pad.bottom)

    def basis_main(self, el: Element, horizontal: bool) -> float:
        """Main-axis size of a flow child before Fill distribution."""
        sizing = el.width if horizontal else el.height
        if isinstance(sizing, Fixed):
            return _clamp_main(el, sizing.px, horizontal)
        w, h = self.natural(el)
        return _clamp_main(el, w if horizontal else h, horizontal)

    def basis_cross(self, el: Element, horizontal: bool) -> float:
        """Cross-axis size of a flow child before stretching."""
        sizing = el.height if horizontal else el.width
        if isinstance(sizing, Fixed):
            return _clamp_cross(el, sizing.px, horizontal)
        w, h = self.natural(el)
        return _clamp_cross(el, h if horizontal else w, horizontal)

    def own_size(self, el: Element) -> tuple[float, float]:
        """Size of an element that is not a flow child; Fill behaves as Auto."""
        nat_w: float | None = None
        nat_h: float | None = None
        if not isinstance(el.width, Fixed) or not isinstance(el.height, Fixed):
            nat_w, nat_h = self.natural(el)
        width = el.width.px if isinstance(el.width, Fixed) else nat_w
        height = el.height.px if isinstance(el.height, Fixed) else nat_h
        return (
            _clamp(float(width or 0.0), el.min_width, el.max_width),
            _clamp(float(height or 0.0), el.min_height, el.max_height),
        )

    # -- placement --

    def run(self) -> dict[str, Box]:
        for el in self.elements.values():
            if el.parent_id is None or el.parent_id not in self.elements:
                width, height = self.own_size(el)
                box = Box(x=el.x, y=el.y, width=width, height=height, visible=el.visible)
                self.place(el, box)
        return self.boxes

    def place(self, el: Element, box: Box) -> None:
        if el.id in self.boxes:
            return
        self.boxes[el.id] = box
        if el.has_auto_layout and el.auto_layout is not None:
            self.arrange_flow(el, el.auto_layout, box)
        else:
            self.arrange_free(el, box)

    def arrange_free(self, el: Element, box: Box) -> None:
        for child in self.children(el):
            width, height = self.own_size(child)
            child_box = Box(
                x=box.x + child.x,
                y=box.y + child.y,
                width=width,
                height=height,
                visible=box.visible and child.visible,
            )
            self.place(child, child_box)

    def arrange_flow(self, el: Element, layout: AutoLayout, box: Box) -> None:
        horizontal = layout.direction == "horizontal"
        pad = layout.padding
        content = box.inset(pad.top, pad.right, pad.bottom, pad.left)
        content_main = content.width if horizontal else content.height
        content_cross = content.height if horizontal else content.width

        # Hidden children take no flow space
        for child in self.children(el):
            if not child.visible:
                width, height = self.own_size(child)
                self.place(child, Box(x=content.x, y=content.y, width=width, height=height, visible=False))

        items = [_Item(element=child) for child in self.flow_children(el)]
        if not items:
            return

        for item in items:
            item.main = self.basis_main(item.element, horizontal)

        wrap = layout.wrap or layout.kind == "grid"
        lines = self._break_lines(items, content_main, layout.gap) if wrap else [_Line(items=items)]

        for line in lines:
            self._distribute_fill(line, content_main, layout.gap, horizontal)
            self._justify(line, content_main, layout.gap, layout.distribute)

        self._size_lines(lines, content_cross, layout, horizontal, wrap)

        cross_offset = 0.0
        for line in lines:
            for item in line.items:
                self._align(item, line.cross, layout.align, horizontal)
                if horizontal:
                    child_box = Box(
                        x=content.x + item.main_pos,
                        y=content.y + cross_offset + item.cross_pos,
                        width=item.main,
                        height=item.cross,
                        visible=box.visible,
                    )
                else:
                    child_box = Box(
                        x=content.x + cross_offset + item.cross_pos,
                        y=content.y + item.main_pos,
                        width=item.cross,
                        height=item.main,
                        visible=box.visible,
                    )
                self.place(item.element, child_box)
            cross_offset += line.cross + layout.gap

    # -- flow steps --

    @staticmethod
    def _break_lines(items: list[_Item], content_main: float, gap: float) -> list[_Line]:
        lines: list[_Line] = []
        current: list[_Item] = []
        used = 0.0
        for item in items:
            needed = item.main if not current else used + gap + item.main
            if current and needed > content_main:
                lines.append(_Line(items=current))
                current = [item]
                used = item.main
            else:
                current.append(item)
                used = needed
        if current:
            lines.append(_Line(items=current))
        return lines

    @staticmethod
    def _distribute_fill(line: _Line, content_main: float, gap: float, horizontal: bool) -> None:
        fills = [item for item in line.items if isinstance(_main_sizing(item.element, horizontal), Fill)]
        if not fills:
            return
        fixed_total = sum(item.main for item in line.items if item not in fills)
        gaps = gap * (len(line.items) - 1)
        share = max(0.0, (content_main - fixed_total - gaps) / len(fills))
        for item in fills:
            item.main = _clamp_main(item.element, share, horizontal)

    @staticmethod
    def _justify(line: _Line, content_main: float, gap: float, distribute: str) -> None:
        n = len(line.items)
        used = sum(item.main for item in line.items) + gap * (n - 1)
        remaining = content_main - used

        spacing = 0.0
        if distribute == "end":
            main_pos = remaining
        elif distribute == "center":
            main_pos = remaining / 2
        elif distribute == "space-between":
            main_pos = 0.0
            if remaining > 0 and n > 1:
                spacing = remaining / (n - 1)
        elif distribute == "space-around":
            if remaining > 0:
                spacing = remaining / n
                main_pos = spacing / 2
            else:
                main_pos = remaining / 2
        else:  # start
            main_pos = 0.0

        for item in line.items:
            item.main_pos = main_pos
            main_pos += item.main + gap + spacing

    def _size_lines(
        self,
        lines: list[_Line],
        content_cross: float,
        layout: AutoLayout,
        horizontal: bool,
        wrap: bool,
    ) -> None:
        for line in lines:
            for item in line.items:
                item.cross = self.basis_cross(item.element, horizontal)

        if not wrap:
            lines[0].cross = content_cross
            return

        for line in lines:
            line.cross = max(item.cross for item in line.items)
        if layout.kind == "grid":
            uniform = max(line.cross for line in lines)
            for line in lines:
                line.cross = uniform

        used = sum(line.cross for line in lines) + layout.gap * (len(lines) - 1)
        free = content_cross - used
        if free > 0:
            extra = free / len(lines)
            for line in lines:
                line.cross += extra

    @staticmethod
    def _align(item: _Item, line_cross: float, align: str, horizontal: bool) -> None:
        el = item.element
        sizing = el.height if horizontal else el.width
        if isinstance(sizing, Fill) or (align == "stretch" and not isinstance(sizing, Fixed)):
            item.cross = _clamp_cross(el, line_cross, horizontal)

        if align == "end":
            item.cross_pos = line_cross - item.cross
        elif align == "center":
            item.cross_pos = (line_cross - item.cross) / 2
        else:  # start, stretch
            item.cross_pos = 0.0


def _main_sizing(el: Element, horizontal: bool) -> Sizing:
    return el.width if horizontal else el.height


# =============================================================================
# Public API
# =============================================================================


def resolve_layout(
    page: Page,
    breakpoint_id: str | None = None,
    measure: Measure | None = None,
) -> dict[str, Box]:
    """
    Resolve the box of every element on the page for a breakpoint.

    Elements are composited with their responsive overrides first. `measure`
    supplies the natural (content) size of Auto leaves; without it they
    measure 0 × 0. Returns {element_id: Box} in absolute page coordinates.
    """
    effective = resolve_page(page.elements, breakpoint_id)
    return _Resolver(effective, measure or _no_measure).run()

