"""
Studio Layout Resolver -- Wrap and Grid Tests

Lines break greedily on the main axis, are separated by gap, and share the
free cross space equally. Grid layouts always wrap and give every line the
same cross size.
"""

from studio.kernel.layout import resolve_layout
from studio.kernel.types import FILL, AutoLayout, Element, Fixed, Page


def _wrapping(children, width=250, height=300, **layout):
    container = Element(
        "c",
        "frame",
        width=Fixed(width),
        height=Fixed(height),
        children_ids=[child.id for child in children],
        auto_layout=AutoLayout(enabled=True, direction="horizontal", **layout),
    )
    for child in children:
        child.parent_id = "c"
    return Page(id="p", name="P", elements={el.id: el for el in [container, *children]})


def _rect(element_id, width=100, height=50):
    width = Fixed(width) if isinstance(width, (int, float)) else width
    return Element(element_id, "rectangle", width=width, height=Fixed(height))


class TestWrap:
    def test_greedy_line_breaks(self):
        page = _wrapping([_rect("a"), _rect("b"), _rect("c3")], wrap=True, gap=10)
        boxes = resolve_layout(page)
        assert (boxes["a"].x, boxes["a"].y) == (0, 0)
        assert (boxes["b"].x, boxes["b"].y) == (110, 0)
        assert boxes["c3"].x == 0
        assert boxes["c3"].y > 0

    def test_free_cross_space_split_across_lines(self):
        # two lines of 50, one gap of 10 → 190 free, 95 extra per line
        page = _wrapping([_rect("a"), _rect("b"), _rect("c3")], wrap=True, gap=10)
        boxes = resolve_layout(page)
        assert boxes["c3"].y == 145 + 10

    def test_without_wrap_children_overflow_one_line(self):
        page = _wrapping([_rect("a"), _rect("b"), _rect("c3")], wrap=False, gap=10)
        boxes = resolve_layout(page)
        assert [boxes[i].y for i in ("a", "b", "c3")] == [0, 0, 0]
        assert boxes["c3"].x == 220

    def test_oversized_child_gets_its_own_line(self):
        page = _wrapping([_rect("wide", 400), _rect("b")], wrap=True)
        boxes = resolve_layout(page)
        assert boxes["wide"].x == 0
        assert boxes["b"].x == 0
        assert boxes["b"].y > boxes["wide"].y

    def test_fill_distributed_per_line(self):
        page = _wrapping([_rect("a"), _rect("b"), _rect("c3"), _rect("f", FILL)], wrap=True, gap=10)
        boxes = resolve_layout(page)
        # line 2 holds c3 and f: 250 - 100 - 10
        assert boxes["f"].y == boxes["c3"].y
        assert boxes["f"].width == 140


class TestGrid:
    def test_grid_wraps_without_flag(self):
        page = _wrapping([_rect("a"), _rect("b"), _rect("c3")], kind="grid", gap=10)
        boxes = resolve_layout(page)
        assert boxes["c3"].x == 0
        assert boxes["c3"].y > 0

    def test_grid_lines_are_uniform(self):
        # tallest line is 80, container leaves no free space: 80 + 10 + 80
        page = _wrapping(
            [_rect("a"), _rect("b"), _rect("c3", height=80)],
            height=170,
            kind="grid",
            gap=10,
        )
        boxes = resolve_layout(page)
        assert boxes["c3"].y == 90
        assert boxes["a"].height == 50

    def test_grid_center_align_within_uniform_line(self):
        page = _wrapping(
            [_rect("a"), _rect("b"), _rect("c3", height=80)],
            height=170,
            kind="grid",
            gap=10,
            align="center",
        )
        boxes = resolve_layout(page)
        assert boxes["a"].y == 15
