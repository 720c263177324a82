"""
Studio Override Compositor Tests

resolve(element, breakpoint_id) merges the breakpoint's delta over the base:
  - width/height/x/y/visible/font_size overwrite
  - gap/direction/padding merge into auto-layout only
  - no entry → the element itself, untouched
"""

import copy

from studio.kernel.compositor import resolve, resolve_page
from studio.kernel.types import AUTO, FILL, AutoLayout, Element, Fixed, Padding


def _element(**overrides):
    return Element(
        id="el",
        type="frame",
        x=10,
        y=20,
        auto_layout=AutoLayout(enabled=True, direction="vertical", gap=4, align="center", distribute="end"),
        responsive_overrides=overrides,
    )


# ============================================================================
# 1. Scoping
# ============================================================================


class TestOverrideScoping:
    def test_visible_only_on_phone(self):
        el = _element(phone={"visible": False})
        assert resolve(el, "phone").visible is False
        assert resolve(el, "desktop").visible is True

    def test_no_entry_returns_element_itself(self):
        el = _element()
        assert resolve(el, "phone") is el
        assert resolve(el, None) is el

    def test_empty_entry_returns_element_itself(self):
        el = _element(phone={})
        assert resolve(el, "phone") is el


# ============================================================================
# 2. Element keys
# ============================================================================


class TestElementKeys:
    def test_geometry_and_font_size(self):
        el = _element(tablet={"x": 0, "y": 5, "width": 320, "height": "auto", "font_size": 12})
        effective = resolve(el, "tablet")
        assert (effective.x, effective.y) == (0, 5)
        assert effective.width == Fixed(320)
        assert effective.height == AUTO
        assert effective.font_size == 12

    def test_fill_sizing(self):
        el = _element(phone={"width": "fill"})
        assert resolve(el, "phone").width == FILL

    def test_other_fields_untouched(self):
        el = _element(phone={"x": 99})
        effective = resolve(el, "phone")
        assert effective.y == 20
        assert effective.fill == el.fill


# ============================================================================
# 3. Auto-layout keys
# ============================================================================


class TestAutoLayoutKeys:
    def test_gap_direction_padding_merge(self):
        el = _element(phone={"gap": 8, "direction": "horizontal", "padding": 4})
        layout = resolve(el, "phone").auto_layout
        assert layout.gap == 8
        assert layout.direction == "horizontal"
        assert layout.padding == Padding(4, 4, 4, 4)

    def test_other_layout_fields_never_overridden(self):
        el = _element(phone={"align": "end", "distribute": "start", "enabled": False, "gap": 2})
        layout = resolve(el, "phone").auto_layout
        assert layout.gap == 2
        assert layout.align == "center"
        assert layout.distribute == "end"
        assert layout.enabled is True

    def test_padding_dict(self):
        el = _element(phone={"padding": {"top": 1, "right": 2, "bottom": 3, "left": 4}})
        assert resolve(el, "phone").auto_layout.padding == Padding(1, 2, 3, 4)

    def test_without_auto_layout_layout_keys_are_ignored(self):
        el = Element(id="r", type="rectangle", responsive_overrides={"phone": {"gap": 8, "visible": False}})
        effective = resolve(el, "phone")
        assert effective.auto_layout is None
        assert effective.visible is False


# ============================================================================
# 4. Purity
# ============================================================================


class TestPurity:
    def test_input_is_not_mutated(self):
        el = _element(phone={"width": 50, "gap": 1, "visible": False})
        before = copy.deepcopy(el)
        resolve(el, "phone")
        assert el == before

    def test_same_inputs_equal_outputs(self):
        el = _element(phone={"width": 50, "direction": "horizontal"})
        assert resolve(el, "phone") == resolve(el, "phone")

    def test_result_shares_no_lists(self):
        el = _element(phone={"x": 1})
        el.children_ids.append("child")
        effective = resolve(el, "phone")
        effective.children_ids.append("other")
        assert el.children_ids == ["child"]

    def test_resolve_page_keeps_order(self):
        a = Element(id="a", type="rectangle")
        b = Element(id="b", type="rectangle", responsive_overrides={"phone": {"x": 3}})
        result = resolve_page({"b": b, "a": a}, "phone")
        assert list(result) == ["b", "a"]
        assert result["b"].x == 3
