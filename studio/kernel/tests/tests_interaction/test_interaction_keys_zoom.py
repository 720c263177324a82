"""
Studio Interaction State Machine -- Keyboard, Tool and Zoom Tests
"""

import pytest

# ============================================================================
# 1. Tools
# ============================================================================


class TestTools:
    def test_default_tool(self, ui):
        assert ui.tool == "select"

    @pytest.mark.parametrize(
        "key, tool",
        [("v", "select"), ("h", "hand"), ("r", "rectangle"), ("o", "ellipse"), ("t", "text"), ("f", "frame")],
    )
    def test_shortcuts(self, ui, key, tool):
        ui.set_tool("image")
        assert ui.key_down(key).accepted
        assert ui.tool == tool

    def test_unknown_tool(self, ui):
        assert ui.set_tool("lasso").code == "UNKNOWN_TOOL"
        assert ui.tool == "select"

    def test_unbound_key(self, ui):
        assert ui.key_down("q").code == "UNKNOWN_COMMAND"


# ============================================================================
# 2. Delete / Escape / nudge
# ============================================================================


class TestKeys:
    @pytest.mark.parametrize("key", ["Delete", "Backspace"])
    def test_delete_selection(self, doc, ui, tree, key):
        doc.selected_id = tree["rect_a"]
        outcome = ui.key_down(key)
        assert outcome.accepted
        assert set(outcome.removed) == {tree["rect_a"], tree["nested"]}
        assert doc.selected_id is None

    def test_delete_without_selection(self, doc, ui, tree):
        assert ui.key_down("Delete").code == "NOT_SELECTED"
        assert len(doc.elements) == 4

    def test_escape_resets(self, doc, ui, tree):
        doc.selected_id = tree["frame"]
        ui.set_tool("frame")
        ui.key_down("Escape")
        assert doc.selected_id is None
        assert ui.tool == "select"

    def test_arrow_nudge(self, doc, engine, ui):
        ref = engine.create_element("rectangle", (10, 10)).ref
        ui.key_down("ArrowRight")
        ui.key_down("ArrowDown", shift=True)
        el = doc.get_element(ref)
        assert (el.x, el.y) == (11, 20)
        ui.key_down("ArrowLeft", shift=True)
        ui.key_down("ArrowUp")
        assert (el.x, el.y) == (1, 19)

    def test_nudge_locked(self, doc, engine, ui):
        ref = engine.create_element("rectangle", (10, 10)).ref
        engine.toggle_lock(ref)
        assert ui.key_down("ArrowLeft").code == "LOCKED"
        assert doc.get_element(ref).x == 10

    def test_nudge_without_selection(self, ui):
        assert ui.key_down("ArrowLeft").code == "NOT_SELECTED"

    def test_nudge_flow_child(self, doc, ui, tree):
        ui.select(tree["rect_a"])
        outcome = ui.key_down("ArrowRight", shift=True)
        assert outcome.code == "FLOW_CHILD"
        assert doc.get_element(tree["rect_a"]).x == 10

    def test_nudge_child_of_plain_container(self, doc, ui, tree):
        ui.select(tree["nested"])
        assert ui.key_down("ArrowDown").code == "FLOW_CHILD"
        assert doc.get_element(tree["nested"]).y == 5


# ============================================================================
# 3. Zoom
# ============================================================================


class TestZoom:
    def test_buttons_step(self, ui):
        assert ui.zoom_in() == pytest.approx(1.25)
        assert ui.zoom_out() == pytest.approx(1.0)
        assert ui.zoom_out() == pytest.approx(0.75)

    def test_buttons_clamp(self, ui):
        for _ in range(30):
            ui.zoom_in()
        assert ui.zoom == pytest.approx(4.0)
        for _ in range(30):
            ui.zoom_out()
        assert ui.zoom == pytest.approx(0.25)

    def test_wheel_needs_modifier(self, ui):
        assert ui.wheel(120) == 1.0

    def test_wheel_direction(self, ui):
        assert ui.wheel(120, ctrl=True) == pytest.approx(0.95)
        assert ui.wheel(-120, ctrl=True) == pytest.approx(1.0)
        assert ui.wheel(-120, ctrl=True) == pytest.approx(1.05)

    def test_wheel_clamps_below_button_minimum(self, ui):
        ui.zoom = 0.12
        assert ui.wheel(1, ctrl=True) == pytest.approx(0.1)
        ui.zoom = 3.99
        assert ui.wheel(-1, ctrl=True) == pytest.approx(4.0)
