"""
Studio Mutation Engine -- Command Dispatch Tests

apply({"t": ...}) routes dict commands to the engine and the document store.
apply_all() keeps going past rejections and reports one outcome per command.
"""

import pytest

from studio.kernel.types import CycleDetected, InvalidValue, NotFound

# ============================================================================
# 1. Dispatch errors
# ============================================================================


class TestDispatch:
    def test_missing_type(self, engine):
        assert engine.apply({"ref": "x"}).code == "MISSING_FIELD"

    def test_unknown_type(self, engine):
        outcome = engine.apply({"t": "element.explode"})
        assert outcome.code == "UNKNOWN_COMMAND"
        assert "element.explode" in outcome.reason

    @pytest.mark.parametrize(
        "command",
        [
            {"t": "element.create", "tool": "rectangle", "x": 0},
            {"t": "element.update", "p": {"fill": "red"}},
            {"t": "element.delete"},
            {"t": "element.reorder", "parent": "a", "ref": "b"},
            {"t": "element.override", "ref": "a"},
            {"t": "page.rename", "ref": "page_1"},
        ],
    )
    def test_missing_fields(self, engine, command):
        assert engine.apply(command).code == "MISSING_FIELD"

    @pytest.mark.parametrize("command", [["element.create"], "page.add", None, 42])
    def test_command_must_be_a_mapping(self, engine, command):
        assert engine.apply(command).code == "INVALID_VALUE"

    def test_unhashable_type(self, engine):
        assert engine.apply({"t": ["element.create"]}).code == "UNKNOWN_COMMAND"


# ============================================================================
# 2. Element commands
# ============================================================================


class TestElementCommands:
    def test_create_update_delete(self, doc, engine):
        ref = engine.apply({"t": "element.create", "tool": "rectangle", "x": 0, "y": 0}).ref
        assert engine.apply({"t": "element.update", "ref": ref, "p": {"fill": "#ff0000"}}).accepted
        assert doc.get_element(ref).fill == "#ff0000"
        outcome = engine.apply({"t": "element.delete", "ref": ref})
        assert outcome.removed == [ref]

    def test_create_with_zoom(self, doc, engine):
        ref = engine.apply({"t": "element.create", "tool": "frame", "x": 40, "y": 20, "zoom": 2}).ref
        assert (doc.get_element(ref).x, doc.get_element(ref).y) == (20, 10)

    def test_create_from_template(self, doc, engine):
        ref = engine.apply({"t": "element.create_from_template", "template": "hero-section"}).ref
        assert doc.get_element(ref).name == "Hero Section"

    def test_reparent_and_back_to_root(self, doc, engine, tree):
        assert engine.apply({"t": "element.reparent", "ref": tree["nested"], "parent": tree["frame"]}).accepted
        assert doc.get_element(tree["nested"]).parent_id == tree["frame"]
        assert engine.apply({"t": "element.reparent", "ref": tree["nested"], "parent": "root"}).accepted
        assert doc.get_element(tree["nested"]).parent_id is None
        assert tree["nested"] not in doc.get_element(tree["frame"]).children_ids

    def test_reparent_position(self, doc, engine, tree):
        engine.apply({"t": "element.reparent", "ref": tree["nested"], "parent": tree["frame"], "position": 1})
        assert doc.get_element(tree["frame"]).children_ids == [tree["rect_a"], tree["nested"], tree["rect_b"]]

    def test_reparent_cycle(self, engine, tree):
        outcome = engine.apply({"t": "element.reparent", "ref": tree["frame"], "parent": tree["nested"]})
        assert outcome.code == "CYCLE_DETECTED"

    def test_detach_duplicate_reorder(self, doc, engine, tree):
        engine.apply({"t": "element.detach", "ref": tree["nested"]})
        assert doc.get_element(tree["nested"]).parent_id is None
        copy_id = engine.apply({"t": "element.duplicate", "ref": tree["rect_b"]}).ref
        engine.apply({"t": "element.reorder", "parent": tree["frame"], "ref": copy_id, "position": 0})
        assert doc.get_element(tree["frame"]).children_ids[0] == copy_id

    def test_override_set_and_clear(self, doc, engine, tree):
        ref = tree["rect_a"]
        engine.apply({"t": "element.override", "ref": ref, "breakpoint": "phone", "p": {"visible": False}})
        assert doc.get_element(ref).responsive_overrides == {"phone": {"visible": False}}
        engine.apply({"t": "element.override", "ref": ref, "breakpoint": "phone", "p": None})
        assert doc.get_element(ref).responsive_overrides == {}


# ============================================================================
# 3. Page commands
# ============================================================================


class TestPageCommands:
    def test_page_lifecycle(self, doc, engine):
        first = doc.active_page_id
        second = engine.apply({"t": "page.add"}).ref
        assert doc.active_page_id == second
        assert engine.apply({"t": "page.rename", "ref": second, "name": "About"}).accepted
        copy = engine.apply({"t": "page.duplicate", "ref": second}).ref
        assert doc.get_page(copy).name == "About Copy"
        assert engine.apply({"t": "page.activate", "ref": first}).accepted
        assert doc.active_page_id == first
        assert engine.apply({"t": "page.delete", "ref": second}).accepted
        assert [p.id for p in doc.pages] == [first, copy]

    def test_commands_target_active_page(self, doc, engine):
        engine.apply({"t": "element.create", "tool": "rectangle", "x": 0, "y": 0})
        engine.apply({"t": "page.add"})
        assert doc.elements == {}
        engine.apply({"t": "element.create", "tool": "ellipse", "x": 0, "y": 0})
        assert [el.type for el in doc.elements.values()] == ["ellipse"]


# ============================================================================
# 4. apply_all
# ============================================================================


class TestApplyAll:
    def test_rejections_are_skipped(self, doc, engine):
        outcomes = engine.apply_all(
            [
                {"t": "element.create", "tool": "rectangle", "x": 0, "y": 0},
                {"t": "element.update", "ref": "ghost", "p": {"fill": "red"}},
                {"t": "bogus"},
                {"t": "element.create", "tool": "text", "x": 5, "y": 5},
            ]
        )
        assert [o.accepted for o in outcomes] == [True, False, False, True]
        assert len(doc.elements) == 2

    def test_outcome_unwrap(self, engine):
        with pytest.raises(NotFound):
            engine.apply({"t": "element.delete", "ref": "ghost"}).unwrap()
        with pytest.raises(InvalidValue):
            engine.apply({"t": "nope"}).unwrap()
        frame = engine.apply({"t": "element.create", "tool": "frame", "x": 0, "y": 0}).unwrap()
        with pytest.raises(CycleDetected):
            engine.apply({"t": "element.reparent", "ref": frame, "parent": frame}).unwrap()


# ============================================================================
# 5. Malformed values
# ============================================================================


class TestMalformedValues:
    @pytest.mark.parametrize(
        "command",
        [
            {"t": "element.create", "tool": "rectangle", "x": "abc", "y": 0},
            {"t": "element.create", "tool": "rectangle", "x": 0, "y": [1]},
            {"t": "element.create", "tool": "rectangle", "x": True, "y": 0},
            {"t": "element.create", "tool": ["rectangle"], "x": 0, "y": 0},
            {"t": "element.create_from_template", "template": ["card"]},
            {"t": "element.update", "ref": ["el_1"], "p": {"fill": "red"}},
            {"t": "element.update", "ref": "el_1", "p": ["fill", "red"]},
            {"t": "element.reparent", "ref": "el_3", "parent": ["el_2"]},
            {"t": "element.override", "ref": "el_1", "breakpoint": ["phone"], "p": {"x": 1}},
            {"t": "element.override", "ref": "el_1", "breakpoint": "phone", "p": "x=1"},
            {"t": "page.rename", "ref": "page_1", "name": 5},
        ],
    )
    def test_rejected_not_raised(self, doc, engine, tree, command):
        before = {eid: el.clone() for eid, el in doc.elements.items()}
        assert engine.apply(command).code == "INVALID_VALUE"
        assert doc.elements == before

    @pytest.mark.parametrize("position", ["0", 1.5, True, -1, 5])
    def test_reparent_bad_position(self, doc, engine, tree, position):
        command = {"t": "element.reparent", "ref": tree["rect_b"], "parent": tree["rect_a"], "position": position}
        assert engine.apply(command).code == "INVALID_INDEX"
        assert doc.get_element(tree["rect_b"]).parent_id == tree["frame"]

    def test_add_child_index_type(self, engine, tree):
        assert engine.add_child_to_parent(tree["rect_a"], tree["rect_b"], "0").code == "INVALID_INDEX"
        assert engine.add_child_to_parent(tree["rect_a"], tree["rect_b"], 0).accepted

    def test_batch_survives_bad_commands(self, doc, engine):
        outcomes = engine.apply_all(
            [
                {"t": "element.create", "tool": "rectangle", "x": 0, "y": 0},
                {"t": "element.create", "tool": "rectangle", "x": "abc", "y": 0},
                "page.add",
                {"t": "element.create", "tool": "ellipse", "x": 5, "y": 5},
            ]
        )
        assert [o.accepted for o in outcomes] == [True, False, False, True]
        assert len(doc.elements) == 2


# ============================================================================
# 6. Wrap / unwrap commands
# ============================================================================


class TestWrapCommands:
    def test_wrap_then_unwrap(self, doc, engine, tree):
        outcome = engine.apply({"t": "element.wrap", "refs": [tree["rect_a"], tree["rect_b"]]})
        assert outcome.accepted
        assert doc.get_element(tree["rect_a"]).parent_id == outcome.ref
        undone = engine.apply({"t": "element.unwrap", "ref": outcome.ref})
        assert undone.removed == [outcome.ref]
        assert doc.get_element(tree["frame"]).children_ids == [tree["rect_a"], tree["rect_b"]]

    def test_wrap_needs_refs(self, engine):
        assert engine.apply({"t": "element.wrap"}).code == "MISSING_FIELD"
        assert engine.apply({"t": "element.unwrap"}).code == "MISSING_FIELD"
