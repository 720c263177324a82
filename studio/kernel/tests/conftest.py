"""
Studio kernel test configuration.

Every test gets its own Document with a deterministic id factory, so ids read
page_1, el_1, el_2, ... in creation order.
"""

import random

import pytest

from studio.kernel.document import Document
from studio.kernel.interaction import Interaction
from studio.kernel.mutations import MutationEngine
from studio.kernel.types import counter_ids


@pytest.fixture
def doc():
    return Document(id_factory=counter_ids())


@pytest.fixture
def engine(doc):
    return MutationEngine(doc, rng=random.Random(7))


@pytest.fixture
def ui(doc, engine):
    return Interaction(doc, engine)


@pytest.fixture
def tree(doc, engine):
    """
    frame (el_1, auto-layout)
      rect_a (el_2)
        nested (el_4)
      rect_b (el_3)
    """
    frame = engine.create_element("frame", (0, 0)).ref
    rect_a = engine.create_element("rectangle", (10, 10)).ref
    rect_b = engine.create_element("rectangle", (20, 20)).ref
    nested = engine.create_element("ellipse", (5, 5)).ref
    engine.add_child_to_parent(frame, rect_a).unwrap()
    engine.add_child_to_parent(frame, rect_b).unwrap()
    engine.add_child_to_parent(rect_a, nested).unwrap()
    doc.selected_id = None
    return {"frame": frame, "rect_a": rect_a, "rect_b": rect_b, "nested": nested}
