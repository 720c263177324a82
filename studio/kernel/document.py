"""
Studio Kernel — Document Store

Owns the ordered list of pages and which one is active, plus the session
state every other component reads: the selected element and the active
breakpoint. All operations are total — invalid ids come back as a rejected
Outcome, never an exception.

The element arena of each page is written only by the mutation engine
(studio.kernel.mutations); the store itself only adds, removes, renames and
duplicates whole pages.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from studio.config import DEFAULT_AUTO_LAYOUT, DEFAULT_BREAKPOINTS
from studio.kernel.breakpoints import BreakpointRegistry
from studio.kernel.library import DEFAULT_LIBRARY, ComponentLibrary
from studio.kernel.types import (
    INVALID_VALUE,
    LAST_PAGE,
    PAGE_NOT_FOUND,
    UNKNOWN_BREAKPOINT,
    AutoLayout,
    Breakpoint,
    Element,
    IdFactory,
    Outcome,
    Page,
    ok,
    reject,
    uuid_ids,
)

logger = logging.getLogger(__name__)


class Document:
    """
    A multi-page design document.

    Constant tables are injected here rather than read from module globals, so
    two documents (or two tests) never share mutable state:

        doc = Document(breakpoints=[...], library=my_library, id_factory=counter_ids())
    """

    def __init__(
        self,
        pages: Iterable[Page] | None = None,
        *,
        breakpoints: Iterable[Breakpoint] | None = None,
        library: ComponentLibrary | None = None,
        default_auto_layout: AutoLayout | None = None,
        id_factory: IdFactory | None = None,
    ) -> None:
        self.breakpoints = BreakpointRegistry(breakpoints if breakpoints is not None else DEFAULT_BREAKPOINTS)
        self.library = library if library is not None else DEFAULT_LIBRARY
        self.default_auto_layout = default_auto_layout if default_auto_layout is not None else DEFAULT_AUTO_LAYOUT
        self._id_factory = id_factory or uuid_ids

        self.pages: list[Page] = list(pages or [])
        if not self.pages:
            self.pages.append(Page(id=self.new_id("page"), name="Page 1"))
        self.active_page_id: str = self.pages[0].id
        self.active_breakpoint_id: str = self.breakpoints.default.id
        self.selected_id: str | None = None

    # -- ids --

    def new_id(self, prefix: str = "el") -> str:
        """Fresh id, unique across every page and element of the document."""
        while True:
            candidate = self._id_factory(prefix)
            if not self._id_in_use(candidate):
                return candidate

    def _id_in_use(self, candidate: str) -> bool:
        for page in self.pages:
            if page.id == candidate or candidate in page.elements:
                return True
        return False

    # -- lookup --

    def get_page(self, page_id: str | None) -> Page | None:
        for page in self.pages:
            if page.id == page_id:
                return page
        return None

    def get_active_page(self) -> Page:
        page = self.get_page(self.active_page_id)
        if page is None:
            # active id went stale; the first page is always there
            page = self.pages[0]
            self.active_page_id = page.id
        return page

    @property
    def elements(self) -> dict[str, Element]:
        """Element arena of the active page."""
        return self.get_active_page().elements

    def get_element(self, element_id: str | None) -> Element | None:
        return self.get_active_page().get(element_id)

    @property
    def selected(self) -> Element | None:
        return self.get_element(self.selected_id)

    # -- pages --

    def set_active_page(self, page_id: str) -> Outcome:
        if self.get_page(page_id) is None:
            return reject(PAGE_NOT_FOUND, f"'{page_id}' does not exist")
        if page_id != self.active_page_id:
            self.active_page_id = page_id
            self.selected_id = None
        return ok(page_id)

    def add_page(self) -> str:
        """Append an empty page named "Page N", activate it, return its id."""
        page = Page(id=self.new_id("page"), name=f"Page {len(self.pages) + 1}")
        self.pages.append(page)
        self.active_page_id = page.id
        self.selected_id = None
        logger.debug("document: added page %s", page.id)
        return page.id

    def delete_page(self, page_id: str) -> Outcome:
        page = self.get_page(page_id)
        if page is None:
            return reject(PAGE_NOT_FOUND, f"'{page_id}' does not exist")
        if len(self.pages) <= 1:
            return reject(LAST_PAGE, "a document keeps at least one page")

        self.pages = [p for p in self.pages if p.id != page_id]
        if self.active_page_id == page_id:
            self.active_page_id = self.pages[0].id
            self.selected_id = None
        logger.debug("document: deleted page %s (%d elements)", page_id, len(page.elements))
        return ok(page_id, removed=list(page.elements))

    def rename_page(self, page_id: str, name: str) -> Outcome:
        page = self.get_page(page_id)
        if page is None:
            return reject(PAGE_NOT_FOUND, f"'{page_id}' does not exist")
        if not isinstance(name, str):
            return reject(INVALID_VALUE, f"page name must be a string, got {name!r}")
        page.name = name
        return ok(page_id)

    def duplicate_page(self, page_id: str) -> Outcome:
        """
        Copy a page with every element given a fresh id. parent_id and
        children_ids are remapped so the copy only references its own
        elements. The copy is appended at the end and not activated.
        """
        page = self.get_page(page_id)
        if page is None:
            return reject(PAGE_NOT_FOUND, f"'{page_id}' does not exist")

        id_map = self.fresh_ids(page.elements)

        copy_page = Page(id=self.new_id("page"), name=f"{page.name} Copy")
        copy_page.elements = clone_elements(page.elements.values(), id_map)
        self.pages.append(copy_page)
        logger.debug("document: duplicated page %s as %s", page_id, copy_page.id)
        return ok(copy_page.id)

    def fresh_ids(self, old_ids: Iterable[str]) -> dict[str, str]:
        """Map each old id to a new element id, unique within the batch too."""
        taken: set[str] = set()
        id_map: dict[str, str] = {}
        for old_id in old_ids:
            new = self.new_id("el")
            while new in taken:
                new = self.new_id("el")
            taken.add(new)
            id_map[old_id] = new
        return id_map

    # -- breakpoints --

    def set_breakpoint(self, breakpoint_id: str) -> Outcome:
        if breakpoint_id not in self.breakpoints:
            return reject(UNKNOWN_BREAKPOINT, f"'{breakpoint_id}' is not a known breakpoint")
        self.active_breakpoint_id = breakpoint_id
        return ok(breakpoint_id)


# ---------------------------------------------------------------------------
# Cloning
# ---------------------------------------------------------------------------


def clone_elements(elements: Iterable[Element], id_map: dict[str, str]) -> dict[str, Element]:
    """
    Deep-clone elements under new ids. References to ids inside id_map are
    rewritten; a parent outside the cloned set becomes None, and children
    outside it are dropped, so the result never points at the originals.
    """
    result: dict[str, Element] = {}
    for el in elements:
        copy_el = el.clone()
        copy_el.id = id_map[el.id]
        copy_el.parent_id = id_map.get(el.parent_id) if el.parent_id is not None else None
        copy_el.children_ids = [id_map[cid] for cid in el.children_ids if cid in id_map]
        result[copy_el.id] = copy_el
    return result


# ---------------------------------------------------------------------------
# Integrity
# ---------------------------------------------------------------------------


def integrity_check(page: Page, breakpoints: BreakpointRegistry | None = None) -> tuple[bool, list[str]]:
    """
    Verify the tree invariants of one page. Returns (ok, problems).

    - parent_id and children_ids agree in both directions
    - children_ids hold no duplicates
    - following parent_id always ends at a root
    - responsive override keys are known breakpoints (when a registry is given)
    """
    problems: list[str] = []
    elements = page.elements

    for el in elements.values():
        if el.parent_id is not None:
            parent = elements.get(el.parent_id)
            if parent is None:
                problems.append(f"{el.id}: parent {el.parent_id} does not exist")
            elif el.id not in parent.children_ids:
                problems.append(f"{el.id}: missing from children of {el.parent_id}")

        if len(set(el.children_ids)) != len(el.children_ids):
            problems.append(f"{el.id}: duplicate ids in children")
        for cid in el.children_ids:
            child = elements.get(cid)
            if child is None:
                problems.append(f"{el.id}: child {cid} does not exist")
            elif child.parent_id != el.id:
                problems.append(f"{el.id}: child {cid} points at parent {child.parent_id}")

        if breakpoints is not None:
            for bp_id in el.responsive_overrides:
                if bp_id not in breakpoints:
                    problems.append(f"{el.id}: override for unknown breakpoint {bp_id}")

    for el in elements.values():
        seen: set[str] = {el.id}
        current = el
        while current.parent_id is not None:
            if current.parent_id in seen:
                problems.append(f"{el.id}: parent chain loops back to {current.parent_id}")
                break
            seen.add(current.parent_id)
            parent = elements.get(current.parent_id)
            if parent is None:
                break
            current = parent

    return (not problems, problems)
