"""
Durable document shape.

Pages → Elements exactly as the in-memory data model holds them, with camelCase
keys and sizing written as number | "auto" | "fill". Loading validates the
shape with pydantic, then checks the tree invariants of every page.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, Field, ValidationError
from pydantic.alias_generators import to_camel

from studio.kernel.document import Document, integrity_check
from studio.kernel.mutations import coerce_override
from studio.kernel.types import (
    OVERRIDE_KEYS,
    AutoLayout,
    Element,
    Padding,
    Page,
    parse_sizing,
    sizing_to_raw,
)

RawSizing = Annotated[float, Field(ge=0)] | Literal["auto", "fill"]

_CAMEL = {"extra": "forbid", "alias_generator": to_camel, "populate_by_name": True}

# Override keys are snake_case in memory, camelCase on disk
_OVERRIDE_TO_DISK = {"font_size": "fontSize"}
_OVERRIDE_FROM_DISK = {v: k for k, v in _OVERRIDE_TO_DISK.items()}


class DocumentLoadError(Exception):
    """Persisted document is malformed or breaks a tree invariant."""

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class PaddingModel(BaseModel):
    model_config = {"extra": "forbid"}

    top: float = Field(default=0, ge=0)
    right: float = Field(default=0, ge=0)
    bottom: float = Field(default=0, ge=0)
    left: float = Field(default=0, ge=0)


class AutoLayoutModel(BaseModel):
    model_config = _CAMEL

    enabled: bool = False
    kind: Literal["stack", "grid"] = "stack"
    direction: Literal["horizontal", "vertical"] = "vertical"
    gap: float = Field(default=0, ge=0)
    padding: PaddingModel = Field(default_factory=PaddingModel)
    align: Literal["start", "center", "end", "stretch"] = "start"
    distribute: Literal["start", "center", "end", "space-between", "space-around"] = "start"
    wrap: bool = False


class ElementModel(BaseModel):
    model_config = _CAMEL

    id: str = Field(min_length=1)
    type: Literal["rectangle", "ellipse", "text", "image", "frame", "component"]
    name: str = ""

    x: float = 0
    y: float = 0
    width: RawSizing = 100
    height: RawSizing = 100
    min_width: float | None = None
    max_width: float | None = None
    min_height: float | None = None
    max_height: float | None = None

    fill: str = "#3b82f6"
    stroke: str = "transparent"
    stroke_width: float = 0
    corner_radius: float = 8
    opacity: float = 1
    rotation: float = 0

    text: str | None = None
    font_size: float | None = None
    font_weight: str | None = None
    font_family: str | None = None
    text_align: str | None = None
    line_height: float | None = None
    image_src: str | None = None

    locked: bool = False
    visible: bool = True
    overflow: Literal["visible", "hidden", "scroll"] = "visible"

    parent_id: str | None = None
    children_ids: list[str] = Field(default_factory=list)

    auto_layout: AutoLayoutModel | None = None
    responsive_overrides: dict[str, dict[str, Any]] = Field(default_factory=dict)


class PageModel(BaseModel):
    model_config = _CAMEL

    id: str = Field(min_length=1)
    name: str
    elements: list[ElementModel] = Field(default_factory=list)


class DocumentModel(BaseModel):
    model_config = _CAMEL

    pages: list[PageModel] = Field(min_length=1)
    active_page_id: str | None = None
    active_breakpoint_id: str | None = None


# ---------------------------------------------------------------------------
# Conversion
# ---------------------------------------------------------------------------


def _layout_to_model(layout: AutoLayout) -> AutoLayoutModel:
    return AutoLayoutModel(
        enabled=layout.enabled,
        kind=layout.kind,
        direction=layout.direction,
        gap=layout.gap,
        padding=PaddingModel(**layout.padding.to_dict()),
        align=layout.align,
        distribute=layout.distribute,
        wrap=layout.wrap,
    )


def _layout_from_model(model: AutoLayoutModel) -> AutoLayout:
    return AutoLayout(
        enabled=model.enabled,
        kind=model.kind,
        direction=model.direction,
        gap=model.gap,
        padding=Padding(**model.padding.model_dump()),
        align=model.align,
        distribute=model.distribute,
        wrap=model.wrap,
    )


def _overrides_to_disk(overrides: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
    return {
        bp_id: {_OVERRIDE_TO_DISK.get(key, key): value for key, value in delta.items()}
        for bp_id, delta in overrides.items()
    }


def _overrides_from_disk(overrides: dict[str, dict[str, Any]]) -> dict[str, dict[str, Any]]:
    return {
        bp_id: {_OVERRIDE_FROM_DISK.get(key, key): value for key, value in delta.items()}
        for bp_id, delta in overrides.items()
    }


def element_to_model(element: Element) -> ElementModel:
    data = {
        name: getattr(element, name)
        for name in ElementModel.model_fields
        if name not in ("width", "height", "auto_layout", "responsive_overrides", "children_ids")
    }
    return ElementModel(
        **data,
        width=sizing_to_raw(element.width),
        height=sizing_to_raw(element.height),
        children_ids=list(element.children_ids),
        auto_layout=_layout_to_model(element.auto_layout) if element.auto_layout else None,
        responsive_overrides=_overrides_to_disk(element.responsive_overrides),
    )


def element_from_model(model: ElementModel) -> Element:
    data = model.model_dump(exclude={"width", "height", "auto_layout", "responsive_overrides"})
    return Element(
        **data,
        width=parse_sizing(model.width),
        height=parse_sizing(model.height),
        auto_layout=_layout_from_model(model.auto_layout) if model.auto_layout else None,
        responsive_overrides=_overrides_from_disk(model.responsive_overrides),
    )


def _override_problems(element: Element) -> list[str]:
    problems: list[str] = []
    for bp_id, delta in element.responsive_overrides.items():
        unknown = set(delta) - OVERRIDE_KEYS
        if unknown:
            problems.append(f"override for {bp_id} sets unknown keys {sorted(unknown)}")
            continue
        try:
            coerce_override(delta)
        except (TypeError, ValueError) as exc:
            problems.append(f"override for {bp_id}: {exc}")
    return problems


def document_to_model(document: Document) -> DocumentModel:
    return DocumentModel(
        pages=[
            PageModel(
                id=page.id,
                name=page.name,
                elements=[element_to_model(el) for el in page.elements.values()],
            )
            for page in document.pages
        ],
        active_page_id=document.active_page_id,
        active_breakpoint_id=document.active_breakpoint_id,
    )


def dump_document(document: Document) -> dict[str, Any]:
    """JSON-ready dict of the whole document (camelCase keys)."""
    return document_to_model(document).model_dump(by_alias=True, mode="json")


def load_document(data: dict[str, Any] | str, **document_kwargs: Any) -> Document:
    """
    Build a Document from persisted data (dict or JSON text). Keyword
    arguments go to Document(...) (breakpoints, library, id_factory, ...).

    Raises DocumentLoadError when the shape is invalid, an element id repeats
    within a page, or a page breaks a tree invariant.
    """
    try:
        if isinstance(data, str):
            model = DocumentModel.model_validate_json(data)
        else:
            model = DocumentModel.model_validate(data)
    except ValidationError as exc:
        errors = [f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()]
        raise DocumentLoadError("invalid document", errors) from exc

    pages: list[Page] = []
    problems: list[str] = []
    for page_model in model.pages:
        if any(p.id == page_model.id for p in pages):
            problems.append(f"duplicate page id {page_model.id}")
            continue
        page = Page(id=page_model.id, name=page_model.name)
        for element_model in page_model.elements:
            if element_model.id in page.elements:
                problems.append(f"{page.id}: duplicate element id {element_model.id}")
                continue
            element = element_from_model(element_model)
            problems.extend(f"{page.id}: {element.id}: {problem}" for problem in _override_problems(element))
            page.elements[element.id] = element
        pages.append(page)

    document = Document(pages, **document_kwargs)
    for page in pages:
        _, page_problems = integrity_check(page, document.breakpoints)
        problems.extend(f"{page.id}: {problem}" for problem in page_problems)
    if problems:
        raise DocumentLoadError("document breaks tree invariants", problems)

    if model.active_page_id is not None:
        document.set_active_page(model.active_page_id)
    if model.active_breakpoint_id is not None:
        document.set_breakpoint(model.active_breakpoint_id)
    return document
