"""Render projection record: the flat shape handed to renderers and exporters."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class RenderNode(BaseModel):
    """
    One element as downstream consumers see it. Keys serialize in camelCase
    (strokeWidth, childrenIds, ...) with model_dump(by_alias=True).
    """

    model_config = {"extra": "forbid", "alias_generator": to_camel, "populate_by_name": True}

    id: str
    type: str
    x: float
    y: float
    width: float
    height: float
    rotation: float = 0
    fill: str = "transparent"
    stroke: str = "transparent"
    stroke_width: float = 0
    opacity: float = 1
    corner_radius: float = 0
    text: str | None = None
    font_size: float | None = None
    font_family: str | None = None
    image_src: str | None = None
    children_ids: list[str] = Field(default_factory=list)
    parent_id: str | None = None
