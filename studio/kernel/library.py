"""
Studio Kernel — Component Library

Catalog of partial element definitions grouped by category. The mutation
engine clones a template's partials into full elements (fresh id, randomized
placement offset); the catalog itself is read-only data.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from studio.kernel.types import AutoLayout, Padding


@dataclass(frozen=True)
class ComponentTemplate:
    id: str
    name: str
    category: str
    description: str = ""
    # Partial element attributes, keyed by Element field name
    elements: tuple[dict[str, Any], ...] = ()


@dataclass(frozen=True)
class ComponentCategory:
    id: str
    name: str
    icon: str = ""
    components: tuple[ComponentTemplate, ...] = field(default_factory=tuple)


class ComponentLibrary:
    """Read-only catalog with lookup and search."""

    def __init__(self, categories: Iterable[ComponentCategory]) -> None:
        self.categories: tuple[ComponentCategory, ...] = tuple(categories)

    def templates(self) -> list[ComponentTemplate]:
        return [template for category in self.categories for template in category.components]

    def get(self, template_id: str) -> ComponentTemplate | None:
        for template in self.templates():
            if template.id == template_id:
                return template
        return None

    def category(self, category_id: str) -> ComponentCategory | None:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None

    def search(self, query: str, category_id: str | None = None) -> list[ComponentTemplate]:
        """Templates whose name or description contains query (case-insensitive)."""
        needle = query.strip().lower()
        results: list[ComponentTemplate] = []
        for category in self.categories:
            if category_id is not None and category.id != category_id:
                continue
            for template in category.components:
                if not needle or needle in template.name.lower() or needle in template.description.lower():
                    results.append(template)
        return results


# ---------------------------------------------------------------------------
# Default catalog
# ---------------------------------------------------------------------------


def _stack(direction: str, gap: float, padding: tuple[float, float, float, float], align: str, distribute: str) -> AutoLayout:
    top, right, bottom, left = padding
    return AutoLayout(
        enabled=True,
        kind="stack",
        direction=direction,  # type: ignore[arg-type]
        gap=gap,
        padding=Padding(top, right, bottom, left),
        align=align,  # type: ignore[arg-type]
        distribute=distribute,  # type: ignore[arg-type]
        wrap=False,
    )


DEFAULT_LIBRARY = ComponentLibrary(
    [
        ComponentCategory(
            id="sections",
            name="Sections",
            icon="layoutStack",
            components=(
                ComponentTemplate(
                    id="hero-section",
                    name="Hero Section",
                    category="sections",
                    description="Full-width hero with title and CTA",
                    elements=(
                        {
                            "type": "frame",
                            "name": "Hero Section",
                            "width": "fill",
                            "height": 500,
                            "fill": "#1a1a1a",
                            "corner_radius": 0,
                            "auto_layout": _stack("vertical", 24, (80, 48, 80, 48), "center", "center"),
                        },
                    ),
                ),
                ComponentTemplate(
                    id="features-grid",
                    name="Features Grid",
                    category="sections",
                    description="3-column feature cards",
                    elements=(
                        {
                            "type": "frame",
                            "name": "Features Grid",
                            "width": "fill",
                            "height": 400,
                            "fill": "#111111",
                            "corner_radius": 0,
                            "auto_layout": AutoLayout(
                                enabled=True,
                                kind="grid",
                                direction="horizontal",
                                gap=24,
                                padding=Padding(48, 48, 48, 48),
                                align="stretch",
                                distribute="start",
                                wrap=True,
                            ),
                        },
                    ),
                ),
                ComponentTemplate(
                    id="cta-section",
                    name="CTA Section",
                    category="sections",
                    description="Call-to-action with button",
                    elements=(
                        {
                            "type": "frame",
                            "name": "CTA Section",
                            "width": "fill",
                            "height": 300,
                            "fill": "#3b82f6",
                            "corner_radius": 16,
                            "auto_layout": _stack("vertical", 20, (48, 48, 48, 48), "center", "center"),
                        },
                    ),
                ),
            ),
        ),
        ComponentCategory(
            id="navigation",
            name="Navigation",
            icon="hand",
            components=(
                ComponentTemplate(
                    id="navbar",
                    name="Navbar",
                    category="navigation",
                    description="Top navigation bar",
                    elements=(
                        {
                            "type": "frame",
                            "name": "Navbar",
                            "width": "fill",
                            "height": 64,
                            "fill": "#111111",
                            "corner_radius": 0,
                            "auto_layout": _stack("horizontal", 24, (16, 24, 16, 24), "center", "space-between"),
                        },
                    ),
                ),
                ComponentTemplate(
                    id="footer",
                    name="Footer",
                    category="navigation",
                    description="Page footer with links",
                    elements=(
                        {
                            "type": "frame",
                            "name": "Footer",
                            "width": "fill",
                            "height": 200,
                            "fill": "#0a0a0a",
                            "corner_radius": 0,
                            "auto_layout": _stack("horizontal", 48, (48, 48, 48, 48), "start", "start"),
                        },
                    ),
                ),
            ),
        ),
        ComponentCategory(
            id="elements",
            name="Elements",
            icon="rectangle",
            components=(
                ComponentTemplate(
                    id="button-primary",
                    name="Primary Button",
                    category="elements",
                    description="Primary action button",
                    elements=(
                        {
                            "type": "frame",
                            "name": "Button",
                            "width": 160,
                            "height": 48,
                            "fill": "#ffffff",
                            "corner_radius": 8,
                            "auto_layout": _stack("horizontal", 8, (12, 24, 12, 24), "center", "center"),
                        },
                    ),
                ),
                ComponentTemplate(
                    id="card",
                    name="Card",
                    category="elements",
                    description="Content card with padding",
                    elements=(
                        {
                            "type": "frame",
                            "name": "Card",
                            "width": 300,
                            "height": 200,
                            "fill": "#1a1a1a",
                            "corner_radius": 12,
                            "auto_layout": _stack("vertical", 16, (24, 24, 24, 24), "stretch", "start"),
                        },
                    ),
                ),
                ComponentTemplate(
                    id="heading",
                    name="Heading",
                    category="elements",
                    description="Large title text",
                    elements=(
                        {
                            "type": "text",
                            "name": "Heading",
                            "width": "auto",
                            "height": "auto",
                            "fill": "transparent",
                            "corner_radius": 0,
                            "text": "Heading",
                            "font_size": 48,
                            "font_weight": "700",
                        },
                    ),
                ),
                ComponentTemplate(
                    id="image-placeholder",
                    name="Image",
                    category="elements",
                    description="Image placeholder",
                    elements=(
                        {
                            "type": "image",
                            "name": "Image",
                            "width": 400,
                            "height": 300,
                            "fill": "#27272a",
                            "corner_radius": 8,
                        },
                    ),
                ),
            ),
        ),
    ]
)
