"""
Studio configuration — interaction constants and default tables in one place.

Numeric knobs are read from the environment at import time. Constant tables
(breakpoints, default auto-layout) are immutable module defaults; a Document is
handed its own copies at construction so independent documents never share
mutable state.
"""

from __future__ import annotations

import os

from studio.kernel.types import AutoLayout, Breakpoint, Padding


def _float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from exc


class Settings:
    """Editor settings from environment variables."""

    # Resize
    MIN_ELEMENT_SIZE: float = _float_env("STUDIO_MIN_ELEMENT_SIZE", 20.0)

    # Zoom
    ZOOM_MIN: float = _float_env("STUDIO_ZOOM_MIN", 0.1)
    ZOOM_MAX: float = _float_env("STUDIO_ZOOM_MAX", 4.0)
    ZOOM_BUTTON_STEP: float = _float_env("STUDIO_ZOOM_BUTTON_STEP", 0.25)
    ZOOM_WHEEL_STEP: float = _float_env("STUDIO_ZOOM_WHEEL_STEP", 0.05)

    # Placement of copies and library instances
    DUPLICATE_OFFSET: float = _float_env("STUDIO_DUPLICATE_OFFSET", 20.0)
    TEMPLATE_ORIGIN: float = _float_env("STUDIO_TEMPLATE_ORIGIN", 100.0)
    TEMPLATE_JITTER: float = _float_env("STUDIO_TEMPLATE_JITTER", 100.0)

    @property
    def ZOOM_BUTTON_MIN(self) -> float:
        # Zoom buttons never go below one step, the wheel may
        return max(self.ZOOM_MIN, self.ZOOM_BUTTON_STEP)


# Singleton instance
settings = Settings()

if settings.MIN_ELEMENT_SIZE <= 0:
    raise RuntimeError("STUDIO_MIN_ELEMENT_SIZE must be positive")
if settings.ZOOM_MIN <= 0 or settings.ZOOM_MIN > settings.ZOOM_MAX:
    raise RuntimeError("STUDIO_ZOOM_MIN must be positive and not exceed STUDIO_ZOOM_MAX")


# ---------------------------------------------------------------------------
# Default tables
# ---------------------------------------------------------------------------

DEFAULT_BREAKPOINTS: tuple[Breakpoint, ...] = (
    Breakpoint(id="desktop", name="Desktop", width=1200, icon="desktop"),
    Breakpoint(id="tablet", name="Tablet", width=810, icon="tablet"),
    Breakpoint(id="phone", name="Phone", width=375, icon="phone"),
)

DEFAULT_AUTO_LAYOUT = AutoLayout(
    enabled=False,
    kind="stack",
    direction="vertical",
    gap=0,
    padding=Padding(),
    align="start",
    distribute="start",
    wrap=False,
)
