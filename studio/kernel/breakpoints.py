"""
Studio Kernel — Breakpoint Registry

Ordered, read-only set of named viewport widths. Supplied at document
construction; the first entry is the base (default) breakpoint.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from studio.kernel.types import Breakpoint


class BreakpointRegistry:
    """Read-only ordered breakpoint table."""

    def __init__(self, breakpoints: Iterable[Breakpoint]) -> None:
        self._items: tuple[Breakpoint, ...] = tuple(breakpoints)
        if not self._items:
            raise ValueError("BreakpointRegistry needs at least one breakpoint")
        self._by_id: dict[str, Breakpoint] = {}
        for bp in self._items:
            if bp.id in self._by_id:
                raise ValueError(f"duplicate breakpoint id: {bp.id!r}")
            self._by_id[bp.id] = bp

    def __iter__(self) -> Iterator[Breakpoint]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, breakpoint_id: object) -> bool:
        return isinstance(breakpoint_id, str) and breakpoint_id in self._by_id

    @property
    def ids(self) -> list[str]:
        return [bp.id for bp in self._items]

    @property
    def default(self) -> Breakpoint:
        return self._items[0]

    def get(self, breakpoint_id: str | None) -> Breakpoint | None:
        if breakpoint_id is None:
            return None
        return self._by_id.get(breakpoint_id)

    def resolve(self, breakpoint_id: str | None) -> Breakpoint:
        """Breakpoint for the id, falling back to the default for unknown ids."""
        return self._by_id.get(breakpoint_id or "", self.default)

    def for_viewport(self, width: float) -> Breakpoint:
        """
        Narrowest breakpoint that still fits the viewport width.

        With desktop 1200 / tablet 810 / phone 375:
          375  → phone
          400  → tablet
          1500 → desktop (wider than every entry → widest)
        """
        fitting = [bp for bp in self._items if bp.width >= width]
        if not fitting:
            return max(self._items, key=lambda bp: bp.width)
        return min(fitting, key=lambda bp: bp.width)
