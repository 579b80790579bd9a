"""Result list management."""

from __future__ import annotations

from collections.abc import Iterator

from drivefinder.search.models import RenderedItem
from drivefinder.search.protocol import SearchView


class ResultListManager:
    """Owns the rendered items currently on display.

    Items are kept in arrival order. When a view is attached, every tracked
    item has a matching element in the view: ``append`` creates it and
    ``clear`` releases it.
    """

    def __init__(self, view: SearchView | None = None) -> None:
        self._view = view
        self._items: list[RenderedItem] = []

    @property
    def items(self) -> tuple[RenderedItem, ...]:
        return tuple(self._items)

    def labels(self) -> list[str]:
        return [item.label for item in self._items]

    def clear(self) -> None:
        """Destroy every tracked item."""
        if self._view is not None:
            for item in self._items:
                self._view.remove_item(item)
        self._items.clear()

    def append(self, item: RenderedItem) -> None:
        self._items.append(item)
        if self._view is not None:
            self._view.add_item(item)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[RenderedItem]:
        return iter(self._items)
