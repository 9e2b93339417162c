"""Per-pane list state: cursor, scroll, drill-down stack and filter.

A :class:`Pane` owns the item list it currently shows.  "Go in" pushes the
current level onto an explicit stack and shows the selected container's
children; "go back" pops it and restores the saved list, cursor and scroll
exactly.  Filtering narrows the current level only and is undone by
:meth:`Pane.end_filter`, which restores the saved level just as exactly.

Every operation is total: moving past either end clamps, "go in" on a leaf
and "go back" at the root do nothing.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from spectui.models import PaneItem, PaneKind, PaneSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Level:
    items: list[PaneItem]
    cursor: int
    scroll: int
    label: str = ""


class Pane:
    """One navigable list view.

    Args:
        kind: Which pane this is.
        viewport_height: Number of rows visible at once; the scroll offset
            keeps the cursor inside this window.
    """

    def __init__(self, kind: PaneKind, viewport_height: int = 12) -> None:
        self.kind = kind
        self.items: list[PaneItem] = []
        self.cursor = 0
        self.scroll = 0
        self.viewport_height = max(1, viewport_height)
        self._stack: list[_Level] = []
        self._unfiltered: Optional[_Level] = None

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    @property
    def selected(self) -> Optional[PaneItem]:
        if 0 <= self.cursor < len(self.items):
            return self.items[self.cursor]
        return None

    @property
    def depth(self) -> int:
        return len(self._stack)

    @property
    def filtering(self) -> bool:
        return self._unfiltered is not None

    @property
    def breadcrumb(self) -> list[str]:
        return [level.label for level in self._stack]

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #

    def set_items(self, items: list[PaneItem], keep_cursor: bool = False) -> None:
        """Replace the whole content, dropping the drill-down stack and filter.

        Args:
            items: The new root level.
            keep_cursor: Keep the cursor (clamped) instead of resetting it
                to the first item.
        """
        self._stack.clear()
        self._unfiltered = None
        self.items = list(items)
        if not keep_cursor:
            self.cursor = 0
            self.scroll = 0
        self._clamp()

    def set_viewport(self, height: int) -> None:
        self.viewport_height = max(1, height)
        self._clamp()

    def move(self, delta: int) -> None:
        """Move the cursor by *delta*, clamped to the list bounds."""
        self.move_to(self.cursor + delta)

    def move_to(self, index: int) -> None:
        self.cursor = index
        self._clamp()

    def select_item(self, item: PaneItem) -> bool:
        """Put the cursor on *item* (by identity) if it is in the current list."""
        for index, candidate in enumerate(self.items):
            if candidate is item:
                self.move_to(index)
                return True
        return False

    def go_in(self) -> bool:
        """Enter the selected container.  Returns ``False`` on a leaf."""
        item = self.selected
        if item is None or not item.is_container or self.filtering:
            return False
        self._stack.append(_Level(self.items, self.cursor, self.scroll, item.label))
        self.items = list(item.children or [])
        self.cursor = 0
        self.scroll = 0
        logger.debug("%s: entered '%s' (depth %d)", self.kind.value, item.label, self.depth)
        return True

    def go_back(self) -> bool:
        """Return to the parent level.  Returns ``False`` at the root."""
        if not self._stack or self.filtering:
            return False
        level = self._stack.pop()
        self.items = level.items
        self.cursor = level.cursor
        self.scroll = level.scroll
        return True

    # ------------------------------------------------------------------ #
    # Filter
    # ------------------------------------------------------------------ #

    def begin_filter(self) -> None:
        if self._unfiltered is None:
            self._unfiltered = _Level(self.items, self.cursor, self.scroll)

    def apply_filter(self, text: str) -> None:
        """Show the items of the saved level whose label contains *text*.

        Matching is case-insensitive.  An empty *text* shows every item.
        """
        self.begin_filter()
        assert self._unfiltered is not None
        needle = text.lower()
        self.items = [item for item in self._unfiltered.items if needle in item.label.lower()]
        self.cursor = 0
        self.scroll = 0
        self._clamp()

    def end_filter(self, keep_selection: bool = False) -> None:
        """Restore the level saved by :meth:`begin_filter`.

        Args:
            keep_selection: Move the cursor onto the item that was selected
                in the filtered list instead of restoring the old cursor.
        """
        if self._unfiltered is None:
            return
        chosen = self.selected
        level = self._unfiltered
        self._unfiltered = None
        self.items = level.items
        self.cursor = level.cursor
        self.scroll = level.scroll
        if keep_selection and chosen is not None:
            self.select_item(chosen)

    # ------------------------------------------------------------------ #
    # Snapshot
    # ------------------------------------------------------------------ #

    def snapshot(self, number: int, title: str = "", active: bool = False) -> PaneSnapshot:
        return PaneSnapshot(
            kind=self.kind,
            number=number,
            title=title or self.kind.value,
            lines=[item.label for item in self.items],
            containers=[item.is_container for item in self.items],
            cursor=self.cursor,
            scroll=self.scroll,
            viewport_height=self.viewport_height,
            total=len(self.items),
            breadcrumb=self.breadcrumb,
            active=active,
        )

    def _clamp(self) -> None:
        if not self.items:
            self.cursor = 0
            self.scroll = 0
            return
        self.cursor = max(0, min(self.cursor, len(self.items) - 1))
        if self.cursor < self.scroll:
            self.scroll = self.cursor
        elif self.cursor >= self.scroll + self.viewport_height:
            self.scroll = self.cursor - self.viewport_height + 1
        max_scroll = max(0, len(self.items) - self.viewport_height)
        self.scroll = max(0, min(self.scroll, max_scroll))
