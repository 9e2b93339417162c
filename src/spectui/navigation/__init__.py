"""Navigation model -- panes, drill-down, filter, and the session state machine.

Sub-modules:

* :mod:`~spectui.navigation.pane` -- per-pane cursor, scroll, drill-down
  stack and filter.
* :mod:`~spectui.navigation.tree` -- converts resolved nodes into pane items.
* :mod:`~spectui.navigation.session` -- the :class:`Session` driven by input
  events.
"""

from spectui.navigation.pane import Pane
from spectui.navigation.session import Session
from spectui.navigation.tree import tree_items

__all__ = ["Pane", "Session", "tree_items"]
