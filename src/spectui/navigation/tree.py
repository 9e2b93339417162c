"""Turn resolved nodes and decoded bodies into drill-down pane items."""

from __future__ import annotations

import json
from typing import Any

from spectui.models import BrokenMarker, CyclicMarker, PaneItem


def tree_items(value: Any) -> list[PaneItem]:
    """Return the items of one tree level for *value*.

    Mappings yield one item per key and sequences one item per element;
    non-empty mappings and sequences become containers.  A scalar yields a
    single leaf.  Cyclic and broken reference markers are leaves labelled
    ``<cyclic $ref ...>`` and ``<broken $ref ...>``.
    """
    if isinstance(value, dict):
        return [tree_item(str(key), child) for key, child in value.items()]
    if isinstance(value, list):
        return [tree_item(f"[{index}]", child) for index, child in enumerate(value)]
    return [PaneItem(label=format_scalar(value), value=value)]


def tree_item(key: str, value: Any) -> PaneItem:
    if isinstance(value, (CyclicMarker, BrokenMarker)):
        return PaneItem(label=f"{key}: {value.label}", value=value)
    if isinstance(value, dict):
        if not value:
            return PaneItem(label=f"{key}: {{}}", value=value)
        return PaneItem(label=f"{key} {{{len(value)}}}", value=value, children=tree_items(value))
    if isinstance(value, list):
        if not value:
            return PaneItem(label=f"{key}: []", value=value)
        return PaneItem(label=f"{key} [{len(value)}]", value=value, children=tree_items(value))
    return PaneItem(label=f"{key}: {format_scalar(value)}", value=value)


def format_scalar(value: Any) -> str:
    if isinstance(value, str):
        return " ".join(value.split())
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError):
        return str(value)
