"""Extract the operations and tags of a loaded OpenAPI document.

This module walks the ``paths`` and ``webhooks`` mappings of a
:class:`~spectui.models.Document` and builds one
:class:`~spectui.models.OperationItem` per (path item, HTTP method) pair.

Operations keep their raw *Operation Object*; references inside it are only
expanded when a view needs them (see
:class:`~spectui.parser.resolver.Resolver`), so loading stays cheap even for
very large documents.  Path items themselves may be ``$ref`` pointers into
``components/pathItems`` and are resolved here.
"""

from __future__ import annotations

import logging
from typing import Any

from spectui.exceptions import MalformedDocumentError
from spectui.models import (
    BrokenMarker,
    CyclicMarker,
    Document,
    HTTPMethod,
    OperationItem,
    OperationKind,
)
from spectui.parser.resolver import Resolver
from spectui.parser.store import extract_servers

logger = logging.getLogger(__name__)

# HTTP methods recognized by OpenAPI
_HTTP_METHODS = frozenset(m.value for m in HTTPMethod)


def extract_operations(document: Document, resolver: Resolver) -> list[OperationItem]:
    """Build the operation list of *document*, paths first, then webhooks.

    Methods are listed in the order the path item declares them.

    Args:
        document: The loaded document.
        resolver: Resolver over the document's node store, used for path
            items that are references.

    Returns:
        Every operation of the document.

    Raises:
        MalformedDocumentError: If a path item is neither an object nor a
            reference.

    Example::

        document, store = load_document(raw)
        for op in extract_operations(document, Resolver(store)):
            print(op.label)
    """
    operations: list[OperationItem] = []
    for kind, entries in (
        (OperationKind.PATH, document.paths),
        (OperationKind.WEBHOOK, document.webhooks),
    ):
        for path, raw_item in entries.items():
            path_item = _resolve_path_item(str(path), raw_item, resolver)
            if path_item is None:
                continue
            operations.extend(_path_item_operations(str(path), kind, path_item, document.source))

    logger.debug("Extracted %d operations", len(operations))
    return operations


def _resolve_path_item(path: str, raw_item: Any, resolver: Resolver) -> dict[str, Any] | None:
    if not isinstance(raw_item, dict):
        raise MalformedDocumentError(
            f"Path item '{path}' must be an object or a reference "
            f"(got {type(raw_item).__name__})"
        )

    if "$ref" not in raw_item:
        return raw_item

    value = resolver.resolve(raw_item).value
    if isinstance(value, (BrokenMarker, CyclicMarker)):
        logger.warning("Skipping path item '%s': %s", path, value.label)
        return None
    if not isinstance(value, dict):
        raise MalformedDocumentError(
            f"Path item '{path}' resolves to {type(value).__name__}, expected an object"
        )
    return value


def _path_item_operations(
    path: str, kind: OperationKind, path_item: dict[str, Any], source: str
) -> list[OperationItem]:
    path_params = path_item.get("parameters")
    path_params = path_params if isinstance(path_params, list) else []
    path_servers = extract_servers(path_item.get("servers"), source)

    operations: list[OperationItem] = []
    for method_str, operation in path_item.items():
        if method_str not in _HTTP_METHODS or not isinstance(operation, dict):
            continue
        operations.append(
            OperationItem(
                path=path,
                method=HTTPMethod(method_str),
                kind=kind,
                operation=operation,
                path_parameters=path_params,
                servers=path_servers + extract_servers(operation.get("servers"), source),
            )
        )
    return operations


def collect_tags(document: Document, operations: list[OperationItem]) -> list[str]:
    """Return the tag names to list, declared tags first.

    Tags that operations use without declaring them in the top-level
    ``tags`` array are appended in order of first use.
    """
    tags = list(document.tags)
    seen = set(tags)
    for operation in operations:
        for tag in operation.tags:
            if tag not in seen:
                seen.add(tag)
                tags.append(tag)
    return tags
