"""Node store -- the immutable, name-addressable home of a loaded document.

:func:`load_document` splits a raw decoded OpenAPI document into two parts:

* a :class:`~spectui.models.Document` holding ``info``, servers, tags, and the
  raw ``paths`` and ``webhooks`` mappings, and
* a :class:`NodeStore` holding every component group (schemas, parameters,
  request bodies, responses, headers, examples, links, security schemes,
  path items) addressable by ``(group, name)``.

Both are populated once and never mutated afterwards, so any number of
readers may share them without locking.  Structural problems that leave
nothing navigable are reported here, at load time, as
:class:`~spectui.exceptions.MalformedDocumentError`.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Mapping

import httpx

from spectui.exceptions import MalformedDocumentError, NotFoundError
from spectui.models import APIInfo, ComponentGroup, Document, ServerInfo
from spectui.parser.loader import is_url

logger = logging.getLogger(__name__)


class NodeStore:
    """Read-only lookup of component nodes by group and name.

    Args:
        groups: Mapping from component group to ``name -> raw node``.
            Groups absent from the mapping are treated as empty.

    Example::

        store = NodeStore.from_document(raw)
        pet = store.lookup(ComponentGroup.SCHEMAS, "Pet")
    """

    def __init__(self, groups: Mapping[ComponentGroup, Mapping[str, Any]]) -> None:
        self._groups: Mapping[ComponentGroup, Mapping[str, Any]] = MappingProxyType(
            {group: MappingProxyType(dict(groups.get(group, {}))) for group in ComponentGroup}
        )

    @classmethod
    def from_document(cls, raw: Mapping[str, Any]) -> NodeStore:
        """Build a store from the ``components`` section of *raw*.

        Raises:
            MalformedDocumentError: If ``components`` is present but not a
                mapping.
        """
        components = raw.get("components") or {}
        if not isinstance(components, dict):
            raise MalformedDocumentError(
                f"'components' must be an object (got {type(components).__name__})"
            )

        groups: dict[ComponentGroup, dict[str, Any]] = {}
        for group in ComponentGroup:
            entries = components.get(group.value) or {}
            if not isinstance(entries, dict):
                logger.warning(
                    "Ignoring components.%s: expected an object, got %s",
                    group.value,
                    type(entries).__name__,
                )
                continue
            groups[group] = {str(name): node for name, node in entries.items()}
        return cls(groups)

    def lookup(self, group: ComponentGroup, name: str) -> Any:
        """Return the raw node registered as *name* in *group*.

        Raises:
            NotFoundError: If no such component exists.
        """
        try:
            return self._groups[group][name]
        except KeyError:
            raise NotFoundError(
                f"Component '{name}' not found in components.{group.value}"
            ) from None

    def names(self, group: ComponentGroup) -> list[str]:
        """Return the component names of *group* in declaration order."""
        return list(self._groups[group].keys())

    def groups(self) -> list[ComponentGroup]:
        """Return the groups holding at least one component."""
        return [group for group, entries in self._groups.items() if entries]

    def group(self, group: ComponentGroup) -> Mapping[str, Any]:
        """Return a read-only view of one component group."""
        return self._groups[group]

    def __contains__(self, key: tuple[ComponentGroup, str]) -> bool:
        group, name = key
        return name in self._groups[group]


def load_document(
    raw: Any, openapi_version: str = "", source: str = ""
) -> tuple[Document, NodeStore]:
    """Split a raw decoded document into a :class:`Document` and a :class:`NodeStore`.

    When the document was fetched from a URL and declares no ``servers``, the
    URL's origin becomes the default server.  Relative server URLs are
    resolved against a URL *source*.

    Args:
        raw: The decoded document as returned by
            :func:`~spectui.parser.loader.load_spec`.
        openapi_version: The validated version string.
        source: Where the document came from (path or URL).

    Returns:
        ``(document, store)``.

    Raises:
        MalformedDocumentError: If the root, ``paths``, ``webhooks`` or
            ``components`` have the wrong shape.
    """
    if not isinstance(raw, dict):
        raise MalformedDocumentError(
            f"Document root must be an object (got {type(raw).__name__})"
        )

    paths = _require_mapping(raw, "paths")
    webhooks = _require_mapping(raw, "webhooks")
    store = NodeStore.from_document(raw)

    info = raw.get("info") if isinstance(raw.get("info"), dict) else {}
    security = raw.get("security") if isinstance(raw.get("security"), list) else []

    document = Document(
        info=APIInfo(
            title=str(info.get("title", "Untitled API")),
            version=str(info.get("version", "0.0.0")),
            description=info.get("description"),
        ),
        openapi_version=openapi_version or str(raw.get("openapi", "")),
        servers=_extract_servers(raw.get("servers"), source),
        tags=_declared_tags(raw.get("tags")),
        paths=paths,
        webhooks=webhooks,
        security=security,
        source=source,
    )
    logger.debug(
        "Loaded document '%s' (%d paths, %d webhooks)",
        document.info.title,
        len(paths),
        len(webhooks),
    )
    return document, store


def extract_servers(servers: Any, source: str = "") -> list[ServerInfo]:
    """Convert a raw ``servers`` array into :class:`ServerInfo` models.

    Entries that are not objects are skipped, as are ``variables`` that are
    not objects.  Server variables contribute their ``default`` values.
    """
    result: list[ServerInfo] = []
    if not isinstance(servers, list):
        return result

    for server in servers:
        if not isinstance(server, dict):
            continue
        url = str(server.get("url", "/"))
        if is_url(source) and not is_url(url) and "{" not in url:
            url = str(httpx.URL(source).join(url))
        variables: dict[str, str] = {}
        raw_variables = server.get("variables")
        if not isinstance(raw_variables, dict):
            raw_variables = {}
        for name, variable in raw_variables.items():
            if isinstance(variable, dict) and "default" in variable:
                variables[str(name)] = str(variable["default"])
        result.append(
            ServerInfo(url=url, description=server.get("description"), variables=variables)
        )
    return result


def _extract_servers(servers: Any, source: str) -> list[ServerInfo]:
    result = extract_servers(servers, source)
    if not result and is_url(source):
        origin = httpx.URL(source).join("/")
        result.append(ServerInfo(url=str(origin), description="document origin"))
    return result


def _declared_tags(tags: Any) -> list[str]:
    if not isinstance(tags, list):
        return []
    names: list[str] = []
    for tag in tags:
        if isinstance(tag, dict) and "name" in tag:
            names.append(str(tag["name"]))
    return names


def _require_mapping(raw: dict[str, Any], key: str) -> dict[str, Any]:
    value = raw.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise MalformedDocumentError(
            f"'{key}' must be an object (got {type(value).__name__})"
        )
    return value
