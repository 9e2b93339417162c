"""Resolve ``$ref`` pointers into a navigable, cycle-safe tree.

OpenAPI documents use ``$ref`` pointers (e.g.
``{"$ref": "#/components/schemas/Pet"}``) to reuse components, and those
pointers may form cycles (a tree node schema whose ``children`` are more tree
nodes).  :class:`Resolver` expands a raw node by replacing every ``$ref``
with its target's resolved content, looked up in the
:class:`~spectui.parser.store.NodeStore`.

Cycle detection uses a **per-path** visitation chain: the tuple of
references already being expanded on the current descent path.  Each branch
extends its own copy of the chain, so sibling branches are resolved
independently and a schema used twice in unrelated places is expanded both
times.  Re-entering a reference already on the chain yields a single
:class:`~spectui.models.CyclicMarker` leaf instead of recursing.

Resolution never raises for bad references: an absent target or a
malformed ``$ref`` yields a :class:`~spectui.models.BrokenMarker` leaf at the
offending position so browsing can continue elsewhere.  Callers that want an
exception instead use :meth:`Resolver.resolve_reference`.

Parameter lists get their own helper, :meth:`Resolver.merge_parameters`,
because the ``(name, in)`` key of a referenced parameter is only known after
resolution.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Union

from spectui.exceptions import BrokenReferenceError, NotFoundError
from spectui.models import (
    APIParameter,
    BrokenMarker,
    CyclicMarker,
    Inline,
    ParameterLocation,
    Reference,
    RequestBodyInfo,
    ResolvedNode,
)
from spectui.parser.store import NodeStore

logger = logging.getLogger(__name__)

RefOr = Union[Inline, Reference]


def classify(node: Any) -> RefOr:
    """Tag a raw ``X-or-Reference`` slot as :class:`Inline` or :class:`Reference`.

    Raises:
        BrokenReferenceError: If *node* is a ``$ref`` mapping whose pointer
            is malformed.
    """
    if isinstance(node, dict) and "$ref" in node:
        return Reference.parse(node["$ref"])
    return Inline(node=node)


def is_marker(value: Any) -> bool:
    """Return ``True`` for cyclic and broken reference leaves."""
    return isinstance(value, (CyclicMarker, BrokenMarker))


class Resolver:
    """Expands raw nodes against a :class:`~spectui.parser.store.NodeStore`.

    Args:
        store: The immutable component store of the loaded document.

    Example::

        resolver = Resolver(store)
        node = resolver.resolve({"$ref": "#/components/schemas/Node"})
        node.value["properties"]["children"]["items"]
        # CyclicMarker(reference=Reference(group=schemas, name='Node'))
    """

    def __init__(self, store: NodeStore) -> None:
        self._store = store

    @property
    def store(self) -> NodeStore:
        return self._store

    def resolve(self, node: Any, visiting: Iterable[Reference] = ()) -> ResolvedNode:
        """Fully expand *node* under the visitation chain *visiting*.

        Args:
            node: A raw node: a ``$ref`` mapping, any other mapping, a
                sequence, or a scalar.
            visiting: References already being expanded on the caller's
                descent path.

        Returns:
            A :class:`~spectui.models.ResolvedNode` whose ``value`` contains
            no ``$ref`` mappings and whose ``chain`` is *visiting* extended by
            the reference *node* itself expanded, if any.
        """
        chain = tuple(visiting)
        value = self._expand(node, chain)
        if isinstance(node, dict) and "$ref" in node and not is_marker(value):
            chain = chain + (Reference.parse(node["$ref"]),)
        return ResolvedNode(value=value, chain=chain)

    def resolve_reference(self, ref: str) -> Any:
        """Resolve a ``$ref`` string, raising instead of producing a broken leaf.

        Cycles inside the target are still rendered as markers.

        Raises:
            BrokenReferenceError: If *ref* is malformed or its target absent.
        """
        reference = Reference.parse(ref)
        try:
            target = self._store.lookup(reference.group, reference.name)
        except NotFoundError:
            raise BrokenReferenceError(ref, "target not found") from None
        return self._expand(target, (reference,))

    def merge_parameters(
        self, path_item_params: Any, operation_params: Any
    ) -> list[Any]:
        """Merge path-item and operation parameters keyed by ``(name, in)``.

        Every entry is resolved before keying.  When both lists define the
        same key the operation's definition wins, but keeps the position at
        which the key was first seen.  Entries that resolve to a marker (or
        to anything but a mapping) cannot be keyed and are kept as-is so
        they render inline.

        Args:
            path_item_params: The path item's raw ``parameters`` list.
            operation_params: The operation's raw ``parameters`` list.

        Returns:
            The merged, resolved parameter list.
        """
        merged: dict[Any, Any] = {}
        entries = _as_list(path_item_params) + _as_list(operation_params)
        for position, raw in enumerate(entries):
            value = self.resolve(raw).value
            if isinstance(value, dict):
                key: Any = (str(value.get("name", "")), str(value.get("in", "")))
            else:
                key = ("$unkeyed", position)
            if key in merged:
                logger.debug("Operation parameter %s overrides path item parameter", key)
            merged[key] = value
        return list(merged.values())

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _expand(self, node: Any, visiting: tuple[Reference, ...]) -> Any:
        if isinstance(node, dict):
            if "$ref" in node:
                return self._follow(node, visiting)
            return {key: self._expand(value, visiting) for key, value in node.items()}
        if isinstance(node, list):
            return [self._expand(item, visiting) for item in node]
        return node

    def _follow(self, node: dict[str, Any], visiting: tuple[Reference, ...]) -> Any:
        raw_ref = node["$ref"]
        try:
            reference = Reference.parse(raw_ref)
        except BrokenReferenceError as exc:
            logger.debug("Malformed $ref %r: %s", raw_ref, exc.reason)
            return BrokenMarker(ref=str(raw_ref), reason=exc.reason)

        if reference in visiting:
            return CyclicMarker(reference=reference)

        try:
            target = self._store.lookup(reference.group, reference.name)
        except NotFoundError:
            logger.debug("Broken $ref %s", reference.pointer)
            return BrokenMarker(ref=str(raw_ref), reason="target not found")

        value = self._expand(target, visiting + (reference,))

        # OpenAPI 3.1 allows summary/description next to $ref; they override
        # the target's own values.
        siblings = {key: val for key, val in node.items() if key != "$ref"}
        if siblings and isinstance(value, dict):
            value = {**value, **self._expand(siblings, visiting)}
        return value


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, list) else []


def to_api_parameters(merged: list[Any]) -> list[APIParameter]:
    """Convert merged, resolved parameter nodes into :class:`APIParameter` models.

    Handles OpenAPI 3.1 type arrays and enforces that path parameters are
    always required.  Markers, non-mappings and unrecognised ``in``
    locations are skipped.
    """
    parameters: list[APIParameter] = []

    for param in merged:
        if not isinstance(param, dict):
            continue
        try:
            location = ParameterLocation(param.get("in", "query"))
        except ValueError:
            continue

        schema = param.get("schema")
        schema_dict = schema if isinstance(schema, dict) else {}
        required = bool(param.get("required", False))
        if location == ParameterLocation.PATH:
            required = True

        parameters.append(
            APIParameter(
                name=str(param.get("name", "")),
                location=location,
                required=required,
                description=param.get("description"),
                schema_type=_extract_schema_type(schema),
                schema_format=schema_dict.get("format"),
                default=schema_dict.get("default"),
                enum_values=schema_dict.get("enum"),
                example=param.get("example", schema_dict.get("example")),
            )
        )

    return parameters


def _extract_schema_type(schema: Any) -> str:
    """Extract the type string from a schema object.

    OpenAPI 3.1 type arrays (e.g. ``["string", "null"]``) yield the first
    non-null type.  Falls back to ``"string"``.
    """
    if not isinstance(schema, dict):
        return "string"

    type_value = schema.get("type", "string")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        return str(non_null[0]) if non_null else "string"
    return str(type_value)


def extract_request_body(body: Any) -> RequestBodyInfo | None:
    """Build :class:`RequestBodyInfo` from a resolved ``requestBody`` node.

    Returns ``None`` when the operation declares no body, or when the body
    resolved to a marker.
    """
    if not isinstance(body, dict):
        return None

    content = body.get("content")
    content_types = list(content.keys()) if isinstance(content, dict) else []
    return RequestBodyInfo(
        required=bool(body.get("required", False)),
        description=body.get("description"),
        content_types=[str(ct) for ct in content_types],
    )


def to_plain(value: Any) -> Any:
    """Replace markers with plain mappings so *value* can be dumped as JSON/YAML."""
    if isinstance(value, CyclicMarker):
        return {"$cyclic": value.reference.pointer}
    if isinstance(value, BrokenMarker):
        return {"$broken": value.ref, "reason": value.reason}
    if isinstance(value, dict):
        return {key: to_plain(val) for key, val in value.items()}
    if isinstance(value, list):
        return [to_plain(item) for item in value]
    return value
