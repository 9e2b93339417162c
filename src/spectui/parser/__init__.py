"""OpenAPI document parser -- load, store, resolve ``$ref`` pointers, extract operations.

This sub-package turns a raw OpenAPI 3.x document (JSON or YAML, local file
or remote URL) into the immutable pieces a session browses.

Typical usage::

    from spectui.parser import load_spec, validate_openapi_version, load_document

    raw = load_spec("https://petstore3.swagger.io/api/v3/openapi.json")
    version = validate_openapi_version(raw)
    document, store = load_document(raw, version, source=url)
    resolver = Resolver(store)
    operations = extract_operations(document, resolver)

Sub-modules:

* :mod:`~spectui.parser.loader` -- I/O layer (URL, file, stdin) plus format
  detection and OpenAPI version validation.
* :mod:`~spectui.parser.store` -- The read-only component store and the
  :class:`~spectui.models.Document` built from the raw tree.
* :mod:`~spectui.parser.resolver` -- Cycle-safe ``$ref`` resolution and
  parameter merging.
* :mod:`~spectui.parser.extractor` -- Walks ``paths`` and ``webhooks`` to
  produce :class:`~spectui.models.OperationItem` objects.
"""

from spectui.parser.extractor import collect_tags, extract_operations
from spectui.parser.loader import load_spec, validate_openapi_version
from spectui.parser.resolver import Resolver
from spectui.parser.store import NodeStore, load_document

__all__ = [
    "load_spec",
    "validate_openapi_version",
    "load_document",
    "NodeStore",
    "Resolver",
    "extract_operations",
    "collect_tags",
]
