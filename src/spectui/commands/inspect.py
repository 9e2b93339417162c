"""Inspect commands -- examine a document without the interactive browser.

Provides the ``spectui inspect`` sub-command group with read-only views of
an OpenAPI document: its operations, its schemas, and one schema fully
resolved.  They share the node store and resolver with the browser, so a
schema printed here looks exactly like the one browsed there, cyclic and
broken references included.
"""

from __future__ import annotations

import typer

from spectui.exceptions import SpectuiError
from spectui.models import ComponentGroup, Document
from spectui.output import error, get_output, info
from spectui.parser.resolver import Resolver


inspect_app = typer.Typer(no_args_is_help=True)


def _load(source: str) -> tuple[Document, Resolver]:
    """Load, validate and index the document at *source*.

    Raises:
        typer.Exit: With the error's exit code when the document cannot be
            loaded.
    """
    from spectui.parser import load_document, load_spec, validate_openapi_version

    try:
        raw = load_spec(source)
        version = validate_openapi_version(raw)
        document, store = load_document(raw, version, source=source)
    except SpectuiError as exc:
        error(f"Failed to load document: {exc}")
        raise typer.Exit(code=exc.exit_code) from None
    return document, Resolver(store)


@inspect_app.command("paths")
def inspect_paths(
    source: str = typer.Argument(help="Document path or URL ('-' for stdin)."),
) -> None:
    """List every operation, paths first, then webhooks.

    Example::

        spectui inspect paths petstore.yaml
    """
    from spectui.parser.extractor import extract_operations

    document, resolver = _load(source)
    try:
        operations = extract_operations(document, resolver)
    except SpectuiError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    rows: list[list[str]] = []
    for op in operations:
        rows.append([
            op.method.value.upper(),
            op.path,
            op.kind.value,
            op.summary or "-",
            "Yes" if op.deprecated else "",
        ])

    get_output().print_table(
        ["Method", "Path", "Kind", "Summary", "Deprecated"],
        rows,
        title=f"{document.info.title} -- Operations ({len(rows)})",
    )


@inspect_app.command("schemas")
def inspect_schemas(
    source: str = typer.Argument(help="Document path or URL ('-' for stdin)."),
) -> None:
    """List the schemas under ``components.schemas``.

    Example::

        spectui inspect schemas petstore.yaml
    """
    _, resolver = _load(source)
    schemas = resolver.store.group(ComponentGroup.SCHEMAS)

    if not schemas:
        info("No schemas defined in this document.")
        return

    rows: list[list[str]] = []
    for name, schema in schemas.items():
        if isinstance(schema, dict) and "$ref" in schema:
            schema_type = f"-> {schema['$ref']}"
        elif isinstance(schema, dict):
            schema_type = str(schema.get("type", "object"))
        else:
            schema_type = "unknown"
        props_dict = schema.get("properties", {}) if isinstance(schema, dict) else {}
        prop_names = list(props_dict.keys()) if isinstance(props_dict, dict) else []
        props = ", ".join(prop_names[:5])
        if len(prop_names) > 5:
            props += "..."
        rows.append([name, schema_type, props])

    get_output().print_table(["Schema", "Type", "Properties"], rows, title=f"Schemas ({len(rows)})")


@inspect_app.command("schema")
def inspect_schema(
    name: str = typer.Argument(help="Schema name under components.schemas."),
    source: str = typer.Argument(help="Document path or URL ('-' for stdin)."),
) -> None:
    """Print one schema with every ``$ref`` resolved.

    Re-entered references print as ``{"$cyclic": ref}`` and unresolvable
    ones as ``{"$broken": ref, "reason": ...}``.

    Example::

        spectui inspect schema Pet petstore.yaml
        spectui --json inspect schema Node tree.json
    """
    from spectui.models import Reference
    from spectui.parser.resolver import to_plain

    _, resolver = _load(source)
    ref = Reference(group=ComponentGroup.SCHEMAS, name=name).pointer
    try:
        value = resolver.resolve_reference(ref)
    except SpectuiError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    get_output().print_document(to_plain(value))
