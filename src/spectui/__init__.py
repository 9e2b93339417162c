"""spectui -- Browse OpenAPI 3.0/3.1 documents and call their APIs from the terminal.

This package loads an OpenAPI document from a local file or a URL, turns its
graph of ``$ref`` pointers into a cycle-safe navigable tree, and drives an
interactive multi-pane session in which the operator browses tags, paths,
operations, schemas and webhooks, fills in request parameters and sends live
HTTP calls whose results are kept in an in-memory history.

Typical workflow::

    spectui browse https://petstore3.swagger.io/api/v3/openapi.json
    spectui inspect schema Pet openapi.yaml

Modules:
    app: Typer application factory and CLI entry point.
    models: Pydantic models shared across the entire package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    history: Append-only call history.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
