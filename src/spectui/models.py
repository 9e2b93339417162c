"""Canonical Pydantic models shared across all spectui modules.

This is the single source of truth for data shapes in the project. Every other
module imports from here rather than defining its own models. The models fall
into four groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`OutputConfig`, :class:`UIConfig` and
    :class:`GlobalConfig`.

**Document models** -- produced by the parser from a raw OpenAPI document:
    :class:`HTTPMethod`, :class:`ParameterLocation`, :class:`ComponentGroup`,
    :class:`Reference`, :class:`Inline`, :class:`CyclicMarker`,
    :class:`BrokenMarker`, :class:`ResolvedNode`, :class:`APIParameter`,
    :class:`RequestBodyInfo`, :class:`APIInfo`, :class:`ServerInfo`,
    :class:`Document` and :class:`OperationItem`.

**Call models** -- the request draft and everything that flows through the
executor and the history:
    :class:`RequestDraft`, :class:`OutboundRequest`, :class:`CallOutcome`
    and :class:`HistoryEntry`.

**Session models** -- panes, input events and the read-only snapshots handed
to the renderer:
    :class:`PaneKind`, :class:`InputMode`, :class:`EventKind`,
    :class:`InputEvent`, :class:`PaneItem`, :class:`PaneSnapshot` and
    :class:`SessionSnapshot`.

All models use Pydantic v2. Values that must never change after creation
(references, outbound requests, outcomes, history entries, snapshots) are
declared with ``frozen=True``.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from spectui.exceptions import BrokenReferenceError


# --- Config ---


class RequestConfig(BaseModel):
    """Default HTTP settings applied to every call made from a session."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    follow_redirects: bool = Field(default=True, description="Follow HTTP redirects")


class OutputConfig(BaseModel):
    """Default output format preferences for non-interactive commands."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class UIConfig(BaseModel):
    """Interactive session preferences."""

    viewport_height: int = Field(
        default=12, ge=1, description="Rows shown per pane before scrolling"
    )
    fullscreen: bool = Field(
        default=False, description="Start with the active pane fullscreen"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/spectui/config.json``.

    Loaded and saved by :func:`~spectui.config.load_global_config` and
    :func:`~spectui.config.save_global_config`. Fields here have the
    lowest precedence and can be overridden by project config, environment
    variables, or CLI flags. See :func:`~spectui.config.resolve_config`
    for the full precedence chain.
    """

    base_url: Optional[str] = Field(
        default=None, description="Override the servers declared by the document"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    ui: UIConfig = Field(default_factory=UIConfig)


# --- Document Models ---


class HTTPMethod(str, enum.Enum):
    """HTTP methods recognised by OpenAPI 3.x path-item objects."""

    GET = "get"
    PUT = "put"
    POST = "post"
    DELETE = "delete"
    OPTIONS = "options"
    HEAD = "head"
    PATCH = "patch"
    TRACE = "trace"


class ParameterLocation(str, enum.Enum):
    """Locations where an API parameter can appear, per OpenAPI ``in`` field."""

    QUERY = "query"
    HEADER = "header"
    PATH = "path"
    COOKIE = "cookie"


class ComponentGroup(str, enum.Enum):
    """Named groups under ``#/components`` that a ``$ref`` may point into."""

    SCHEMAS = "schemas"
    PARAMETERS = "parameters"
    REQUEST_BODIES = "requestBodies"
    RESPONSES = "responses"
    HEADERS = "headers"
    EXAMPLES = "examples"
    LINKS = "links"
    SECURITY_SCHEMES = "securitySchemes"
    PATH_ITEMS = "pathItems"
    CALLBACKS = "callbacks"


_REF_PREFIX = "#/components/"


class Reference(BaseModel):
    """A typed ``(group, name)`` pointer parsed from a ``$ref`` string.

    Only the fixed shape ``#/components/<group>/<name>`` is accepted.
    The name is unescaped per RFC 6901 (``~1`` for ``/``, ``~0`` for ``~``).

    Example::

        ref = Reference.parse("#/components/schemas/Pet")
        ref.group   # ComponentGroup.SCHEMAS
        ref.pointer # "#/components/schemas/Pet"
    """

    model_config = ConfigDict(frozen=True)

    group: ComponentGroup
    name: str

    @classmethod
    def parse(cls, ref: Any) -> Reference:
        """Parse a ``$ref`` string.

        Raises:
            BrokenReferenceError: If *ref* is not a string of the accepted
                shape or names an unknown component group.
        """
        if not isinstance(ref, str):
            raise BrokenReferenceError(str(ref), "$ref must be a string")
        if not ref.startswith(_REF_PREFIX):
            raise BrokenReferenceError(
                ref, "only #/components/<group>/<name> references are supported"
            )
        segments = ref[len(_REF_PREFIX):].split("/")
        if len(segments) != 2 or not segments[1]:
            raise BrokenReferenceError(ref, "expected #/components/<group>/<name>")
        try:
            group = ComponentGroup(segments[0])
        except ValueError:
            raise BrokenReferenceError(
                ref, f"unknown component group '{segments[0]}'"
            ) from None
        name = segments[1].replace("~1", "/").replace("~0", "~")
        return cls(group=group, name=name)

    @property
    def pointer(self) -> str:
        """The canonical ``$ref`` string for this reference."""
        escaped = self.name.replace("~", "~0").replace("/", "~1")
        return f"{_REF_PREFIX}{self.group.value}/{escaped}"


class Inline(BaseModel):
    """An ``X-or-Reference`` slot that holds its value inline."""

    model_config = ConfigDict(frozen=True)

    node: Any = None


class CyclicMarker(BaseModel):
    """Terminal leaf standing in for a reference already on the descent path."""

    model_config = ConfigDict(frozen=True)

    reference: Reference

    @property
    def label(self) -> str:
        return f"<cyclic $ref {self.reference.pointer}>"


class BrokenMarker(BaseModel):
    """Terminal leaf standing in for a reference that could not be followed."""

    model_config = ConfigDict(frozen=True)

    ref: str
    reason: str

    @property
    def label(self) -> str:
        return f"<broken $ref {self.ref}: {self.reason}>"


class ResolvedNode(BaseModel):
    """A fully expanded node plus the visitation chain it was resolved under.

    ``value`` contains no ``$ref`` mappings: every reference has been replaced
    by its target, a :class:`CyclicMarker`, or a :class:`BrokenMarker`.
    """

    model_config = ConfigDict(frozen=True)

    value: Any = None
    chain: tuple[Reference, ...] = ()


class APIParameter(BaseModel):
    """A single resolved parameter of an operation.

    Each parameter becomes one editable field of the request builder.
    Path parameters are always required.
    """

    name: str
    location: ParameterLocation
    required: bool = False
    description: Optional[str] = None
    schema_type: str = Field(default="string", description="JSON Schema type")
    schema_format: Optional[str] = None
    default: Any = None
    enum_values: Optional[list[Any]] = None
    example: Any = None


class RequestBodyInfo(BaseModel):
    """Resolved request body metadata for an operation."""

    required: bool = False
    description: Optional[str] = None
    content_types: list[str] = Field(default_factory=list)


class APIInfo(BaseModel):
    """API metadata extracted from the document's *Info Object*."""

    title: str
    version: str
    description: Optional[str] = None


class ServerInfo(BaseModel):
    """A server entry from a ``servers`` array.

    ``variables`` maps each server variable to its default value so that
    templated URLs such as ``https://{region}.example.com`` can be expanded.
    """

    url: str
    description: Optional[str] = None
    variables: dict[str, str] = Field(default_factory=dict)

    def expanded_url(self) -> str:
        """Return ``url`` with every ``{variable}`` replaced by its default."""
        url = self.url
        for name, value in self.variables.items():
            url = url.replace("{" + name + "}", value)
        return url


class OperationKind(str, enum.Enum):
    """Whether an operation comes from ``paths`` or ``webhooks``."""

    PATH = "path"
    WEBHOOK = "webhook"


class Document(BaseModel):
    """Root entity of a loaded OpenAPI document.

    Immutable for the lifetime of a session. Component groups live in the
    companion :class:`~spectui.parser.store.NodeStore`.
    """

    model_config = ConfigDict(frozen=True)

    info: APIInfo
    openapi_version: str
    servers: list[ServerInfo] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    paths: dict[str, Any] = Field(default_factory=dict)
    webhooks: dict[str, Any] = Field(default_factory=dict)
    security: list[dict[str, Any]] = Field(default_factory=list)
    source: str = ""


class OperationItem(BaseModel):
    """One (path or webhook, HTTP method) pair of the document.

    ``operation`` is the raw *Operation Object*; ``path_parameters`` are the
    raw parameters declared on the enclosing path item, merged with the
    operation's own parameters on demand.
    """

    model_config = ConfigDict(frozen=True)

    path: str
    method: HTTPMethod
    kind: OperationKind = OperationKind.PATH
    operation: dict[str, Any] = Field(default_factory=dict)
    path_parameters: list[Any] = Field(default_factory=list)
    servers: list[ServerInfo] = Field(default_factory=list)

    @property
    def key(self) -> str:
        """Stable identity used to decide whether a draft must be reset."""
        return f"{self.kind.value}:{self.method.value}:{self.path}"

    @property
    def operation_id(self) -> Optional[str]:
        return self.operation.get("operationId")

    @property
    def summary(self) -> Optional[str]:
        return self.operation.get("summary")

    @property
    def tags(self) -> list[str]:
        tags = self.operation.get("tags") or []
        return [str(tag) for tag in tags] if isinstance(tags, list) else []

    @property
    def deprecated(self) -> bool:
        return bool(self.operation.get("deprecated", False))

    @property
    def label(self) -> str:
        """List label, e.g. ``GET     /pets/{id}`` or ``POST    [webhook] newPet``."""
        prefix = "[webhook] " if self.kind == OperationKind.WEBHOOK else ""
        return f"{self.method.value.upper():7} {prefix}{self.path}"

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags


# --- Call Models ---


class RequestDraft(BaseModel):
    """Mutable, user-edited values for the operation selected for calling.

    Values are keyed by ``(location, name)``. The draft is created once and
    then :meth:`reset` whenever a different operation is selected.
    """

    operation_key: Optional[str] = None
    values: dict[tuple[ParameterLocation, str], str] = Field(default_factory=dict)
    body: str = ""
    content_types: list[str] = Field(default_factory=list)
    content_type_index: int = 0

    def get(self, location: ParameterLocation, name: str) -> str:
        return self.values.get((location, name), "")

    def set(self, location: ParameterLocation, name: str, value: str) -> None:
        self.values[(location, name)] = value

    @property
    def content_type(self) -> Optional[str]:
        """The media type chosen for the body, if the operation declares one."""
        if not self.content_types:
            return None
        return self.content_types[self.content_type_index % len(self.content_types)]

    def cycle_content_type(self, delta: int) -> None:
        """Move the chosen media type by *delta*, clamped to the declared list."""
        if not self.content_types:
            return
        index = self.content_type_index + delta
        self.content_type_index = max(0, min(index, len(self.content_types) - 1))

    def reset(
        self,
        operation_key: str,
        defaults: Optional[dict[tuple[ParameterLocation, str], str]] = None,
        content_types: Optional[list[str]] = None,
    ) -> None:
        """Clear every value and bind the draft to *operation_key*."""
        self.operation_key = operation_key
        self.values = dict(defaults or {})
        self.body = ""
        self.content_types = list(content_types or [])
        self.content_type_index = 0


class OutboundRequest(BaseModel):
    """The exact request handed to the executor."""

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    path: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: Optional[str] = None
    content_type: Optional[str] = None


class CallOutcome(BaseModel):
    """Normalised result of executing an :class:`OutboundRequest`.

    Either the response fields are populated, or ``failure`` describes why
    the call did not complete (connection error, timeout, malformed
    response).
    """

    model_config = ConfigDict(frozen=True)

    status_code: Optional[int] = None
    reason: Optional[str] = None
    headers: dict[str, str] = Field(default_factory=dict)
    body: bytes = b""
    elapsed: float = 0.0
    failure: Optional[str] = None

    @property
    def ok(self) -> bool:
        """``True`` when a response was received (whatever its status)."""
        return self.failure is None


class HistoryEntry(BaseModel):
    """An immutable record of one executed call and its outcome."""

    model_config = ConfigDict(frozen=True)

    sequence: int
    label: str = ""
    request: OutboundRequest
    outcome: CallOutcome
    created_at: datetime = Field(default_factory=datetime.now)

    @property
    def summary(self) -> str:
        """One-line summary, e.g. ``#3 GET https://api/pets -> 200``."""
        if self.outcome.ok:
            result = str(self.outcome.status_code)
        else:
            result = f"failed ({self.outcome.failure})"
        return f"#{self.sequence} {self.request.method} {self.request.url} -> {result}"


# --- Session Models ---


class PaneKind(str, enum.Enum):
    """The panes of a session, in display and digit-key order."""

    TAG_LIST = "Tags"
    PATH_LIST = "Paths"
    DEFINITION = "Definition"
    REQUEST_BUILDER = "Request"
    RESPONSE_VIEWER = "Response"
    ADDRESS_BAR = "Address"
    HISTORY = "History"


class InputMode(str, enum.Enum):
    """Where character input is routed."""

    NORMAL = "normal"
    FILTER = "filter"
    INSERT = "insert"


class EventKind(str, enum.Enum):
    """Abstract input events accepted by :meth:`~spectui.navigation.session.Session.handle`."""

    NEXT_PANE = "next_pane"
    PREV_PANE = "prev_pane"
    SELECT_PANE = "select_pane"
    DOWN = "down"
    UP = "up"
    GO = "go"
    BACK = "back"
    TOGGLE_FULLSCREEN = "toggle_fullscreen"
    TOGGLE_FILTER = "toggle_filter"
    ESCAPE = "escape"
    CHAR = "char"
    BACKSPACE = "backspace"
    SUBMIT = "submit"
    SEND = "send"
    NEXT_CONTENT_TYPE = "next_content_type"
    PREV_CONTENT_TYPE = "prev_content_type"
    QUIT = "quit"
    CALL_COMPLETED = "call_completed"


class InputEvent(BaseModel):
    """One abstract input event.

    ``text`` carries the character of ``CHAR`` events, ``index`` the 0-based
    pane of ``SELECT_PANE`` events, and ``request``/``outcome`` the payload of
    ``CALL_COMPLETED`` events.
    """

    model_config = ConfigDict(frozen=True)

    kind: EventKind
    text: Optional[str] = None
    index: Optional[int] = None
    request: Optional[OutboundRequest] = None
    outcome: Optional[CallOutcome] = None


class PaneItem(BaseModel):
    """One row of a pane.

    An item is a container (it can be entered with "go in") when it has a
    non-empty ``children`` list.
    """

    label: str
    value: Any = None
    children: Optional[list[PaneItem]] = None

    @property
    def is_container(self) -> bool:
        return bool(self.children)


class PaneSnapshot(BaseModel):
    """Read-only view of one pane for the renderer."""

    model_config = ConfigDict(frozen=True)

    kind: PaneKind
    number: int
    title: str
    lines: list[str] = Field(default_factory=list)
    containers: list[bool] = Field(default_factory=list)
    cursor: int = 0
    scroll: int = 0
    viewport_height: int = 12
    total: int = 0
    breadcrumb: list[str] = Field(default_factory=list)
    active: bool = False


class SessionSnapshot(BaseModel):
    """Read-only view of the whole session for the renderer."""

    model_config = ConfigDict(frozen=True)

    title: str
    panes: list[PaneSnapshot] = Field(default_factory=list)
    active_index: int = 0
    fullscreen: bool = False
    filter: Optional[str] = None
    mode: InputMode = InputMode.NORMAL
    status: str = ""
    in_flight: bool = False
