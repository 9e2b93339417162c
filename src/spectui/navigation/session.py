"""The interactive session: one explicit state object driven by input events.

A :class:`Session` owns everything the browser mutates while it runs: the
seven panes, the active-pane cursor, the fullscreen flag, the filter buffer,
the input mode, the request draft and the call history.  The event loop
feeds it :class:`~spectui.models.InputEvent` values through
:meth:`Session.handle` and draws :meth:`Session.snapshot`.

No event is ever rejected.  An event that makes no sense in the current
context (going back at the root, sending with nothing selected) is a no-op,
at most leaving a status message.

Sending is synchronous.  The executor's outcome is queued as a
``CALL_COMPLETED`` event and processed by the same :meth:`Session.handle`
call, which records it in the history and shows it in the response viewer.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Optional

from spectui.client.builder import build_request, preferred_accept
from spectui.client.response import extract_response_data, status_line
from spectui.exceptions import ValidationError
from spectui.history import CallHistory
from spectui.models import (
    APIParameter,
    Document,
    EventKind,
    GlobalConfig,
    HistoryEntry,
    InputEvent,
    InputMode,
    OperationItem,
    OperationKind,
    OutboundRequest,
    PaneItem,
    PaneKind,
    RequestDraft,
    RequestBodyInfo,
    SessionSnapshot,
)
from spectui.navigation.pane import Pane
from spectui.navigation.tree import tree_item, tree_items
from spectui.parser.extractor import collect_tags, extract_operations
from spectui.parser.resolver import Resolver, extract_request_body, to_api_parameters
from spectui.parser.store import NodeStore

logger = logging.getLogger(__name__)

ALL_TAGS = "[ALL]"
FALLBACK_BASE_URL = "http://localhost"

_PANE_ORDER = list(PaneKind)
_BODY_FIELD = "body"


class Session:
    """State machine behind the terminal browser.

    Args:
        document: The loaded document.
        store: Its component store.
        executor: Object with an ``execute(request, timeout)`` method,
            normally an entered :class:`~spectui.client.executor.Executor`.
        config: Resolved configuration (base URL override, timeout,
            viewport height, initial fullscreen flag).
        history: Call history to append to; a fresh one by default.
        on_send: Called with the outbound request right before it is
            executed, e.g. to redraw an "in flight" frame.

    Example::

        session = Session(document, store, executor)
        session.handle(InputEvent(kind=EventKind.DOWN))
        frame = session.snapshot()
    """

    def __init__(
        self,
        document: Document,
        store: NodeStore,
        executor: Any,
        config: Optional[GlobalConfig] = None,
        history: Optional[CallHistory] = None,
        on_send: Optional[Callable[[OutboundRequest], None]] = None,
    ) -> None:
        self.document = document
        self.store = store
        self.resolver = Resolver(store)
        self.executor = executor
        self.config = config or GlobalConfig()
        self.history = history if history is not None else CallHistory()
        self.on_send = on_send

        self.operations = extract_operations(document, self.resolver)
        self.tags = collect_tags(document, self.operations)

        height = self.config.ui.viewport_height
        self.panes: list[Pane] = [Pane(kind, height) for kind in _PANE_ORDER]
        self.active_index = 0
        self.fullscreen = self.config.ui.fullscreen
        self.filter: Optional[str] = None
        self.mode = InputMode.NORMAL
        self.status = ""
        self.in_flight = False
        self.should_quit = False

        self.draft_operation: Optional[OperationItem] = None
        self.draft_parameters: list[APIParameter] = []
        self.draft_body: Optional[RequestBodyInfo] = None
        self.draft_accept: Optional[str] = None
        self.draft = RequestDraft()
        self.invalid_fields: list[str] = []
        self.viewed_entry: Optional[int] = None

        self._insert_target: Any = None
        self._selected_base: Optional[str] = None
        self._shown_operation: Optional[str] = None
        self._definitions: dict[str, list[PaneItem]] = {}
        self._queue: deque[InputEvent] = deque()

        self.pane(PaneKind.TAG_LIST).set_items(
            [PaneItem(label=ALL_TAGS)] + [PaneItem(label=tag, value=tag) for tag in self.tags]
        )
        self._refresh_paths()
        self._refresh_request()
        self._refresh_history()
        self.status = f"Loaded {len(self.operations)} operations"

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def pane(self, kind: PaneKind) -> Pane:
        return self.panes[_PANE_ORDER.index(kind)]

    @property
    def active_pane(self) -> Pane:
        return self.panes[self.active_index]

    @property
    def active_tag(self) -> Optional[str]:
        item = self.pane(PaneKind.TAG_LIST).selected
        return item.value if item is not None else None

    @property
    def current_operation(self) -> Optional[OperationItem]:
        """The operation highlighted in the path list."""
        item = self.pane(PaneKind.PATH_LIST).selected
        if item is not None and isinstance(item.value, OperationItem):
            return item.value
        return None

    @property
    def base_url(self) -> str:
        """The base URL chosen in the address bar."""
        item = self.pane(PaneKind.ADDRESS_BAR).selected
        if item is not None and isinstance(item.value, str):
            return item.value
        return self._selected_base or FALLBACK_BASE_URL

    def base_url_candidates(self, operation: Optional[OperationItem] = None) -> list[str]:
        """Candidate base URLs, most specific override first, without duplicates."""
        candidates: list[str] = []
        if self.config.base_url:
            candidates.append(self.config.base_url)
        candidates.extend(server.expanded_url() for server in self.document.servers)
        if operation is not None:
            candidates.extend(server.expanded_url() for server in operation.servers)
        candidates.append(FALLBACK_BASE_URL)

        unique: list[str] = []
        for url in candidates:
            url = url.rstrip("/") or url
            if url not in unique:
                unique.append(url)
        return unique

    def snapshot(self) -> SessionSnapshot:
        """Read-only view of the whole session for the renderer."""
        return SessionSnapshot(
            title=f"{self.document.info.title} {self.document.info.version}",
            panes=[
                pane.snapshot(
                    number=index + 1,
                    title=self._pane_title(pane.kind),
                    active=index == self.active_index,
                )
                for index, pane in enumerate(self.panes)
            ],
            active_index=self.active_index,
            fullscreen=self.fullscreen,
            filter=self.filter,
            mode=self.mode,
            status=self.status,
            in_flight=self.in_flight,
        )

    def set_viewport(self, height: int) -> None:
        for pane in self.panes:
            pane.set_viewport(height)

    # ------------------------------------------------------------------ #
    # Event handling
    # ------------------------------------------------------------------ #

    def handle(self, event: InputEvent) -> None:
        """Process *event* and every event it produces."""
        self._queue.append(event)
        while self._queue:
            current = self._queue.popleft()
            logger.debug("Event %s in %s mode", current.kind.value, self.mode.value)
            if current.kind == EventKind.CALL_COMPLETED:
                self._call_completed(current)
            elif current.kind == EventKind.QUIT:
                self.should_quit = True
            elif self.mode == InputMode.FILTER:
                self._handle_filter(current)
            elif self.mode == InputMode.INSERT:
                self._handle_insert(current)
            else:
                self._handle_normal(current)

    def _handle_normal(self, event: InputEvent) -> None:
        kind = event.kind
        if kind == EventKind.NEXT_PANE:
            self._activate(self.active_index + 1)
        elif kind == EventKind.PREV_PANE:
            self._activate(self.active_index - 1)
        elif kind == EventKind.SELECT_PANE:
            if event.index is not None and 0 <= event.index < len(self.panes):
                self._activate(event.index)
        elif kind == EventKind.DOWN:
            self._move(1)
        elif kind == EventKind.UP:
            self._move(-1)
        elif kind == EventKind.GO:
            self.active_pane.go_in()
        elif kind == EventKind.BACK:
            self.active_pane.go_back()
        elif kind == EventKind.TOGGLE_FULLSCREEN:
            self.fullscreen = not self.fullscreen
        elif kind == EventKind.TOGGLE_FILTER:
            self._begin_filter()
        elif kind == EventKind.ESCAPE:
            self.status = ""
        elif kind == EventKind.SUBMIT:
            self._submit()
        elif kind == EventKind.SEND:
            self._send()
        elif kind == EventKind.NEXT_CONTENT_TYPE:
            self._cycle_content_type(1)
        elif kind == EventKind.PREV_CONTENT_TYPE:
            self._cycle_content_type(-1)

    def _handle_filter(self, event: InputEvent) -> None:
        kind = event.kind
        if kind == EventKind.CHAR and event.text:
            self._apply_filter((self.filter or "") + event.text)
        elif kind == EventKind.BACKSPACE:
            self._apply_filter((self.filter or "")[:-1])
        elif kind in (EventKind.ESCAPE, EventKind.TOGGLE_FILTER):
            self._end_filter()
        elif kind == EventKind.SUBMIT:
            self._end_filter(keep_selection=True)
            self._submit()
        elif kind == EventKind.DOWN:
            self._move(1)
        elif kind == EventKind.UP:
            self._move(-1)
        elif kind == EventKind.TOGGLE_FULLSCREEN:
            self.fullscreen = not self.fullscreen
        elif kind in (EventKind.NEXT_PANE, EventKind.PREV_PANE, EventKind.SELECT_PANE):
            self._end_filter()
            self._handle_normal(event)

    def _handle_insert(self, event: InputEvent) -> None:
        kind = event.kind
        if kind == EventKind.CHAR and event.text:
            self._write_field(self._read_field() + event.text)
        elif kind == EventKind.BACKSPACE:
            self._write_field(self._read_field()[:-1])
        elif kind in (EventKind.SUBMIT, EventKind.ESCAPE, EventKind.TOGGLE_FILTER):
            self._leave_insert()
        elif kind in (EventKind.NEXT_PANE, EventKind.PREV_PANE, EventKind.SELECT_PANE):
            self._leave_insert()
            self._handle_normal(event)

    # ------------------------------------------------------------------ #
    # Panes and selection
    # ------------------------------------------------------------------ #

    def _activate(self, index: int) -> None:
        index = max(0, min(index, len(self.panes) - 1))
        if self.mode == InputMode.FILTER:
            self._end_filter()
        self.active_index = index

    def _activate_kind(self, kind: PaneKind) -> None:
        self._activate(_PANE_ORDER.index(kind))

    def _move(self, delta: int) -> None:
        self.active_pane.move(delta)
        self._selection_changed(self.active_pane.kind)

    def _selection_changed(self, kind: PaneKind) -> None:
        if kind == PaneKind.TAG_LIST:
            self._refresh_paths()
        elif kind == PaneKind.PATH_LIST:
            self._refresh_definition()
            self._refresh_address()
        elif kind == PaneKind.ADDRESS_BAR:
            item = self.pane(PaneKind.ADDRESS_BAR).selected
            if item is not None:
                self._selected_base = item.value

    def _begin_filter(self) -> None:
        self.mode = InputMode.FILTER
        self.filter = ""
        self.active_pane.begin_filter()

    def _apply_filter(self, text: str) -> None:
        self.filter = text
        self.active_pane.apply_filter(text)
        self._selection_changed(self.active_pane.kind)

    def _end_filter(self, keep_selection: bool = False) -> None:
        self.active_pane.end_filter(keep_selection=keep_selection)
        self.mode = InputMode.NORMAL
        self.filter = None
        self._selection_changed(self.active_pane.kind)

    def _submit(self) -> None:
        kind = self.active_pane.kind
        item = self.active_pane.selected
        if kind == PaneKind.TAG_LIST:
            self._activate_kind(PaneKind.PATH_LIST)
        elif kind == PaneKind.PATH_LIST:
            if item is not None and isinstance(item.value, OperationItem):
                self.select_for_call(item.value)
        elif kind == PaneKind.DEFINITION:
            self.active_pane.go_in()
        elif kind == PaneKind.REQUEST_BUILDER:
            if item is not None and item.value is not None:
                self._insert_target = item.value
                self.mode = InputMode.INSERT
                self.status = "Editing: Enter or Esc to finish"
        elif kind in (PaneKind.RESPONSE_VIEWER, PaneKind.ADDRESS_BAR):
            self._send()
        elif kind == PaneKind.HISTORY:
            if item is not None and isinstance(item.value, int):
                self.show_entry(item.value)
                self._activate_kind(PaneKind.RESPONSE_VIEWER)

    # ------------------------------------------------------------------ #
    # Pane contents
    # ------------------------------------------------------------------ #

    def _refresh_paths(self) -> None:
        tag = self.active_tag
        operations = [op for op in self.operations if tag is None or op.has_tag(tag)]
        items = []
        for op in operations:
            label = op.label + (" (deprecated)" if op.deprecated else "")
            items.append(PaneItem(label=label, value=op))
        self.pane(PaneKind.PATH_LIST).set_items(items)
        self._refresh_definition()
        self._refresh_address()

    def _refresh_definition(self) -> None:
        operation = self.current_operation
        key = operation.key if operation is not None else None
        if key == self._shown_operation:
            return
        self._shown_operation = key
        items = self.definition_items(operation) if operation is not None else []
        self.pane(PaneKind.DEFINITION).set_items(items)

    def definition_items(self, operation: OperationItem) -> list[PaneItem]:
        """Tree of the fully resolved operation, cached per operation."""
        if operation.key not in self._definitions:
            self._definitions[operation.key] = tree_items(self._definition_value(operation))
        return self._definitions[operation.key]

    def _definition_value(self, operation: OperationItem) -> dict[str, Any]:
        resolved = self.resolver.resolve(operation.operation).value
        if not isinstance(resolved, dict):
            resolved = {}
        value: dict[str, Any] = {
            "method": operation.method.value.upper(),
            "path": operation.path,
        }
        if operation.kind == OperationKind.WEBHOOK:
            value["kind"] = operation.kind.value
        for key in ("operationId", "summary", "description", "tags", "deprecated"):
            if key in resolved:
                value[key] = resolved[key]
        value["parameters"] = self.resolver.merge_parameters(
            operation.path_parameters, operation.operation.get("parameters")
        )
        for key in ("requestBody", "responses", "callbacks"):
            if key in resolved:
                value[key] = resolved[key]
        security = resolved.get("security")
        if security is None and self.document.security:
            security = self.document.security
        if security is not None:
            value["security"] = security
        if operation.servers:
            value["servers"] = [server.expanded_url() for server in operation.servers]
        return value

    def _refresh_address(self) -> None:
        operation = self.current_operation
        pane = self.pane(PaneKind.ADDRESS_BAR)
        items = []
        for url in self.base_url_candidates(operation):
            if operation is not None:
                label = f"{operation.method.value.upper()} {url}{operation.path}"
            else:
                label = url
            items.append(PaneItem(label=label, value=url))
        pane.set_items(items)
        for index, item in enumerate(items):
            if item.value == self._selected_base:
                pane.move_to(index)
                break

    def _refresh_request(self) -> None:
        items: list[PaneItem] = []
        for param in self.draft_parameters:
            marker = "!" if param.name in self.invalid_fields else " "
            required = "*" if param.required else ""
            value = self.draft.get(param.location, param.name)
            label = f"{marker}{param.location.value:6} {param.name}{required} = {value}"
            items.append(PaneItem(label=label, value=param))
        if self.draft_body is not None:
            required = "*" if self.draft_body.required else ""
            body = self.draft.body.replace("\n", " ")
            label = f" body{required} ({self.draft.content_type or 'no content type'}) = {body}"
            items.append(PaneItem(label=label, value=_BODY_FIELD))
        self.pane(PaneKind.REQUEST_BUILDER).set_items(items, keep_cursor=True)

    def _refresh_history(self) -> None:
        items = [PaneItem(label=entry.summary, value=entry.sequence) for entry in self.history.all()]
        self.pane(PaneKind.HISTORY).set_items(items, keep_cursor=True)

    def show_entry(self, sequence: int) -> None:
        """Show history entry *sequence* in the response viewer."""
        entry = self.history.get(sequence)
        self.viewed_entry = sequence
        self.pane(PaneKind.RESPONSE_VIEWER).set_items(_response_items(entry))

    def _pane_title(self, kind: PaneKind) -> str:
        title = kind.value
        if kind == PaneKind.PATH_LIST and self.active_tag is not None:
            title = f"{title} ({self.active_tag})"
        elif kind == PaneKind.REQUEST_BUILDER and self.draft_operation is not None:
            title = f"{title}: {self.draft_operation.label}"
        elif kind == PaneKind.RESPONSE_VIEWER and self.viewed_entry is not None:
            title = f"{title} #{self.viewed_entry}"
        elif kind == PaneKind.HISTORY:
            title = f"{title} ({len(self.history)})"
        return title

    # ------------------------------------------------------------------ #
    # Request draft
    # ------------------------------------------------------------------ #

    def select_for_call(self, operation: OperationItem) -> None:
        """Bind the draft to *operation* and switch to the request builder.

        Re-selecting the operation the draft is already bound to keeps the
        values typed so far; selecting another one resets the draft and
        prefills fields from their schema defaults.
        """
        self._prepare_call(operation)
        self._activate_kind(PaneKind.REQUEST_BUILDER)

    def _prepare_call(self, operation: OperationItem) -> None:
        merged = self.resolver.merge_parameters(
            operation.path_parameters, operation.operation.get("parameters")
        )
        self.draft_parameters = to_api_parameters(merged)
        self.draft_body = extract_request_body(
            self.resolver.resolve(operation.operation.get("requestBody")).value
        )
        self.draft_accept = preferred_accept(
            self.resolver.resolve(operation.operation.get("responses")).value
        )
        if self.draft.operation_key != operation.key:
            defaults = {
                (param.location, param.name): str(param.default)
                for param in self.draft_parameters
                if param.default is not None
            }
            content_types = self.draft_body.content_types if self.draft_body else []
            self.draft.reset(operation.key, defaults, content_types)
            logger.debug("Draft reset for %s", operation.key)
        self.draft_operation = operation
        self.invalid_fields = []
        self._refresh_request()

    def _read_field(self) -> str:
        target = self._insert_target
        if target == _BODY_FIELD:
            return self.draft.body
        if isinstance(target, APIParameter):
            return self.draft.get(target.location, target.name)
        return ""

    def _write_field(self, value: str) -> None:
        target = self._insert_target
        if target == _BODY_FIELD:
            self.draft.body = value
        elif isinstance(target, APIParameter):
            self.draft.set(target.location, target.name, value)
            if value and target.name in self.invalid_fields:
                self.invalid_fields.remove(target.name)
        self._refresh_request()

    def _leave_insert(self) -> None:
        self.mode = InputMode.NORMAL
        self._insert_target = None
        self.status = ""

    def _cycle_content_type(self, delta: int) -> None:
        if self.draft_body is None:
            return
        self.draft.cycle_content_type(delta)
        self.status = f"Content type: {self.draft.content_type}"
        self._refresh_request()

    # ------------------------------------------------------------------ #
    # Calls
    # ------------------------------------------------------------------ #

    def _send(self) -> None:
        if self.in_flight:
            logger.debug("Send ignored: a call is already in flight")
            return

        operation = self.draft_operation
        if operation is None:
            operation = self.current_operation
            if operation is None:
                self.status = "Nothing to send: select an operation first"
                return
            self._prepare_call(operation)

        try:
            request = build_request(
                operation,
                self.draft_parameters,
                self.draft,
                self.base_url,
                request_body=self.draft_body,
                accept=self.draft_accept,
            )
        except ValidationError as exc:
            self.invalid_fields = list(exc.fields)
            self.status = str(exc)
            self._refresh_request()
            return

        self.invalid_fields = []
        self.in_flight = True
        self.status = f"Sending {request.method} {request.url} ..."
        if self.on_send is not None:
            self.on_send(request)
        try:
            outcome = self.executor.execute(request, timeout=self.config.request.timeout)
        except Exception:
            self.in_flight = False
            self.status = f"Send failed: {request.method} {request.url}"
            raise
        self._queue.append(
            InputEvent(kind=EventKind.CALL_COMPLETED, request=request, outcome=outcome)
        )

    def _call_completed(self, event: InputEvent) -> None:
        if event.request is None or event.outcome is None:
            return
        label = self.draft_operation.label if self.draft_operation is not None else ""
        sequence = self.history.append(event.request, event.outcome, label=label)
        self.in_flight = False
        self.status = self.history.get(sequence).summary
        self._refresh_history()
        self.pane(PaneKind.HISTORY).move_to(sequence)
        self.show_entry(sequence)
        self._activate_kind(PaneKind.RESPONSE_VIEWER)


def _response_items(entry: HistoryEntry) -> list[PaneItem]:
    request = entry.request
    outcome = entry.outcome
    items = [
        PaneItem(label=f"{request.method} {request.url}", value=request),
        PaneItem(label=status_line(outcome), value=outcome),
    ]
    if request.headers or request.body:
        sent: dict[str, Any] = {"headers": dict(request.headers)}
        if request.body:
            sent["body"] = request.body
        items.append(tree_item("request", sent))
    if not outcome.ok:
        return items

    items.append(tree_item("headers", dict(outcome.headers)))
    data = extract_response_data(outcome)
    if data is None:
        items.append(PaneItem(label="(empty body)"))
    elif isinstance(data, (dict, list)):
        items.append(PaneItem(label="body:"))
        items.extend(tree_items(data))
    else:
        items.append(PaneItem(label="body:"))
        items.extend(PaneItem(label=line, value=line) for line in str(data).splitlines())
    return items
