"""Tests for spectui.navigation.session -- the event-driven browser state."""

from __future__ import annotations

from typing import Any, Optional
from unittest.mock import MagicMock

import httpx
import pytest

from spectui.client.executor import Executor
from spectui.models import (
    CallOutcome,
    Document,
    EventKind,
    GlobalConfig,
    InputEvent,
    InputMode,
    PaneItem,
    PaneKind,
    ParameterLocation,
)
from spectui.navigation.session import ALL_TAGS, FALLBACK_BASE_URL, Session
from spectui.parser.store import NodeStore, load_document

TAGS, PATHS, DEFINITION, REQUEST, RESPONSE, ADDRESS, HISTORY = range(7)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _event(kind: EventKind, text: Optional[str] = None, index: Optional[int] = None) -> InputEvent:
    return InputEvent(kind=kind, text=text, index=index)


def _press(session: Session, *kinds: EventKind) -> None:
    for kind in kinds:
        session.handle(_event(kind))


def _type(session: Session, text: str) -> None:
    for char in text:
        session.handle(_event(EventKind.CHAR, text=char))


def _jump(session: Session, index: int) -> None:
    session.handle(_event(EventKind.SELECT_PANE, index=index))


def _labels(session: Session, kind: PaneKind) -> list[str]:
    return [item.label for item in session.pane(kind).items]


def _child(items: list[PaneItem], label: str) -> PaneItem:
    """Return the item whose label starts with *label*."""
    for item in items:
        if item.label.startswith(label):
            return item
    raise AssertionError(f"No item labelled {label!r} in {[i.label for i in items]}")


def _go_to_operation(session: Session, operation_id: str) -> None:
    """Highlight *operation_id* in the path list using key events only."""
    _jump(session, PATHS)
    ids = [op.operation_id for op in session.operations]
    for _ in range(len(ids)):
        _press(session, EventKind.UP)
    for _ in range(ids.index(operation_id)):
        _press(session, EventKind.DOWN)
    assert session.current_operation is not None
    assert session.current_operation.operation_id == operation_id


def _prepare(session: Session, operation_id: str, **values: str) -> None:
    """Select *operation_id* for calling and fill in path/query values."""
    _go_to_operation(session, operation_id)
    _press(session, EventKind.SUBMIT)
    for param in session.draft_parameters:
        if param.name in values:
            session.draft.set(param.location, param.name, values[param.name])


@pytest.fixture
def session(petstore: tuple[Document, NodeStore], fake_executor: MagicMock) -> Session:
    document, store = petstore
    return Session(document, store, fake_executor)


@pytest.fixture
def tree_session(tree: tuple[Document, NodeStore], fake_executor: MagicMock) -> Session:
    document, store = tree
    return Session(document, store, fake_executor)


# ---------------------------------------------------------------------------
# Initial state
# ---------------------------------------------------------------------------


class TestInitialState:
    """A fresh session shows every operation with the Tags pane active."""

    def test_tags_pane(self, session: Session) -> None:
        assert _labels(session, PaneKind.TAG_LIST) == [ALL_TAGS, "pets", "store", "admin"]
        assert session.active_tag is None

    def test_paths_pane_lists_everything(self, session: Session) -> None:
        values = [item.value.operation_id for item in session.pane(PaneKind.PATH_LIST).items]
        assert values == ["listPets", "createPet", "showPetById", "deletePet", "getInventory"]
        assert _labels(session, PaneKind.PATH_LIST)[3].endswith("(deprecated)")

    def test_definition_of_first_operation(self, session: Session) -> None:
        labels = _labels(session, PaneKind.DEFINITION)
        assert labels[:4] == [
            "method: GET",
            "path: /pets",
            "operationId: listPets",
            "summary: List all pets",
        ]
        assert "parameters [2]" in labels
        assert "responses {2}" in labels

    def test_address_candidates(self, session: Session) -> None:
        assert [item.value for item in session.pane(PaneKind.ADDRESS_BAR).items] == [
            "https://petstore.example.com/v1",
            "https://eu.petstore.example.com",
            FALLBACK_BASE_URL,
        ]
        assert session.base_url == "https://petstore.example.com/v1"

    def test_status_and_mode(self, session: Session) -> None:
        assert session.status == "Loaded 5 operations"
        assert session.mode == InputMode.NORMAL
        assert session.active_index == TAGS
        assert not session.fullscreen

    def test_empty_document(self, fake_executor: MagicMock) -> None:
        document, store = load_document({"openapi": "3.1.0", "info": {"title": "Empty", "version": "0"}}, "3.1.0")
        session = Session(document, store, fake_executor)
        assert _labels(session, PaneKind.TAG_LIST) == [ALL_TAGS]
        assert session.pane(PaneKind.PATH_LIST).items == []
        assert session.current_operation is None
        _press(session, EventKind.DOWN, EventKind.SUBMIT, EventKind.SEND)
        assert session.status == "Nothing to send: select an operation first"
        fake_executor.execute.assert_not_called()

    def test_config_fullscreen_and_height(
        self, petstore: tuple[Document, NodeStore], fake_executor: MagicMock
    ) -> None:
        document, store = petstore
        config = GlobalConfig.model_validate({"ui": {"fullscreen": True, "viewport_height": 4}})
        session = Session(document, store, fake_executor, config=config)
        assert session.fullscreen
        assert all(pane.viewport_height == 4 for pane in session.panes)


# ---------------------------------------------------------------------------
# Pane switching
# ---------------------------------------------------------------------------


class TestPaneSwitching:
    """Seven panes addressed by next/prev and by number, clamped at the ends."""

    def test_next_and_prev_clamp(self, session: Session) -> None:
        _press(session, EventKind.PREV_PANE)
        assert session.active_index == TAGS
        _press(session, *[EventKind.NEXT_PANE] * 10)
        assert session.active_index == HISTORY
        _press(session, EventKind.PREV_PANE)
        assert session.active_index == ADDRESS

    def test_select_by_number(self, session: Session) -> None:
        _jump(session, REQUEST)
        assert session.active_pane.kind == PaneKind.REQUEST_BUILDER

    def test_out_of_range_number_ignored(self, session: Session) -> None:
        _jump(session, DEFINITION)
        _jump(session, 9)
        assert session.active_index == DEFINITION

    def test_fullscreen_toggle(self, session: Session) -> None:
        _press(session, EventKind.TOGGLE_FULLSCREEN)
        assert session.snapshot().fullscreen
        _press(session, EventKind.TOGGLE_FULLSCREEN)
        assert not session.fullscreen

    def test_quit(self, session: Session) -> None:
        _press(session, EventKind.QUIT)
        assert session.should_quit

    def test_snapshot_numbers_panes(self, session: Session) -> None:
        _jump(session, RESPONSE)
        snapshot = session.snapshot()
        assert [pane.number for pane in snapshot.panes] == [1, 2, 3, 4, 5, 6, 7]
        assert [pane.active for pane in snapshot.panes] == [i == RESPONSE for i in range(7)]
        assert snapshot.title == "Petstore 1.0.0"


# ---------------------------------------------------------------------------
# Tags and paths
# ---------------------------------------------------------------------------


class TestTagSelection:
    """Moving in the tag list filters the path list."""

    def test_tag_narrows_paths(self, session: Session) -> None:
        _press(session, EventKind.DOWN)
        assert session.active_tag == "pets"
        ids = [item.value.operation_id for item in session.pane(PaneKind.PATH_LIST).items]
        assert ids == ["listPets", "createPet", "showPetById"]

    def test_undeclared_tag(self, session: Session) -> None:
        _press(session, EventKind.DOWN, EventKind.DOWN, EventKind.DOWN)
        assert session.active_tag == "admin"
        ids = [item.value.operation_id for item in session.pane(PaneKind.PATH_LIST).items]
        assert ids == ["getInventory"]

    def test_submit_moves_to_paths(self, session: Session) -> None:
        _press(session, EventKind.SUBMIT)
        assert session.active_pane.kind == PaneKind.PATH_LIST

    def test_paths_title_shows_tag(self, session: Session) -> None:
        _press(session, EventKind.DOWN)
        assert session.snapshot().panes[PATHS].title == "Paths (pets)"

    def test_path_move_refreshes_definition_and_address(self, session: Session) -> None:
        _go_to_operation(session, "getInventory")
        assert "operationId: getInventory" in _labels(session, PaneKind.DEFINITION)
        assert [item.value for item in session.pane(PaneKind.ADDRESS_BAR).items] == [
            "https://petstore.example.com/v1",
            "https://eu.petstore.example.com",
            "https://inventory.example.com",
            FALLBACK_BASE_URL,
        ]
        assert _labels(session, PaneKind.ADDRESS_BAR)[0] == (
            "GET https://petstore.example.com/v1/store/inventory"
        )


# ---------------------------------------------------------------------------
# Definition viewer
# ---------------------------------------------------------------------------


class TestDefinition:
    """The resolved operation as a drill-down tree."""

    def test_drill_into_parameters(self, session: Session) -> None:
        _jump(session, DEFINITION)
        pane = session.active_pane
        pane.move_to(_labels(session, PaneKind.DEFINITION).index("parameters [2]"))
        _press(session, EventKind.GO)
        assert pane.depth == 1
        _press(session, EventKind.GO)
        assert "name: limit" in _labels(session, PaneKind.DEFINITION)
        _press(session, EventKind.BACK, EventKind.BACK)
        assert pane.depth == 0
        assert pane.selected is not None
        assert pane.selected.label == "parameters [2]"

    def test_submit_goes_in(self, session: Session) -> None:
        _jump(session, DEFINITION)
        session.active_pane.move_to(_labels(session, PaneKind.DEFINITION).index("responses {2}"))
        _press(session, EventKind.SUBMIT)
        assert _labels(session, PaneKind.DEFINITION) == ["200 {2}", "default {2}"]

    def test_merged_parameters_shown(self, session: Session) -> None:
        _go_to_operation(session, "showPetById")
        items = session.pane(PaneKind.DEFINITION).items
        params = _child(items, "parameters").children or []
        names = [_child(p.children or [], "name").label for p in params]
        assert names == ["name: id", "name: X-Trace", "name: session"]

    def test_cyclic_schema_is_a_leaf(self, tree_session: Session) -> None:
        op = tree_session.operations[0]
        node = _child(tree_session.definition_items(op), "responses")
        for label in ("200", "content", "application/json", "schema", "properties", "children"):
            node = _child(node.children or [], label)
        items = _child(node.children or [], "items")
        assert items.label == "items: <cyclic $ref #/components/schemas/Node>"
        assert not items.is_container

    def test_broken_references_inline(self, tree_session: Session) -> None:
        op = next(op for op in tree_session.operations if op.operation_id == "broken")
        params = _child(tree_session.definition_items(op), "parameters")
        first = (params.children or [])[0]
        assert first.label == "[0]: <broken $ref #/components/parameters/Missing: target not found>"

    def test_webhook_kind(self, tree_session: Session) -> None:
        webhook = tree_session.operations[-1]
        labels = [item.label for item in tree_session.definition_items(webhook)]
        assert "kind: webhook" in labels

    def test_definition_cached(self, session: Session) -> None:
        op = session.operations[0]
        assert session.definition_items(op) is session.definition_items(op)

    def test_document_security_inherited(self, fake_executor: MagicMock) -> None:
        raw: dict[str, Any] = {
            "openapi": "3.0.0",
            "security": [{"apiKey": []}],
            "paths": {"/x": {"get": {"responses": {}}}},
        }
        document, store = load_document(raw, "3.0.0")
        session = Session(document, store, fake_executor)
        assert "security [1]" in _labels(session, PaneKind.DEFINITION)


# ---------------------------------------------------------------------------
# Filter mode
# ---------------------------------------------------------------------------


class TestFilterMode:
    """'/' filters the active pane; characters go to the filter buffer."""

    def test_typing_narrows_active_pane(self, session: Session) -> None:
        _jump(session, PATHS)
        _press(session, EventKind.TOGGLE_FILTER)
        assert session.mode == InputMode.FILTER
        _type(session, "id")
        ids = [item.value.operation_id for item in session.pane(PaneKind.PATH_LIST).items]
        assert ids == ["showPetById", "deletePet"]
        assert session.snapshot().filter == "id"
        # The definition follows the filtered selection.
        assert "operationId: showPetById" in _labels(session, PaneKind.DEFINITION)

    def test_backspace(self, session: Session) -> None:
        _jump(session, PATHS)
        _press(session, EventKind.TOGGLE_FILTER)
        _type(session, "idx")
        assert session.pane(PaneKind.PATH_LIST).items == []
        _press(session, EventKind.BACKSPACE)
        assert session.filter == "id"
        assert len(session.pane(PaneKind.PATH_LIST).items) == 2

    def test_escape_restores_list(self, session: Session) -> None:
        _jump(session, PATHS)
        _press(session, EventKind.DOWN)
        _press(session, EventKind.TOGGLE_FILTER)
        _type(session, "store")
        _press(session, EventKind.ESCAPE)
        assert session.mode == InputMode.NORMAL
        assert session.filter is None
        assert len(session.pane(PaneKind.PATH_LIST).items) == 5
        assert session.current_operation is not None
        assert session.current_operation.operation_id == "createPet"

    def test_submit_selects_filtered_item(self, session: Session) -> None:
        _jump(session, PATHS)
        _press(session, EventKind.TOGGLE_FILTER)
        _type(session, "inventory")
        _press(session, EventKind.SUBMIT)
        assert session.mode == InputMode.NORMAL
        assert session.draft_operation is not None
        assert session.draft_operation.operation_id == "getInventory"
        assert session.active_pane.kind == PaneKind.REQUEST_BUILDER
        assert len(session.pane(PaneKind.PATH_LIST).items) == 5

    def test_command_letters_are_text(self, session: Session) -> None:
        _press(session, EventKind.TOGGLE_FILTER)
        _type(session, "q")
        assert not session.should_quit
        assert session.filter == "q"

    def test_pane_switch_ends_filter(self, session: Session) -> None:
        _jump(session, PATHS)
        _press(session, EventKind.TOGGLE_FILTER)
        _type(session, "pets")
        _press(session, EventKind.NEXT_PANE)
        assert session.mode == InputMode.NORMAL
        assert session.active_index == DEFINITION
        assert len(session.pane(PaneKind.PATH_LIST).items) == 5

    def test_quit_from_filter(self, session: Session) -> None:
        _press(session, EventKind.TOGGLE_FILTER, EventKind.QUIT)
        assert session.should_quit


# ---------------------------------------------------------------------------
# Request builder
# ---------------------------------------------------------------------------


class TestRequestBuilder:
    """Selecting an operation for calling and editing its fields."""

    def test_fields_prefilled_from_defaults(self, session: Session) -> None:
        _prepare(session, "listPets")
        assert session.active_pane.kind == PaneKind.REQUEST_BUILDER
        assert _labels(session, PaneKind.REQUEST_BUILDER) == [
            " query  limit = 20",
            " query  status = ",
        ]
        assert session.snapshot().panes[REQUEST].title.startswith("Request: GET")

    def test_insert_mode_edits_field(self, session: Session) -> None:
        _prepare(session, "showPetById")
        _press(session, EventKind.SUBMIT)
        assert session.mode == InputMode.INSERT
        _type(session, "42")
        _press(session, EventKind.BACKSPACE)
        _type(session, "7")
        _press(session, EventKind.ESCAPE)
        assert session.mode == InputMode.NORMAL
        assert session.draft.get(ParameterLocation.PATH, "id") == "47"
        assert _labels(session, PaneKind.REQUEST_BUILDER)[0] == " path   id* = 47"

    def test_insert_mode_routes_letters(self, session: Session) -> None:
        _prepare(session, "showPetById")
        _press(session, EventKind.SUBMIT)
        _type(session, "qs")
        assert not session.should_quit
        assert session.draft.get(ParameterLocation.PATH, "id") == "qs"

    def test_body_field_and_content_type(self, session: Session) -> None:
        _prepare(session, "createPet")
        assert session.draft.content_type == "application/json"
        _press(session, EventKind.NEXT_CONTENT_TYPE)
        assert session.draft.content_type == "application/xml"
        _press(session, EventKind.NEXT_CONTENT_TYPE)
        assert session.draft.content_type == "application/xml"
        _press(session, EventKind.PREV_CONTENT_TYPE)
        assert session.status == "Content type: application/json"
        _press(session, EventKind.SUBMIT)
        _type(session, "{}")
        _press(session, EventKind.SUBMIT)
        assert session.draft.body == "{}"
        assert _labels(session, PaneKind.REQUEST_BUILDER) == [" body* (application/json) = {}"]

    def test_reselecting_same_operation_keeps_values(self, session: Session) -> None:
        _prepare(session, "showPetById", id="9")
        _prepare(session, "showPetById")
        assert session.draft.get(ParameterLocation.PATH, "id") == "9"

    def test_selecting_other_operation_resets(self, session: Session) -> None:
        _prepare(session, "showPetById", id="9")
        _prepare(session, "listPets")
        assert session.draft.get(ParameterLocation.PATH, "id") == ""
        assert session.draft.get(ParameterLocation.QUERY, "limit") == "20"


# ---------------------------------------------------------------------------
# Sending
# ---------------------------------------------------------------------------


class TestSend:
    """Building, executing and recording calls."""

    def test_successful_call(self, session: Session, fake_executor: MagicMock) -> None:
        _prepare(session, "showPetById", id="7")
        _press(session, EventKind.SEND)

        request = fake_executor.execute.call_args.args[0]
        assert request.method == "GET"
        assert request.url == "https://petstore.example.com/v1/pets/7"
        assert request.headers["Accept"] == "application/json"
        assert fake_executor.execute.call_args.kwargs["timeout"] == 30.0

        assert len(session.history) == 1
        assert not session.in_flight
        assert session.status == "#0 GET https://petstore.example.com/v1/pets/7 -> 200"
        assert session.active_pane.kind == PaneKind.RESPONSE_VIEWER
        assert _labels(session, PaneKind.RESPONSE_VIEWER) == [
            "GET https://petstore.example.com/v1/pets/7",
            "HTTP 200 OK (0.012s)",
            "request {1}",
            "headers {1}",
            "body:",
            "id: 1",
            "name: Rex",
        ]
        assert _labels(session, PaneKind.HISTORY) == [session.status]

    def test_missing_path_parameter_blocks_send(self, session: Session, fake_executor: MagicMock) -> None:
        _prepare(session, "showPetById")
        _press(session, EventKind.SEND)
        fake_executor.execute.assert_not_called()
        assert len(session.history) == 0
        assert session.invalid_fields == ["id"]
        assert session.status == "Missing required path parameter(s): id"
        assert _labels(session, PaneKind.REQUEST_BUILDER)[0].startswith("!path")

        _press(session, EventKind.SUBMIT)
        _type(session, "3")
        assert session.invalid_fields == []

    def test_failed_call_recorded(self, session: Session, fake_executor: MagicMock) -> None:
        fake_executor.execute.return_value = CallOutcome(failure="ConnectError: refused")
        _prepare(session, "listPets")
        _press(session, EventKind.SEND)
        entry = session.history.get(0)
        assert not entry.outcome.ok
        labels = _labels(session, PaneKind.RESPONSE_VIEWER)
        assert labels[1] == "FAILED: ConnectError: refused"
        assert not any(label.startswith("headers") for label in labels)

    def test_send_from_paths_uses_highlighted_operation(
        self, session: Session, fake_executor: MagicMock
    ) -> None:
        _go_to_operation(session, "getInventory")
        _press(session, EventKind.SEND)
        assert fake_executor.execute.call_args.args[0].url == (
            "https://petstore.example.com/v1/store/inventory"
        )

    def test_query_and_body(self, session: Session, fake_executor: MagicMock) -> None:
        _prepare(session, "createPet")
        session.draft.body = '{"name": "Rex"}'
        _press(session, EventKind.SEND)
        request = fake_executor.execute.call_args.args[0]
        assert request.method == "POST"
        assert request.body == '{"name": "Rex"}'
        assert request.headers["Content-Type"] == "application/json"
        assert "body: {\"name\": \"Rex\"}" in [
            child.label
            for child in _child(session.pane(PaneKind.RESPONSE_VIEWER).items, "request").children or []
        ]

    def test_no_send_while_in_flight(self, session: Session, fake_executor: MagicMock) -> None:
        _prepare(session, "listPets")
        session.in_flight = True
        _press(session, EventKind.SEND)
        fake_executor.execute.assert_not_called()

    def test_on_send_sees_in_flight_state(
        self, petstore: tuple[Document, NodeStore], fake_executor: MagicMock
    ) -> None:
        document, store = petstore
        seen: list[tuple[str, bool, str]] = []
        session = Session(document, store, fake_executor)
        session.on_send = lambda request: seen.append(
            (request.url, session.in_flight, session.snapshot().status)
        )
        _prepare(session, "listPets")
        _press(session, EventKind.SEND)
        assert seen == [
            (
                "https://petstore.example.com/v1/pets?limit=20",
                True,
                "Sending GET https://petstore.example.com/v1/pets?limit=20 ...",
            )
        ]

    def test_submit_on_response_sends(self, session: Session, fake_executor: MagicMock) -> None:
        _prepare(session, "listPets")
        _jump(session, RESPONSE)
        _press(session, EventKind.SUBMIT)
        assert fake_executor.execute.call_count == 1

    def test_address_bar_selects_server(self, session: Session, fake_executor: MagicMock) -> None:
        _prepare(session, "showPetById", id="7")
        _jump(session, ADDRESS)
        _press(session, EventKind.DOWN, EventKind.SUBMIT)
        assert fake_executor.execute.call_args.args[0].url == "https://eu.petstore.example.com/pets/7"

    def test_config_base_url_first(
        self, petstore: tuple[Document, NodeStore], fake_executor: MagicMock
    ) -> None:
        document, store = petstore
        session = Session(document, store, fake_executor, config=GlobalConfig(base_url="http://localhost:8080/"))
        assert session.base_url == "http://localhost:8080"
        _prepare(session, "showPetById", id="1")
        _press(session, EventKind.SEND)
        assert fake_executor.execute.call_args.args[0].url == "http://localhost:8080/pets/1"

    def test_unencodable_header_recorded_as_failure(
        self, petstore: tuple[Document, NodeStore]
    ) -> None:
        document, store = petstore
        transport = httpx.MockTransport(lambda request: httpx.Response(200))
        with Executor(transport=transport) as executor:
            session = Session(document, store, executor)
            _prepare(session, "showPetById", id="1", **{"X-Trace": "caf\u00e9"})
            _press(session, EventKind.SEND)

        assert not session.in_flight
        assert len(session.history) == 1
        outcome = session.history.get(0).outcome
        assert not outcome.ok
        assert outcome.failure is not None
        assert outcome.failure.startswith("UnicodeEncodeError")
        assert session.active_pane.kind == PaneKind.RESPONSE_VIEWER

    def test_invalid_base_url_blocks_send(
        self, petstore: tuple[Document, NodeStore], fake_executor: MagicMock
    ) -> None:
        document, store = petstore
        config = GlobalConfig(base_url="http://api.example.com:abc")
        session = Session(document, store, fake_executor, config=config)
        _prepare(session, "listPets")
        _press(session, EventKind.SEND)

        fake_executor.execute.assert_not_called()
        assert not session.in_flight
        assert len(session.history) == 0
        assert session.status.startswith("Invalid request URL")

    def test_executor_error_clears_in_flight(
        self, session: Session, fake_executor: MagicMock
    ) -> None:
        fake_executor.execute.side_effect = RuntimeError("transport exploded")
        _prepare(session, "listPets")
        with pytest.raises(RuntimeError):
            _press(session, EventKind.SEND)

        assert not session.in_flight
        assert len(session.history) == 0
        fake_executor.execute.side_effect = None
        _press(session, EventKind.SEND)
        assert len(session.history) == 1


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class TestHistoryPane:
    """Every call is listed; selecting one shows it again."""

    def test_entries_listed_in_order(self, session: Session) -> None:
        _prepare(session, "showPetById", id="1")
        _press(session, EventKind.SEND)
        _prepare(session, "showPetById", id="2")
        _press(session, EventKind.SEND)
        labels = _labels(session, PaneKind.HISTORY)
        assert [label.split()[0] for label in labels] == ["#0", "#1"]
        assert session.pane(PaneKind.HISTORY).cursor == 1

    def test_select_entry_shows_response(self, session: Session) -> None:
        _prepare(session, "showPetById", id="1")
        _press(session, EventKind.SEND)
        _prepare(session, "showPetById", id="2")
        _press(session, EventKind.SEND)
        _jump(session, HISTORY)
        _press(session, EventKind.UP, EventKind.SUBMIT)
        assert session.viewed_entry == 0
        assert session.active_pane.kind == PaneKind.RESPONSE_VIEWER
        assert _labels(session, PaneKind.RESPONSE_VIEWER)[0].endswith("/pets/1")
        assert session.snapshot().panes[RESPONSE].title == "Response #0"
        assert session.snapshot().panes[HISTORY].title == "History (2)"

    def test_shared_history(
        self, petstore: tuple[Document, NodeStore], fake_executor: MagicMock
    ) -> None:
        from spectui.history import CallHistory

        document, store = petstore
        history = CallHistory()
        session = Session(document, store, fake_executor, history=history)
        _prepare(session, "listPets")
        _press(session, EventKind.SEND)
        assert len(history) == 1
        assert history.get(0).label.startswith("GET")
