"""Draw a :class:`~spectui.models.SessionSnapshot` with rich.

Rendering is a pure function of the snapshot: the session never touches the
terminal, and this module never touches the session.
"""

from __future__ import annotations

from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.panel import Panel
from rich.text import Text

from spectui.models import InputMode, PaneKind, PaneSnapshot, SessionSnapshot
from spectui.tui.keys import HELP

# Rows taken by the header, the footer and the panel borders of one column.
CHROME_ROWS = 4


def viewport_for(height: int, fullscreen: bool) -> int:
    """Rows each pane can show on a terminal *height* rows tall."""
    if fullscreen:
        return max(1, height - CHROME_ROWS)
    # Address bar on top, then two stacked panes per column.
    return max(1, (height - CHROME_ROWS - 5) // 2 - 2)


def render_pane(pane: PaneSnapshot, fullscreen: bool = False) -> Panel:
    """One pane as a panel, showing only the rows inside its viewport."""
    lines = []
    end = pane.scroll + pane.viewport_height
    for index in range(pane.scroll, min(end, pane.total)):
        prefix = "+ " if pane.containers[index] else "  "
        line = Text(prefix + pane.lines[index], no_wrap=True, overflow="ellipsis")
        if index == pane.cursor:
            line.stylize("reverse" if pane.active else "bold")
        lines.append(line)
    if not lines:
        lines.append(Text("(empty)", style="dim"))

    title = f"[{pane.number}] {pane.title}"
    if pane.breadcrumb:
        title += " > " + " > ".join(pane.breadcrumb)
    subtitle = f"{pane.cursor + 1}/{pane.total}" if pane.total else None
    return Panel(
        Group(*lines),
        title=Text(title, overflow="ellipsis"),
        title_align="left",
        subtitle=subtitle,
        subtitle_align="right",
        border_style="cyan" if pane.active else "dim",
    )


def render_footer(snapshot: SessionSnapshot) -> Text:
    if snapshot.mode == InputMode.FILTER:
        return Text(f"/{snapshot.filter or ''}", style="bold yellow")
    text = Text()
    if snapshot.in_flight:
        text.append("[sending] ", style="bold magenta")
    if snapshot.mode == InputMode.INSERT:
        text.append("-- INSERT -- ", style="bold green")
    if snapshot.status:
        text.append(snapshot.status + "  ")
    text.append(HELP, style="dim")
    return text


def render(snapshot: SessionSnapshot) -> RenderableType:
    """Lay out every pane, or only the active one in fullscreen mode."""
    layout = Layout()
    header = Layout(Text(snapshot.title, style="bold"), name="header", size=1)
    footer = Layout(render_footer(snapshot), name="footer", size=1)

    if snapshot.fullscreen:
        active = snapshot.panes[snapshot.active_index]
        layout.split_column(header, Layout(render_pane(active, fullscreen=True)), footer)
        return layout

    panes = {pane.kind: render_pane(pane) for pane in snapshot.panes}
    body = Layout(name="body")
    body.split_row(
        _column(panes[PaneKind.TAG_LIST], panes[PaneKind.PATH_LIST], ratio=1),
        _column(panes[PaneKind.DEFINITION], panes[PaneKind.REQUEST_BUILDER], ratio=2),
        _column(panes[PaneKind.RESPONSE_VIEWER], panes[PaneKind.HISTORY], ratio=2),
    )
    layout.split_column(
        header,
        Layout(panes[PaneKind.ADDRESS_BAR], name="address", size=5),
        body,
        footer,
    )
    return layout


def _column(top: Panel, bottom: Panel, ratio: int) -> Layout:
    column = Layout(ratio=ratio)
    column.split_column(Layout(top), Layout(bottom))
    return column
