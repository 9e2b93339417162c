"""The single-threaded event loop of the interactive browser.

Each iteration fits the pane viewport to the terminal, draws the current
snapshot, reads exactly one key and lets the session process every event
that key produces.  A call blocks the loop until its outcome arrives; the
loop redraws once right before sending so the "sending" state is visible.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

import click
from rich.console import Console
from rich.live import Live

from spectui.models import OutboundRequest
from spectui.navigation.session import Session
from spectui.tui.keys import decode_key
from spectui.tui.render import render, viewport_for

logger = logging.getLogger(__name__)


def run(
    session: Session,
    console: Console,
    read_key: Optional[Callable[[], str]] = None,
) -> None:
    """Run *session* on *console* until it asks to quit.

    Args:
        session: The session to drive.
        console: Where to draw.
        read_key: Returns the next key; defaults to :func:`click.getchar`.
    """
    read_key = read_key or click.getchar

    with Live(console=console, screen=True, auto_refresh=False, transient=True) as live:

        def redraw() -> None:
            session.set_viewport(viewport_for(console.size.height, session.fullscreen))
            live.update(render(session.snapshot()), refresh=True)

        def before_send(request: OutboundRequest) -> None:
            logger.debug("Redrawing before %s %s", request.method, request.url)
            redraw()

        if session.on_send is None:
            session.on_send = before_send

        while not session.should_quit:
            redraw()
            try:
                key = read_key()
            except (EOFError, KeyboardInterrupt):
                break
            event = decode_key(key, session.mode)
            if event is None:
                logger.debug("Unbound key %r", key)
                continue
            session.handle(event)
