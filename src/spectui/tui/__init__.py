"""Terminal front end: key decoding, rich rendering, and the event loop."""

from spectui.tui.keys import decode_key
from spectui.tui.loop import run
from spectui.tui.render import render

__all__ = ["decode_key", "render", "run"]
