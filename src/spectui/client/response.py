"""Response decoding bridge -- maps a :class:`~spectui.models.CallOutcome` to viewable data.

The response viewer and the history both need the body of an outcome in a
browsable shape.  :func:`extract_response_data` decodes it as JSON when
possible and falls back to text, and :func:`format_body` renders it as the
lines shown for non-tree bodies.

See Also:
    :mod:`spectui.navigation.session` -- builds the viewer items from these.
"""

from __future__ import annotations

import json
from typing import Any

from spectui.models import CallOutcome


def extract_response_data(outcome: CallOutcome) -> Any:
    """Extract the body from a call outcome.

    Attempts to parse the body as JSON first.  If that fails (e.g. the
    response is HTML or plain text), returns the decoded text.  Returns
    ``None`` for outcomes with no content.

    Args:
        outcome: The outcome to extract data from.

    Returns:
        A JSON-decoded object (``dict``, ``list``, etc.), a ``str`` of raw
        text, or ``None`` if the body is empty.
    """
    if not outcome.body:
        return None

    try:
        return json.loads(outcome.body)
    except (ValueError, UnicodeDecodeError):
        pass

    return outcome.body.decode("utf-8", errors="replace")


def format_body(outcome: CallOutcome) -> list[str]:
    """Return the body of *outcome* as display lines.

    JSON bodies are pretty-printed with two-space indentation; text bodies
    are split on line breaks.
    """
    data = extract_response_data(outcome)
    if data is None:
        return []
    if isinstance(data, str):
        return data.splitlines()
    return json.dumps(data, indent=2, ensure_ascii=False).splitlines()


def status_line(outcome: CallOutcome) -> str:
    """One-line status, e.g. ``HTTP 200 OK (0.123s)`` or ``FAILED: Timeout ...``."""
    if not outcome.ok:
        return f"FAILED: {outcome.failure}"
    reason = f" {outcome.reason}" if outcome.reason else ""
    return f"HTTP {outcome.status_code}{reason} ({outcome.elapsed:.3f}s)"
