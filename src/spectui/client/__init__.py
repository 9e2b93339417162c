"""HTTP client module for spectui.

Turns a request draft into an outbound call and normalises the result.

Modules:
    :mod:`~spectui.client.builder` -- pure request assembly with validation.
    :mod:`~spectui.client.executor` -- blocking executor backed by
    :class:`httpx.Client`.
    :mod:`~spectui.client.response` -- body decoding for the viewer.

Example::

    from spectui.client import Executor, build_request

    request = build_request(operation, parameters, draft, base_url)
    with Executor(config.request) as executor:
        outcome = executor.execute(request)
"""

from spectui.client.builder import build_request, preferred_accept
from spectui.client.executor import Executor

__all__ = ["build_request", "preferred_accept", "Executor"]
