"""Synchronous call executor.

This module provides :class:`Executor`, the blocking HTTP layer used by a
session to send an :class:`~spectui.models.OutboundRequest`.  It wraps
:class:`httpx.Client` and normalises every result into a
:class:`~spectui.models.CallOutcome`:

- **Responses** of any status become an outcome carrying status, reason,
  headers, body bytes and elapsed time.  A 404 or 500 is a response, not a
  failure.
- **Timeouts** become a failed outcome ``"Timeout after Ns: ..."``.
- **Other transport errors** (connection refused, DNS, protocol errors)
  become a failed outcome ``"<ExceptionName>: ..."``.
- **Unsendable requests** (malformed URL, header values outside ASCII)
  fail the same way without reaching the network.

Nothing is retried: a failed call is recorded as such and re-sent manually.
"""

from __future__ import annotations

import logging
import time
from typing import Optional

import httpx

from spectui.models import CallOutcome, OutboundRequest, RequestConfig

logger = logging.getLogger(__name__)


class Executor:
    """Blocking executor for outbound requests.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        config: Request settings (default timeout, SSL verification,
            redirects).
        transport: Optional :mod:`httpx` transport, e.g.
            :class:`httpx.MockTransport` in tests.

    Example::

        with Executor(config.request) as executor:
            outcome = executor.execute(request)
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> Executor:
        self._client = httpx.Client(
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=self._config.follow_redirects,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public API
    # ------------------------------------------------------------------ #

    def execute(self, request: OutboundRequest, timeout: Optional[float] = None) -> CallOutcome:
        """Send *request* and wait for the outcome.

        Args:
            request: The request built by
                :func:`~spectui.client.builder.build_request`.
            timeout: Seconds to wait; defaults to the configured timeout.

        Returns:
            The normalised outcome.  This method never raises for network
            problems or for requests httpx refuses to encode.
        """
        assert self._client is not None, "Executor not initialised -- use as context manager"

        effective_timeout = self._config.timeout if timeout is None else timeout
        logger.debug("Sending %s %s", request.method, request.url)
        started = time.perf_counter()
        try:
            response = self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body.encode("utf-8") if request.body is not None else None,
                timeout=effective_timeout,
            )
        except httpx.TimeoutException as exc:
            logger.debug("Timeout calling %s: %s", request.url, exc)
            return CallOutcome(
                elapsed=time.perf_counter() - started,
                failure=f"Timeout after {effective_timeout:g}s: {exc}",
            )
        except (httpx.HTTPError, httpx.InvalidURL, UnicodeEncodeError) as exc:
            logger.debug("Call to %s failed: %r", request.url, exc)
            return CallOutcome(
                elapsed=time.perf_counter() - started,
                failure=f"{type(exc).__name__}: {exc}",
            )

        elapsed = time.perf_counter() - started
        logger.debug("%s %s -> %d in %.3fs", request.method, request.url, response.status_code, elapsed)
        return CallOutcome(
            status_code=response.status_code,
            reason=response.reason_phrase or None,
            headers=dict(response.headers),
            body=response.content,
            elapsed=elapsed,
        )
