"""Assemble an :class:`~spectui.models.OutboundRequest` from a request draft.

:func:`build_request` is pure: it reads an operation, its merged parameters
and the user's :class:`~spectui.models.RequestDraft`, and either returns the
exact request to send or raises
:class:`~spectui.exceptions.ValidationError` naming the missing fields.  No
network I/O happens here, so a failed build can never reach the executor.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import httpx

from spectui.exceptions import ValidationError
from spectui.models import (
    APIParameter,
    OperationItem,
    OutboundRequest,
    ParameterLocation,
    RequestBodyInfo,
    RequestDraft,
)


def build_request(
    operation: OperationItem,
    parameters: list[APIParameter],
    draft: RequestDraft,
    base_url: str,
    request_body: Optional[RequestBodyInfo] = None,
    accept: Optional[str] = None,
) -> OutboundRequest:
    """Build the outbound request for *operation* from *draft*.

    Args:
        operation: The operation being called.
        parameters: Its merged, typed parameters.
        draft: The user-edited values.
        base_url: Server URL the path is appended to.
        request_body: The operation's request body, or ``None`` when it
            declares none.  Only then is the draft's body attached.
        accept: Value for the ``Accept`` header, if any.

    Returns:
        The request to hand to :meth:`~spectui.client.executor.Executor.execute`.

    Raises:
        ValidationError: If a required path parameter has no value or the
            base URL and path do not form a valid URL.
    """
    path = operation.path
    missing: list[str] = []
    query: list[tuple[str, str]] = []
    headers: dict[str, str] = {}
    cookies: list[str] = []

    for param in parameters:
        value = draft.get(param.location, param.name)

        if param.location == ParameterLocation.PATH:
            if not value:
                if param.required:
                    missing.append(param.name)
                continue
            path = path.replace("{" + param.name + "}", quote(value, safe=""))
        elif not value:
            continue
        elif param.location == ParameterLocation.QUERY:
            query.append((param.name, value))
        elif param.location == ParameterLocation.HEADER:
            headers[param.name] = value
        elif param.location == ParameterLocation.COOKIE:
            cookies.append(f"{param.name}={value}")

    if missing:
        raise ValidationError(
            f"Missing required path parameter(s): {', '.join(missing)}",
            fields=missing,
        )

    if cookies:
        headers["Cookie"] = "; ".join(cookies)
    if accept and "Accept" not in headers:
        headers["Accept"] = accept

    body: Optional[str] = None
    content_type: Optional[str] = None
    if request_body is not None and draft.body:
        body = draft.body
        content_type = draft.content_type
        if content_type:
            headers["Content-Type"] = content_type

    url = _join_url(base_url, path)
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise ValidationError(f"Invalid request URL {url!r}: {exc}") from None
    if query:
        url = str(parsed.copy_merge_params(query))

    return OutboundRequest(
        method=operation.method.value.upper(),
        url=url,
        path=path,
        headers=headers,
        body=body,
        content_type=content_type,
    )


def _join_url(base_url: str, path: str) -> str:
    base = base_url.rstrip("/")
    if not path.startswith("/"):
        path = "/" + path
    return f"{base}{path}"


def preferred_accept(responses: Any) -> Optional[str]:
    """Return the first media type of the first 2xx response, if any.

    Args:
        responses: The operation's resolved ``responses`` mapping.
    """
    if not isinstance(responses, dict):
        return None
    for status, response in responses.items():
        if not str(status).startswith("2") or not isinstance(response, dict):
            continue
        content = response.get("content")
        if isinstance(content, dict) and content:
            return str(next(iter(content)))
    return None
