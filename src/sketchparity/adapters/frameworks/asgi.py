"""ASGI fake intake for capturing pipeline payloads.

This adapter provides a framework-agnostic ASGI application standing in for
a pipeline's capture endpoint. Pipelines post payloads to it; the harness
reads them back through the ``/fakeintake/payloads`` endpoint.
"""

import base64
import json
import logging
from collections.abc import Callable, Coroutine
from datetime import datetime, timezone
from typing import Any
from urllib.parse import parse_qs

from sketchparity.adapters.fakeintake import PAYLOADS_PATH
from sketchparity.adapters.frameworks.query_params import (
    _parse_endpoint_param,
    _parse_format_param,
)
from sketchparity.core.models import RawPayload
from sketchparity.core.ports import PayloadStoragePort

logger = logging.getLogger(__name__)

# ASGI type aliases
Scope = dict[str, Any]
Receive = Callable[[], Coroutine[Any, Any, dict[str, Any]]]
Send = Callable[[dict[str, Any]], Coroutine[Any, Any, None]]
ASGIApp = Callable[[Scope, Receive, Send], Coroutine[Any, Any, None]]


def _parse_query_params(scope: Scope) -> dict[str, list[str]]:
    """Parse query string from ASGI scope into parameter dictionary.

    Args:
        scope: ASGI scope dictionary containing request metadata.

    Returns:
        Dictionary mapping parameter names to lists of values.
        Returns empty dict if query_string is missing or empty.
    """
    # @tra: Adapter.ASGI.QueryParameter.Parser
    query_string = scope.get("query_string", b"").decode(errors="replace")
    return parse_qs(query_string)


def _get_header(scope: Scope, header_name: str) -> str:
    """Return a request header value (case-insensitive), or empty string."""
    # @tra: Adapter.ASGI.Headers.Lookup
    header_bytes = header_name.lower().encode()
    headers: list[tuple[bytes, bytes]] = scope.get("headers", [])
    for name, value in headers:
        if name.lower() == header_bytes:
            return value.decode("latin-1")
    return ""


async def _read_body(receive: Receive) -> bytes:
    """Read the full request body from ASGI receive messages."""
    # @tra: Adapter.ASGI.ReadBody
    chunks = []
    more_body = True
    while more_body:
        message = await receive()
        chunks.append(message.get("body", b""))
        more_body = message.get("more_body", False)
    return b"".join(chunks)


async def _send_response(send: Send, status: int, content_type: str, body: str) -> None:
    """Send an HTTP response with headers and body.

    Args:
        send: ASGI send callable for writing response.
        status: HTTP status code.
        content_type: Content-Type header value.
        body: Response body as string (will be encoded to bytes).
    """
    # @tra: Adapter.ASGI.SendResponse.Headers
    headers = [(b"content-type", content_type.encode())]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body.encode()})


async def _handle_endpoint(
    send: Send,
    endpoint_func: Callable[[], Coroutine[Any, Any, str]],
    status: int,
    log_message: str,
) -> None:
    """Execute an endpoint function with error handling and send response.

    Args:
        send: ASGI send callable for writing response.
        endpoint_func: Async function that returns a JSON response body.
        status: HTTP status code for a successful response.
        log_message: Message to log on error.
    """
    try:
        body = await endpoint_func()
        await _send_response(send, status, "application/json", body)
    except Exception:
        logger.exception(log_message)
        error_body = json.dumps({"error": "Internal Server Error"})
        await _send_response(send, 500, "application/json", error_body)


def _encode_payloads(payloads: list[RawPayload]) -> str:
    """Encode captured payloads into the raw-format JSON envelope."""
    return json.dumps(
        {
            "payloads": [
                {
                    "timestamp": p.timestamp,
                    "data": base64.b64encode(p.data).decode("ascii"),
                    "encoding": p.encoding,
                }
                for p in payloads
            ]
        }
    )


def create_fake_intake_app(storage: PayloadStoragePort) -> ASGIApp:
    """Create an ASGI fake intake backed by ``storage``.

    ``POST <path>`` captures the request body under ``path``.
    ``GET /fakeintake/payloads?endpoint=<path>&format=raw`` returns what was
    captured under ``path``.

    Args:
        storage: Storage adapter implementing PayloadStoragePort.

    Returns:
        ASGI application callable.
    """

    async def app(scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return

        method = scope["method"]
        path = scope["path"]

        if method == "POST":
            body = await _read_body(receive)
            payload = RawPayload(
                data=body,
                encoding=_get_header(scope, "content-encoding"),
                timestamp=datetime.now(timezone.utc).isoformat(),
            )

            async def capture() -> str:
                await storage.write(path, payload)
                return json.dumps({"status": "ok"})

            await _handle_endpoint(
                send, capture, 202, f"Error capturing payload for {path}"
            )
        elif method == "GET" and path == PAYLOADS_PATH:
            params = _parse_query_params(scope)
            endpoint = _parse_endpoint_param(params)
            payload_format = _parse_format_param(params)
            if endpoint is None or payload_format is None:
                error_body = json.dumps({"error": "invalid endpoint or format"})
                await _send_response(send, 400, "application/json", error_body)
                return

            async def payloads() -> str:
                return _encode_payloads(list(await storage.read(endpoint)))

            await _handle_endpoint(
                send, payloads, 200, f"Error encoding payloads for {endpoint}"
            )
        else:
            await _send_response(send, 404, "text/plain", "Not Found")

    return app
