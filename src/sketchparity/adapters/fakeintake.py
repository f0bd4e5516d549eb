"""HTTP client for fake intake capture endpoints."""

import base64
import binascii
import logging
from types import TracebackType
from typing import Any

import httpx

from sketchparity.core.errors import PayloadDecodeError
from sketchparity.core.models import RawPayload

logger = logging.getLogger(__name__)

PAYLOADS_PATH = "/fakeintake/payloads"


def _parse_raw_payloads(body: Any) -> list[RawPayload]:
    """Parse the fake intake's raw-format JSON envelope.

    Args:
        body: Decoded JSON body, expected as ``{"payloads": [...]}``.

    Returns:
        Captured payloads with base64 bodies decoded to bytes.

    Raises:
        PayloadDecodeError: The envelope is malformed.
    """
    if not isinstance(body, dict) or not isinstance(body.get("payloads"), list):
        raise PayloadDecodeError("Fake intake response has no 'payloads' list")

    payloads = []
    for item in body["payloads"]:
        # @tra: Adapter.FakeIntake.Envelope.MalformedItem
        if not isinstance(item, dict):
            raise PayloadDecodeError(f"Payload item is not an object: {item!r}")
        try:
            data = base64.b64decode(item["data"], validate=True)
        except (KeyError, TypeError, binascii.Error) as e:
            raise PayloadDecodeError(f"Invalid payload data: {e}") from e
        encoding = item.get("encoding")
        encoding = "" if encoding is None else encoding
        timestamp = item.get("timestamp")
        timestamp = "" if timestamp is None else timestamp
        if not isinstance(encoding, str) or not isinstance(timestamp, str):
            raise PayloadDecodeError(
                f"Payload encoding and timestamp must be strings, got "
                f"{encoding!r} and {timestamp!r}"
            )
        payloads.append(RawPayload(data=data, encoding=encoding, timestamp=timestamp))
    return payloads


class FakeIntakeClient:
    """Fetches payloads captured by a fake intake.

    Implements PayloadSourcePort.

    Example:
        ```python
        async with FakeIntakeClient("http://127.0.0.1:8083") as client:
            payloads = await client.get_payloads("/api/beta/sketches")
        ```
    """

    def __init__(
        self,
        address: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            address: Base URL of the fake intake.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (e.g. ASGITransport in tests).
        """
        self.address = address
        self._client = httpx.AsyncClient(
            base_url=address, timeout=timeout, transport=transport
        )

    async def __aenter__(self) -> "FakeIntakeClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def get_payloads(self, endpoint: str) -> list[RawPayload]:
        """Return every payload the intake captured on ``endpoint``.

        Raises:
            httpx.HTTPStatusError: The intake answered with an error status.
            PayloadDecodeError: The response body is not a valid envelope.
        """
        response = await self._client.get(
            PAYLOADS_PATH, params={"endpoint": endpoint, "format": "raw"}
        )
        response.raise_for_status()
        try:
            body = response.json()
        except ValueError as e:
            raise PayloadDecodeError(f"Fake intake response is not JSON: {e}") from e
        payloads = _parse_raw_payloads(body)
        logger.debug(
            "fetched %d payload(s) for %s from %s",
            len(payloads),
            endpoint,
            self.address,
        )
        return payloads
