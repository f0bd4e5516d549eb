"""In-memory storage adapter for captured payloads."""

from sketchparity.core.models import RawPayload


class InMemoryPayloadStorage:
    """In-memory implementation of PayloadStoragePort.

    Stores payloads in one list per endpoint. Suitable for testing and
    local runs where persistence is not required.
    """

    def __init__(self) -> None:
        self._payloads: dict[str, list[RawPayload]] = {}

    async def write(self, endpoint: str, payload: RawPayload) -> None:
        """Store a payload captured on ``endpoint``."""
        self._payloads.setdefault(endpoint, []).append(payload)

    async def read(self, endpoint: str) -> list[RawPayload]:
        """Return payloads captured on ``endpoint`` in capture order."""
        return list(self._payloads.get(endpoint, []))
