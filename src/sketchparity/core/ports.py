"""Port interfaces for payload sources and capture storage.

These protocols define the contracts that adapters must implement.
The core depends only on these interfaces, not concrete implementations.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from sketchparity.core.models import RawPayload


@runtime_checkable
class PayloadSourcePort(Protocol):
    """Port for retrieving the payloads a pipeline delivered.

    Examples: FakeIntakeClient.
    """

    async def get_payloads(self, endpoint: str) -> list[RawPayload]:
        """Return every payload captured for an intake endpoint.

        Args:
            endpoint: Intake path the pipeline posts to (e.g. /api/beta/sketches).

        Returns:
            Captured payloads in capture order.
        """
        ...


@runtime_checkable
class PayloadStoragePort(Protocol):
    """Port for storing captured payloads per intake endpoint.

    Examples: InMemoryPayloadStorage.
    """

    async def write(self, endpoint: str, payload: RawPayload) -> None:
        """Store a payload captured on ``endpoint``."""
        ...

    async def read(self, endpoint: str) -> Sequence[RawPayload]:
        """Return payloads captured on ``endpoint`` in capture order."""
        ...
