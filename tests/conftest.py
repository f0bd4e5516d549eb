"""Shared test fixtures for all test modules."""

from collections.abc import AsyncGenerator

import httpx
import pytest

from sketchparity.adapters.fakeintake import FakeIntakeClient
from sketchparity.adapters.frameworks.asgi import create_fake_intake_app
from sketchparity.adapters.storage.in_memory import InMemoryPayloadStorage

FAKE_INTAKE_URL = "http://fakeintake"


@pytest.fixture
def payload_storage() -> InMemoryPayloadStorage:
    """Fixture providing an empty payload storage."""
    return InMemoryPayloadStorage()


@pytest.fixture
def intake_app(payload_storage: InMemoryPayloadStorage):
    """Fake intake ASGI app backed by ``payload_storage``."""
    return create_fake_intake_app(payload_storage)


@pytest.fixture
async def intake_http_client(
    intake_app,
) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Raw httpx client talking to the fake intake app in-process.

    Used to post payloads the way a pipeline would.
    """
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=intake_app), base_url=FAKE_INTAKE_URL
    ) as client:
        yield client


@pytest.fixture
async def fake_intake_client(
    intake_app,
) -> AsyncGenerator[FakeIntakeClient, None]:
    """FakeIntakeClient talking to the fake intake app in-process."""
    async with FakeIntakeClient(
        FAKE_INTAKE_URL, transport=httpx.ASGITransport(app=intake_app)
    ) as client:
        yield client


@pytest.fixture
def asgi_send_capture():
    """Fixture that returns a send callable and a responses list for capture.

    Returns a tuple of (send_func, responses_list) for recording ASGI messages.
    """

    responses: list[dict[str, object]] = []

    async def send(message: dict[str, object]) -> None:
        """Capture ASGI messages."""
        responses.append(message)

    return send, responses
