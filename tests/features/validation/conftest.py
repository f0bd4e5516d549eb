"""BDD step definitions for cross-pipeline sketch validation."""

import asyncio
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from pytest_bdd import given, parsers, then, when

from sketchparity.adapters.fakeintake import FakeIntakeClient
from sketchparity.adapters.frameworks.asgi import create_fake_intake_app
from sketchparity.adapters.storage.in_memory import InMemoryPayloadStorage
from sketchparity.config import HarnessConfig
from sketchparity.core.compare import compare_intakes
from sketchparity.core.encoding.sketch_proto import pack_payload
from sketchparity.core.errors import (
    EmptyIntakeError,
    MissingIdentityError,
    SketchMismatchError,
    SketchValidationError,
)
from sketchparity.core.models import Intake, MetricIdentity
from sketchparity.validate import SKETCHES_ENDPOINT, get_sketches_from_pipeline
from tests.builders import digest, entry, payload

BASE_URL = "http://fakeintake"
DIGEST_STEP = (
    'delivers a digest for "{name}" tagged "{tag}" at {timestamp:d} '
    'with keys "{keys}"'
)


def run_async(coro: Any) -> Any:
    """Run a coroutine to completion from a synchronous step."""
    return asyncio.run(coro)


@dataclass
class PipelineUnderTest:
    """A fake intake standing in for one delivery path."""

    name: str
    storage: InMemoryPayloadStorage = field(default_factory=InMemoryPayloadStorage)

    @property
    def transport(self) -> httpx.ASGITransport:
        return httpx.ASGITransport(app=create_fake_intake_app(self.storage))

    async def deliver_digest(
        self, name: str, tag: str, timestamp: int, keys: tuple[int, ...]
    ) -> None:
        sample = digest(timestamp, keys=keys, bin_counts=tuple(1 for _ in keys))
        raw = pack_payload(payload(entry(name, (tag,), digests=(sample,))))
        async with httpx.AsyncClient(
            transport=self.transport, base_url=BASE_URL
        ) as client:
            response = await client.post(
                SKETCHES_ENDPOINT,
                content=raw.data,
                headers={"Content-Encoding": raw.encoding},
            )
            response.raise_for_status()

    async def intake(self, config: HarnessConfig) -> Intake:
        async with FakeIntakeClient(BASE_URL, transport=self.transport) as source:
            return await get_sketches_from_pipeline(source, self.name, config)


@dataclass
class ValidationScenarioContext:
    """Shared state between steps in a validation scenario."""

    agent: PipelineUnderTest = field(
        default_factory=lambda: PipelineUnderTest("agent")
    )
    vector: PipelineUnderTest = field(
        default_factory=lambda: PipelineUnderTest("vector")
    )
    config: HarnessConfig = field(default_factory=HarnessConfig)
    intakes: dict[str, Intake] = field(default_factory=dict)
    error: SketchValidationError | None = None


def _keys(raw: str) -> tuple[int, ...]:
    return tuple(int(k) for k in raw.split(","))


async def _validate(ctx: ValidationScenarioContext) -> None:
    ctx.intakes["agent"] = await ctx.agent.intake(ctx.config)
    ctx.intakes["vector"] = await ctx.vector.intake(ctx.config)
    compare_intakes(ctx.intakes["agent"], ctx.intakes["vector"])


@pytest.fixture
def ctx() -> ValidationScenarioContext:
    """Fresh scenario context for each test."""
    return ValidationScenarioContext()


# === Background Steps ===
@given("an agent-only pipeline")
def step_agent_pipeline(ctx: ValidationScenarioContext) -> None:
    ctx.agent = PipelineUnderTest("agent")


@given("an agent-plus-relay pipeline")
def step_relay_pipeline(ctx: ValidationScenarioContext) -> None:
    ctx.vector = PipelineUnderTest("vector")


# === Delivery Steps ===
@given(parsers.parse(f"both pipelines {DIGEST_STEP.replace('delivers', 'deliver')}"))
def step_both_deliver(
    ctx: ValidationScenarioContext, name: str, tag: str, timestamp: int, keys: str
) -> None:
    for pipeline in (ctx.agent, ctx.vector):
        run_async(pipeline.deliver_digest(name, tag, timestamp, _keys(keys)))


@given(parsers.parse(f"the agent pipeline {DIGEST_STEP}"))
def step_agent_delivers(
    ctx: ValidationScenarioContext, name: str, tag: str, timestamp: int, keys: str
) -> None:
    run_async(ctx.agent.deliver_digest(name, tag, timestamp, _keys(keys)))


@given(parsers.parse(f"the relay pipeline {DIGEST_STEP}"))
def step_relay_delivers(
    ctx: ValidationScenarioContext, name: str, tag: str, timestamp: int, keys: str
) -> None:
    run_async(ctx.vector.deliver_digest(name, tag, timestamp, _keys(keys)))


# === Validation Steps ===
@when("the pipelines are validated")
def step_validate(ctx: ValidationScenarioContext) -> None:
    try:
        run_async(_validate(ctx))
    except SketchValidationError as e:
        ctx.error = e


@then("validation passes")
def step_passes(ctx: ValidationScenarioContext) -> None:
    assert ctx.error is None


@then(
    parsers.parse(
        'the agent intake holds {count:d} sample for "{name}" tagged "{tag}" '
        "at {timestamp:d}"
    )
)
def step_intake_holds(
    ctx: ValidationScenarioContext, count: int, name: str, tag: str, timestamp: int
) -> None:
    buckets = ctx.intakes["agent"][MetricIdentity(name, (tag,))].digests
    assert len(buckets[timestamp]) == count
    assert all(sample.timestamp == 0 for sample in buckets[timestamp])


@then(parsers.parse('validation fails with a digest mismatch for "{identity}"'))
def step_digest_mismatch(ctx: ValidationScenarioContext, identity: str) -> None:
    assert isinstance(ctx.error, SketchMismatchError)
    assert str(ctx.error.identity) == identity
    assert ctx.error.kind == "digest"


@then(parsers.parse('validation fails naming "{identity}" as missing'))
def step_missing_identity(ctx: ValidationScenarioContext, identity: str) -> None:
    assert isinstance(ctx.error, MissingIdentityError)
    assert identity in [str(i) for i in ctx.error.missing_from_right]


@then("validation fails because no sketches were received")
def step_nothing_received(ctx: ValidationScenarioContext) -> None:
    assert isinstance(ctx.error, EmptyIntakeError)
