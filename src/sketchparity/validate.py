"""Validation run comparing the agent-only and agent-plus-relay pipelines."""

import logging

from sketchparity.adapters.fakeintake import FakeIntakeClient
from sketchparity.config import HarnessConfig
from sketchparity.core.compare import compare_intakes
from sketchparity.core.encoding.ndjson import encode_intake
from sketchparity.core.encoding.sketch_proto import unpack_payloads
from sketchparity.core.intake import name_prefix_filter, normalize
from sketchparity.core.models import Intake
from sketchparity.core.ports import PayloadSourcePort
from sketchparity.core.sanity import check_intake

logger = logging.getLogger(__name__)

SKETCHES_ENDPOINT = "/api/beta/sketches"


async def get_sketches_from_pipeline(
    source: PayloadSourcePort,
    pipeline: str,
    config: HarnessConfig,
) -> Intake:
    """Fetch, decode, normalize and sanity-check one pipeline's sketches.

    Args:
        source: Where the pipeline's captured payloads are read from.
        pipeline: Pipeline name used in logs and diagnostics.
        config: Harness configuration.

    Returns:
        The pipeline's Intake, already sanity-checked.
    """
    logger.info("getting sketch payloads from %s pipeline", pipeline)
    raw_payloads = await source.get_payloads(SKETCHES_ENDPOINT)

    logger.info("unpacking %d payload(s)", len(raw_payloads))
    payloads = unpack_payloads(raw_payloads)

    logger.info("generating sketch intake")
    intake = normalize(
        payloads,
        include=name_prefix_filter(config.metric_prefix),
        timestamp_policy=config.timestamp_policy,
    )

    check_intake(intake, config.expected_family, pipeline)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("%s sketch intake:\n%s", pipeline, encode_intake(intake))
    return intake


async def validate(
    config: HarnessConfig | None = None,
    agent_source: PayloadSourcePort | None = None,
    vector_source: PayloadSourcePort | None = None,
) -> None:
    """Assert both pipelines delivered the same sketches.

    Pipelines are fetched one after the other. Sources default to
    FakeIntakeClient instances pointed at the configured addresses.

    Args:
        config: Harness configuration (default: read from the environment).
        agent_source: Payload source for the agent-only pipeline.
        vector_source: Payload source for the agent-plus-relay pipeline.

    Raises:
        SketchValidationError: A sanity check or the comparison failed.
    """
    config = config or HarnessConfig.from_env()

    logger.info("==== getting sketch data from agent-only pipeline ====")
    if agent_source is None:
        async with FakeIntakeClient(config.agent_address, config.timeout) as client:
            agent_sketches = await get_sketches_from_pipeline(client, "agent", config)
    else:
        agent_sketches = await get_sketches_from_pipeline(agent_source, "agent", config)

    logger.info("==== getting sketch data from agent-vector pipeline ====")
    if vector_source is None:
        async with FakeIntakeClient(config.vector_address, config.timeout) as client:
            vector_sketches = await get_sketches_from_pipeline(client, "vector", config)
    else:
        vector_sketches = await get_sketches_from_pipeline(
            vector_source, "vector", config
        )

    compare_intakes(agent_sketches, vector_sketches, "agent", "vector")
    logger.info("sketch intakes match across %d identities", len(agent_sketches))
