"""Checks every Intake must pass regardless of the pipeline it came from."""

import logging

from sketchparity.core.errors import CoverageError, EmptyIntakeError
from sketchparity.core.models import Intake

logger = logging.getLogger(__name__)

DEFAULT_EXPECTED_FAMILY = "foo_metric.distribution"


def check_intake(
    intake: Intake,
    expected_family: str = DEFAULT_EXPECTED_FAMILY,
    pipeline: str = "",
) -> None:
    """Fail fast when a single pipeline's Intake is unusable for comparison.

    Args:
        intake: Intake built from one pipeline's payloads.
        expected_family: Metric name prefix that at least one identity must
            carry as evidence the distribution family round-tripped.
        pipeline: Pipeline name used in diagnostics.

    Raises:
        EmptyIntakeError: The Intake holds no identities.
        CoverageError: No identity belongs to ``expected_family``.
    """
    if not intake:
        raise EmptyIntakeError(pipeline)
    logger.info("metric sketch received: %d", len(intake))

    if not any(identity.name.startswith(expected_family) for identity in intake):
        raise CoverageError(expected_family, pipeline)
