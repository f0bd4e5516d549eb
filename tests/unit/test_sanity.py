"""Tests for per-pipeline Intake sanity checks."""

import logging

import pytest

from sketchparity.core.errors import (
    CoverageError,
    EmptyIntakeError,
    SketchValidationError,
)
from sketchparity.core.intake import name_prefix_filter, normalize
from sketchparity.core.models import Intake
from sketchparity.core.sanity import check_intake
from tests.builders import digest, entry, payload

pytestmark = [pytest.mark.core, pytest.mark.tier(0)]


class TestCheckIntake:
    """Tests for check_intake()."""

    def test_passes_with_distribution_family(self) -> None:
        """An Intake holding the expected family passes."""
        intake = normalize([payload(entry(digests=(digest(),)))])

        check_intake(intake)

    def test_empty_intake_fails(self) -> None:
        """An Intake with no identities is a fatal failure."""
        with pytest.raises(EmptyIntakeError, match="No metric sketches received"):
            check_intake(Intake())

    def test_empty_intake_names_pipeline(self) -> None:
        """The diagnostic names the pipeline when given."""
        with pytest.raises(EmptyIntakeError, match="from vector pipeline"):
            check_intake(Intake(), pipeline="vector")

    def test_zero_qualifying_entries_fail(self) -> None:
        """Filtering everything out leaves an Intake that fails the check."""
        intake = normalize(
            [payload(entry("datadog.agent.running", digests=(digest(),)))],
            include=name_prefix_filter("foo_metric"),
        )

        with pytest.raises(EmptyIntakeError):
            check_intake(intake)

    def test_missing_family_fails(self) -> None:
        """Without any distribution-family identity the check fails."""
        intake = normalize([payload(entry("foo_metric.count", digests=(digest(),)))])

        with pytest.raises(CoverageError, match="foo_metric.distribution"):
            check_intake(intake)

    def test_custom_family(self) -> None:
        """The expected family is configurable."""
        intake = normalize([payload(entry("foo_metric.count", digests=(digest(),)))])

        check_intake(intake, expected_family="foo_metric.count")

    def test_failures_are_assertion_errors(self) -> None:
        """Sanity failures surface as assertion failures."""
        assert issubclass(EmptyIntakeError, SketchValidationError)
        assert issubclass(CoverageError, AssertionError)

    def test_check_does_not_mutate(self) -> None:
        """A passing check leaves the Intake unchanged."""
        intake = normalize([payload(entry(digests=(digest(),)))])
        before = dict(intake.items())

        check_intake(intake)

        assert dict(intake.items()) == before

    def test_logs_identity_count(self, caplog: pytest.LogCaptureFixture) -> None:
        """The number of received identities is logged."""
        intake = normalize([payload(entry(digests=(digest(),)))])

        with caplog.at_level(logging.INFO, logger="sketchparity.core.sanity"):
            check_intake(intake)

        assert "metric sketch received: 1" in caplog.text
