"""Exceptions raised by the sketch validation harness."""

from collections.abc import Iterable

from sketchparity.core.models import MetricIdentity


class SketchValidationError(AssertionError):
    """Base class for terminal validation failures."""


class EmptyIntakeError(SketchValidationError):
    """A pipeline produced no matching sketches at all."""

    def __init__(self, pipeline: str = "") -> None:
        self.pipeline = pipeline
        source = f" from {pipeline} pipeline" if pipeline else ""
        super().__init__(f"No metric sketches received{source}")


class CoverageError(SketchValidationError):
    """The expected metric family was not observed."""

    def __init__(self, expected_family: str, pipeline: str = "") -> None:
        self.expected_family = expected_family
        self.pipeline = pipeline
        source = f" from {pipeline} pipeline" if pipeline else ""
        super().__init__(
            f"Didn't receive metric type {expected_family!r}{source}"
        )


class MissingIdentityError(SketchValidationError):
    """The two Intakes do not hold the same set of metric identities."""

    def __init__(
        self,
        missing_from_left: Iterable[MetricIdentity],
        missing_from_right: Iterable[MetricIdentity],
        left_name: str = "left",
        right_name: str = "right",
    ) -> None:
        self.missing_from_left = tuple(sorted(missing_from_left))
        self.missing_from_right = tuple(sorted(missing_from_right))
        parts = []
        if self.missing_from_left:
            names = ", ".join(str(i) for i in self.missing_from_left)
            parts.append(f"missing from {left_name}: {names}")
        if self.missing_from_right:
            names = ", ".join(str(i) for i in self.missing_from_right)
            parts.append(f"missing from {right_name}: {names}")
        super().__init__("Mismatch of sketch context; " + "; ".join(parts))


class SketchMismatchError(SketchValidationError):
    """Sample data diverged for an identity present in both Intakes."""

    def __init__(
        self,
        identity: MetricIdentity,
        kind: str,
        timestamp: int,
        detail: str,
    ) -> None:
        self.identity = identity
        self.kind = kind
        self.timestamp = timestamp
        self.detail = detail
        super().__init__(
            f"Mismatch of sketch data for {identity} in {kind} collection "
            f"at timestamp {timestamp}: {detail}"
        )


class PayloadDecodeError(ValueError):
    """A captured payload could not be decompressed or decoded."""


class ConfigError(ValueError):
    """Harness configuration is invalid."""
