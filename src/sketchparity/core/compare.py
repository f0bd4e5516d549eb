"""Cross-pipeline comparison of two Intakes."""

from collections.abc import Mapping

from sketchparity.core.errors import MissingIdentityError, SketchMismatchError
from sketchparity.core.models import Intake, MetricIdentity, Sample

DIGEST = "digest"
DISTRIBUTION = "distribution"


def _describe(samples: tuple[Sample, ...] | None) -> str:
    """Render one side of a bucket for a mismatch report.

    Args:
        samples: Bucket contents, or None when the side has no such bucket.

    Returns:
        Human-readable summary of the bucket.
    """
    if samples is None:
        return "no bucket"
    return f"{len(samples)} sample(s) {list(samples)!r}"


def _compare_buckets(
    identity: MetricIdentity,
    kind: str,
    left: Mapping[int, tuple[Sample, ...]],
    right: Mapping[int, tuple[Sample, ...]],
    left_name: str,
    right_name: str,
) -> None:
    """Compare one collection kind of an identity bucket by bucket.

    Args:
        identity: Identity the buckets belong to.
        kind: Collection kind, ``digest`` or ``distribution``.
        left: Buckets from the first pipeline, keyed by timestamp.
        right: Buckets from the second pipeline, keyed by timestamp.
        left_name: Name of the first pipeline in diagnostics.
        right_name: Name of the second pipeline in diagnostics.

    Raises:
        SketchMismatchError: At the earliest timestamp whose buckets differ,
            including a timestamp present on only one side.
    """
    # @tra: Core.Compare.Buckets.FirstDivergence
    for timestamp in sorted(left.keys() | right.keys()):
        left_samples = left.get(timestamp)
        right_samples = right.get(timestamp)
        if left_samples != right_samples:
            raise SketchMismatchError(
                identity,
                kind,
                timestamp,
                f"{left_name} has {_describe(left_samples)}, "
                f"{right_name} has {_describe(right_samples)}",
            )


def compare_intakes(
    left: Intake,
    right: Intake,
    left_name: str = "agent",
    right_name: str = "vector",
) -> None:
    """Assert that two Intakes carry exactly the same sketch data.

    Identity sets are compared first, so a missing series is reported as
    such rather than as a data mismatch. Identities are then visited in
    their total order and looked up by key in both Intakes; digest buckets
    are compared before distribution buckets, and buckets in ascending
    timestamp order.

    Args:
        left: Intake of the first pipeline.
        right: Intake of the second pipeline.
        left_name: Name of the first pipeline in diagnostics.
        right_name: Name of the second pipeline in diagnostics.

    Raises:
        MissingIdentityError: An identity exists on only one side.
        SketchMismatchError: The first diverging bucket, naming the
            identity, the collection kind and the timestamp.
    """
    # @tra: Core.Compare.Identities.SymmetricDifference
    missing_from_right = left.keys() - right.keys()
    missing_from_left = right.keys() - left.keys()
    if missing_from_left or missing_from_right:
        raise MissingIdentityError(
            missing_from_left, missing_from_right, left_name, right_name
        )

    for identity in left:
        left_entry = left[identity]
        right_entry = right[identity]
        _compare_buckets(
            identity,
            DIGEST,
            left_entry.digests,
            right_entry.digests,
            left_name,
            right_name,
        )
        _compare_buckets(
            identity,
            DISTRIBUTION,
            left_entry.distributions,
            right_entry.distributions,
            left_name,
            right_name,
        )
