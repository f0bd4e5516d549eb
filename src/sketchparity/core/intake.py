"""Normalization of decoded sketch payloads into an Intake.

The Intake keeps what is important to compare and drops what is not
guaranteed to line up between pipelines. Samples are bucketed by the
timestamp the emitter assigned them; once bucketed, the timestamp stored
inside each sample is replaced with a constant so that bucket contents can
be compared by plain equality.
"""

import dataclasses
from collections.abc import Callable, Iterable
from enum import Enum
from types import MappingProxyType
from typing import TypeVar

from sketchparity.core.models import (
    NEUTRAL_TIMESTAMP,
    DigestSample,
    DistributionSample,
    Intake,
    IntakeEntry,
    MetricIdentity,
    SketchPayload,
)

MetricFilter = Callable[[str], bool]

S = TypeVar("S", DigestSample, DistributionSample)


class TimestampPolicy(Enum):
    """How bucket keys are derived from sample timestamps.

    EXACT keeps the emitter's timestamps, so pipelines whose emission is
    skewed by a bucket never line up. RELATIVE rebases each identity's
    buckets onto offsets from its earliest bucket, tolerating a constant
    start-time skew.
    """

    EXACT = "exact"
    RELATIVE = "relative"


def include_all(metric_name: str) -> bool:
    """Accept every metric name."""
    return True


def name_prefix_filter(prefix: str) -> MetricFilter:
    """Build a filter accepting metric names that start with ``prefix``."""

    def _include(metric_name: str) -> bool:
        return metric_name.startswith(prefix)

    return _include


def neutralize(sample: S) -> S:
    """Return a copy of ``sample`` with its timestamp set to the sentinel."""
    return dataclasses.replace(sample, timestamp=NEUTRAL_TIMESTAMP)


def _group(samples: Iterable[S], buckets: dict[int, list[S]]) -> None:
    """Append neutralized samples to the bucket of their original timestamp.

    Args:
        samples: Samples of one collection kind from one entry.
        buckets: Mutable buckets of the entry's identity, updated in place.
    """
    # @tra: Core.Intake.GroupThenNeutralize
    for sample in samples:
        buckets.setdefault(sample.timestamp, []).append(neutralize(sample))


def _freeze(buckets: dict[int, list[S]], offset: int) -> MappingProxyType:
    """Turn mutable buckets into a read-only, timestamp-ordered mapping.

    Args:
        buckets: Buckets keyed by original timestamp.
        offset: Subtracted from every key (0 keeps timestamps as emitted).

    Returns:
        Read-only mapping of bucket key to a tuple of samples.
    """
    # @tra: Core.Intake.ReadOnly
    return MappingProxyType(
        {ts - offset: tuple(samples) for ts, samples in sorted(buckets.items())}
    )


def normalize(
    payloads: Iterable[SketchPayload],
    include: MetricFilter = include_all,
    timestamp_policy: TimestampPolicy = TimestampPolicy.EXACT,
) -> Intake:
    """Massage decoded payload batches into an Intake.

    Args:
        payloads: Decoded payload batches, in capture order.
        include: Predicate on metric name; entries failing it are dropped
            together with all their samples.
        timestamp_policy: How bucket keys are derived from timestamps.

    Returns:
        Intake keyed by metric identity. Entries for the same identity
        arriving in different batches accumulate into one Intake entry.
    """
    digests: dict[MetricIdentity, dict[int, list[DigestSample]]] = {}
    distributions: dict[MetricIdentity, dict[int, list[DistributionSample]]] = {}

    for payload in payloads:
        for entry in payload.sketches:
            # filter out metrics not generated by the emitter under test
            if not include(entry.metric_name):
                continue
            identity = MetricIdentity.of(entry)
            _group(entry.digest_samples, digests.setdefault(identity, {}))
            _group(entry.distribution_samples, distributions.setdefault(identity, {}))

    entries = {}
    for identity, digest_buckets in digests.items():
        distribution_buckets = distributions[identity]
        offset = 0
        # @tra: Core.Intake.TimestampPolicy.Relative
        if timestamp_policy is TimestampPolicy.RELATIVE:
            offset = min([*digest_buckets, *distribution_buckets], default=0)
        entries[identity] = IntakeEntry(
            digests=_freeze(digest_buckets, offset),
            distributions=_freeze(distribution_buckets, offset),
        )
    return Intake(entries)
