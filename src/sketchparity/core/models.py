"""Core domain models for captured sketch data."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

# Value stored in a sample's timestamp once the sample has been bucketed.
NEUTRAL_TIMESTAMP = 0


@dataclass(frozen=True)
class DigestSample:
    """One timestamped occurrence of a compact sketch digest.

    Attributes:
        timestamp: Bucket timestamp assigned by the upstream emitter.
        count: Number of observed values.
        min: Smallest observed value.
        max: Largest observed value.
        avg: Mean of observed values.
        sum: Sum of observed values.
        keys: Bin indexes of the digest.
        bin_counts: Per-bin counts, aligned with ``keys``.
    """

    timestamp: int
    count: int = 0
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    sum: float = 0.0
    keys: tuple[int, ...] = ()
    bin_counts: tuple[int, ...] = ()


@dataclass(frozen=True)
class DistributionSample:
    """One timestamped occurrence of a raw distribution.

    Attributes:
        timestamp: Bucket timestamp assigned by the upstream emitter.
        count: Number of observed values.
        min: Smallest observed value.
        max: Largest observed value.
        avg: Mean of observed values.
        sum: Sum of observed values.
        values: Summary values.
        g: Rank gaps, aligned with ``values``.
        delta: Rank uncertainties, aligned with ``values``.
        buffer: Values not yet merged into the summary.
    """

    timestamp: int
    count: int = 0
    min: float = 0.0
    max: float = 0.0
    avg: float = 0.0
    sum: float = 0.0
    values: tuple[float, ...] = ()
    g: tuple[int, ...] = ()
    delta: tuple[int, ...] = ()
    buffer: tuple[float, ...] = ()


Sample = DigestSample | DistributionSample


@dataclass(frozen=True)
class SketchEntry:
    """A sketch for one metric series as carried in a payload batch."""

    metric_name: str
    tags: tuple[str, ...] = ()
    host: str = ""
    digest_samples: tuple[DigestSample, ...] = ()
    distribution_samples: tuple[DistributionSample, ...] = ()


@dataclass(frozen=True)
class SketchPayload:
    """A decoded payload batch holding zero or more sketch entries."""

    sketches: tuple[SketchEntry, ...] = ()


@dataclass(frozen=True)
class RawPayload:
    """A payload body as captured by a fake intake.

    Attributes:
        data: Body bytes, still compressed.
        encoding: Content encoding of ``data`` (e.g. ``deflate``).
        timestamp: Capture time reported by the intake.
    """

    data: bytes
    encoding: str = ""
    timestamp: str = ""


@dataclass(frozen=True, order=True)
class MetricIdentity:
    """Unique identification of a sketch series.

    Tags are compared as an ordered sequence: the same tags in a different
    order make a different identity.
    """

    name: str
    tags: tuple[str, ...] = ()

    @classmethod
    def of(cls, entry: SketchEntry) -> "MetricIdentity":
        """Extract the identity of a sketch entry without normalizing tags."""
        return cls(name=entry.metric_name, tags=tuple(entry.tags))

    def __str__(self) -> str:
        return f"{self.name}|{','.join(self.tags)}"


@dataclass(frozen=True)
class IntakeEntry:
    """Digest and distribution buckets for one metric identity.

    Both mappings are keyed by the original sample timestamp, iterate in
    ascending timestamp order and hold samples whose own timestamp has been
    neutralized.
    """

    digests: Mapping[int, tuple[DigestSample, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    distributions: Mapping[int, tuple[DistributionSample, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )


class Intake(Mapping[MetricIdentity, IntakeEntry]):
    """Normalized, read-only view of one pipeline's sketches.

    Identities iterate in their total order, never in arrival order.
    """

    def __init__(
        self, entries: Mapping[MetricIdentity, IntakeEntry] | None = None
    ) -> None:
        ordered = dict(sorted((entries or {}).items()))
        self._entries: Mapping[MetricIdentity, IntakeEntry] = MappingProxyType(ordered)

    def __getitem__(self, identity: MetricIdentity) -> IntakeEntry:
        return self._entries[identity]

    def __iter__(self) -> Iterator[MetricIdentity]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"Intake({dict(self._entries)!r})"
