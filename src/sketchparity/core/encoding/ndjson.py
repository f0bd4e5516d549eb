"""NDJSON encoder for Intake diagnostics."""

import dataclasses
import json
from collections.abc import Mapping

from sketchparity.core.models import Intake, MetricIdentity, Sample


def _bucket_lines(
    identity: MetricIdentity,
    kind: str,
    buckets: Mapping[int, tuple[Sample, ...]],
) -> list[str]:
    """Encode the buckets of one collection kind as JSON lines.

    Args:
        identity: Identity the buckets belong to.
        kind: Collection kind, ``digest`` or ``distribution``.
        buckets: Buckets keyed by timestamp.

    Returns:
        One JSON string per bucket, in bucket order.
    """
    # @tra: Encoding.NDJSON.Intake.BucketLine
    lines = []
    for timestamp, samples in buckets.items():
        obj = {
            "metric": identity.name,
            "tags": list(identity.tags),
            "kind": kind,
            "timestamp": timestamp,
            "samples": [dataclasses.asdict(s) for s in samples],
        }
        lines.append(json.dumps(obj))
    return lines


def encode_intake(intake: Intake) -> str:
    """Encode an Intake to newline-delimited JSON.

    Args:
        intake: The Intake to encode.

    Returns:
        NDJSON string with one JSON object per (identity, kind, timestamp)
        bucket, in identity order with digest buckets first.
        Empty string if the Intake has no buckets.
    """
    lines = []
    for identity, entry in intake.items():
        lines.extend(_bucket_lines(identity, "digest", entry.digests))
        lines.extend(_bucket_lines(identity, "distribution", entry.distributions))

    if not lines:
        return ""

    return "\n".join(lines) + "\n"
