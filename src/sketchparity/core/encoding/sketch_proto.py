"""Protobuf codec for agent sketch payloads.

Message classes are built at import time from a descriptor describing the
subset of ``datadog.agentpayload.SketchPayload`` the harness reads. Fields
outside that subset are skipped by the parser.
"""

import gzip
import zlib
from collections.abc import Iterable

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError

from sketchparity.core.errors import PayloadDecodeError
from sketchparity.core.models import (
    DigestSample,
    DistributionSample,
    RawPayload,
    SketchEntry,
    SketchPayload,
)

_PACKAGE = "datadog.agentpayload"
_SKETCH = f".{_PACKAGE}.SketchPayload.Sketch"
_F = descriptor_pb2.FieldDescriptorProto


def _add_field(
    message: descriptor_pb2.DescriptorProto,
    name: str,
    number: int,
    field_type: int,
    repeated: bool = False,
    type_name: str = "",
) -> None:
    field = message.field.add(name=name, number=number, type=field_type)
    field.label = _F.LABEL_REPEATED if repeated else _F.LABEL_OPTIONAL
    if type_name:
        field.type_name = type_name


def _add_summary_fields(message: descriptor_pb2.DescriptorProto) -> None:
    _add_field(message, "ts", 1, _F.TYPE_INT64)
    _add_field(message, "cnt", 2, _F.TYPE_INT64)
    for number, name in enumerate(("min", "max", "avg", "sum"), start=3):
        _add_field(message, name, number, _F.TYPE_DOUBLE)


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    file_proto = descriptor_pb2.FileDescriptorProto(
        name="sketchparity/agent_payload.proto",
        package=_PACKAGE,
        syntax="proto3",
    )
    payload = file_proto.message_type.add(name="SketchPayload")
    sketch = payload.nested_type.add(name="Sketch")

    distribution = sketch.nested_type.add(name="Distribution")
    _add_summary_fields(distribution)
    _add_field(distribution, "v", 7, _F.TYPE_DOUBLE, repeated=True)
    _add_field(distribution, "g", 8, _F.TYPE_UINT32, repeated=True)
    _add_field(distribution, "delta", 9, _F.TYPE_UINT32, repeated=True)
    _add_field(distribution, "buf", 10, _F.TYPE_DOUBLE, repeated=True)

    dogsketch = sketch.nested_type.add(name="Dogsketch")
    _add_summary_fields(dogsketch)
    _add_field(dogsketch, "k", 7, _F.TYPE_SINT32, repeated=True)
    _add_field(dogsketch, "n", 8, _F.TYPE_UINT32, repeated=True)

    _add_field(sketch, "metric", 1, _F.TYPE_STRING)
    _add_field(sketch, "host", 2, _F.TYPE_STRING)
    _add_field(
        sketch,
        "distributions",
        3,
        _F.TYPE_MESSAGE,
        repeated=True,
        type_name=f"{_SKETCH}.Distribution",
    )
    _add_field(sketch, "tags", 4, _F.TYPE_STRING, repeated=True)
    _add_field(
        sketch,
        "dogsketches",
        7,
        _F.TYPE_MESSAGE,
        repeated=True,
        type_name=f"{_SKETCH}.Dogsketch",
    )

    _add_field(
        payload, "sketches", 1, _F.TYPE_MESSAGE, repeated=True, type_name=_SKETCH
    )
    return file_proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())
SketchPayloadMessage = message_factory.GetMessageClass(
    _pool.FindMessageTypeByName(f"{_PACKAGE}.SketchPayload")
)


def _entry_from_message(sketch) -> SketchEntry:
    return SketchEntry(
        metric_name=sketch.metric,
        tags=tuple(sketch.tags),
        host=sketch.host,
        digest_samples=tuple(
            DigestSample(
                timestamp=ds.ts,
                count=ds.cnt,
                min=ds.min,
                max=ds.max,
                avg=ds.avg,
                sum=ds.sum,
                keys=tuple(ds.k),
                bin_counts=tuple(ds.n),
            )
            for ds in sketch.dogsketches
        ),
        distribution_samples=tuple(
            DistributionSample(
                timestamp=dt.ts,
                count=dt.cnt,
                min=dt.min,
                max=dt.max,
                avg=dt.avg,
                sum=dt.sum,
                values=tuple(dt.v),
                g=tuple(dt.g),
                delta=tuple(dt.delta),
                buffer=tuple(dt.buf),
            )
            for dt in sketch.distributions
        ),
    )


def decode_sketch_payload(data: bytes) -> SketchPayload:
    """Decode an uncompressed protobuf SketchPayload.

    Raises:
        PayloadDecodeError: ``data`` is not a valid SketchPayload message.
    """
    message = SketchPayloadMessage()
    try:
        message.ParseFromString(data)
    except DecodeError as e:
        raise PayloadDecodeError(f"Invalid sketch payload: {e}") from e
    return SketchPayload(
        sketches=tuple(_entry_from_message(s) for s in message.sketches)
    )


def encode_sketch_payload(payload: SketchPayload) -> bytes:
    """Encode a SketchPayload to uncompressed protobuf bytes."""
    message = SketchPayloadMessage()
    for entry in payload.sketches:
        sketch = message.sketches.add(
            metric=entry.metric_name, host=entry.host, tags=list(entry.tags)
        )
        for ds in entry.digest_samples:
            sketch.dogsketches.add(
                ts=ds.timestamp,
                cnt=ds.count,
                min=ds.min,
                max=ds.max,
                avg=ds.avg,
                sum=ds.sum,
                k=list(ds.keys),
                n=list(ds.bin_counts),
            )
        for dt in entry.distribution_samples:
            sketch.distributions.add(
                ts=dt.timestamp,
                cnt=dt.count,
                min=dt.min,
                max=dt.max,
                avg=dt.avg,
                sum=dt.sum,
                v=list(dt.values),
                g=list(dt.g),
                delta=list(dt.delta),
                buf=list(dt.buffer),
            )
    return message.SerializeToString()


def _decompress(raw: RawPayload) -> bytes:
    encoding = raw.encoding.lower()
    if encoding in ("", "identity"):
        return raw.data
    try:
        if encoding == "deflate":
            return zlib.decompress(raw.data)
        if encoding == "gzip":
            return gzip.decompress(raw.data)
    except (zlib.error, OSError, EOFError) as e:
        raise PayloadDecodeError(f"Corrupt {encoding} payload: {e}") from e
    raise PayloadDecodeError(f"Unsupported payload encoding: {raw.encoding!r}")


def unpack_payload(raw: RawPayload) -> SketchPayload:
    """Decompress and decode one captured payload.

    Args:
        raw: Payload as captured by a fake intake.

    Returns:
        The decoded payload batch.

    Raises:
        PayloadDecodeError: Unknown encoding, corrupt compression or
            corrupt protobuf.
    """
    return decode_sketch_payload(_decompress(raw))


def unpack_payloads(raws: Iterable[RawPayload]) -> list[SketchPayload]:
    """Decode captured payloads, preserving capture order."""
    return [unpack_payload(raw) for raw in raws]


def pack_payload(payload: SketchPayload, encoding: str = "deflate") -> RawPayload:
    """Encode and compress a payload the way an agent submits it.

    Args:
        payload: Payload batch to encode.
        encoding: ``deflate``, ``gzip`` or ``identity``.

    Returns:
        RawPayload ready to be posted to an intake.
    """
    data = encode_sketch_payload(payload)
    if encoding == "deflate":
        data = zlib.compress(data)
    elif encoding == "gzip":
        data = gzip.compress(data)
    elif encoding not in ("", "identity"):
        raise PayloadDecodeError(f"Unsupported payload encoding: {encoding!r}")
    return RawPayload(data=data, encoding=encoding)
