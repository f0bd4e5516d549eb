"""sketchparity - differential validation of metric sketches across pipelines."""

from sketchparity.adapters.fakeintake import FakeIntakeClient
from sketchparity.adapters.frameworks.asgi import create_fake_intake_app
from sketchparity.adapters.storage.in_memory import InMemoryPayloadStorage
from sketchparity.config import HarnessConfig
from sketchparity.core.compare import compare_intakes
from sketchparity.core.errors import (
    ConfigError,
    CoverageError,
    EmptyIntakeError,
    MissingIdentityError,
    PayloadDecodeError,
    SketchMismatchError,
    SketchValidationError,
)
from sketchparity.core.intake import (
    TimestampPolicy,
    include_all,
    name_prefix_filter,
    normalize,
)
from sketchparity.core.models import (
    DigestSample,
    DistributionSample,
    Intake,
    IntakeEntry,
    MetricIdentity,
    RawPayload,
    SketchEntry,
    SketchPayload,
)
from sketchparity.core.sanity import check_intake
from sketchparity.validate import (
    SKETCHES_ENDPOINT,
    get_sketches_from_pipeline,
    validate,
)

__all__ = [
    "SKETCHES_ENDPOINT",
    "ConfigError",
    "CoverageError",
    "DigestSample",
    "DistributionSample",
    "EmptyIntakeError",
    "FakeIntakeClient",
    "HarnessConfig",
    "InMemoryPayloadStorage",
    "Intake",
    "IntakeEntry",
    "MetricIdentity",
    "MissingIdentityError",
    "PayloadDecodeError",
    "RawPayload",
    "SketchEntry",
    "SketchMismatchError",
    "SketchPayload",
    "SketchValidationError",
    "TimestampPolicy",
    "check_intake",
    "compare_intakes",
    "create_fake_intake_app",
    "get_sketches_from_pipeline",
    "include_all",
    "name_prefix_filter",
    "normalize",
    "validate",
]
