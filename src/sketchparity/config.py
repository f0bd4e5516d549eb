"""Harness configuration."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from sketchparity.core.errors import ConfigError
from sketchparity.core.intake import TimestampPolicy

DEFAULT_AGENT_ADDRESS = "http://127.0.0.1:8083"
DEFAULT_VECTOR_ADDRESS = "http://127.0.0.1:8082"


@dataclass(frozen=True)
class HarnessConfig:
    """Configuration for one validation run.

    Attributes:
        agent_address: Base URL of the fake intake fed by the agent-only pipeline.
        vector_address: Base URL of the fake intake fed through the relay.
        metric_prefix: Only metrics whose name starts with this are compared.
        expected_family: Metric name prefix every Intake must contain
            (default: ``<metric_prefix>.distribution``).
        timestamp_policy: How bucket keys are derived from sample timestamps.
        timeout: HTTP timeout in seconds for fetching captured payloads.
    """

    agent_address: str = DEFAULT_AGENT_ADDRESS
    vector_address: str = DEFAULT_VECTOR_ADDRESS
    metric_prefix: str = "foo_metric"
    expected_family: str = ""
    timestamp_policy: TimestampPolicy = TimestampPolicy.EXACT
    timeout: float = 10.0

    def __post_init__(self) -> None:
        # @tra: Config.ExpectedFamily.FollowsPrefix
        if not self.expected_family:
            object.__setattr__(
                self, "expected_family", f"{self.metric_prefix}.distribution"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "HarnessConfig":
        """Build a configuration from environment variables.

        Args:
            environ: Mapping to read from (default: ``os.environ``).

        Raises:
            ConfigError: A variable holds an invalid value.
        """
        env = os.environ if environ is None else environ

        policy_raw = env.get("SKETCHPARITY_TIMESTAMP_POLICY", "exact").lower()
        try:
            policy = TimestampPolicy(policy_raw)
        except ValueError:
            raise ConfigError(
                f"SKETCHPARITY_TIMESTAMP_POLICY must be one of "
                f"{[p.value for p in TimestampPolicy]}, got {policy_raw!r}"
            ) from None

        timeout_raw = env.get("SKETCHPARITY_TIMEOUT", "10")
        try:
            timeout = float(timeout_raw)
        except ValueError:
            raise ConfigError(
                f"SKETCHPARITY_TIMEOUT must be a number, got {timeout_raw!r}"
            ) from None
        # Reject negative, NaN, and infinite values
        if timeout <= 0 or timeout != timeout or timeout == float("inf"):
            raise ConfigError(
                f"SKETCHPARITY_TIMEOUT must be positive, got {timeout_raw!r}"
            )

        return cls(
            agent_address=env.get("FAKE_INTAKE_AGENT_ENDPOINT", DEFAULT_AGENT_ADDRESS),
            vector_address=env.get(
                "FAKE_INTAKE_VECTOR_ENDPOINT", DEFAULT_VECTOR_ADDRESS
            ),
            metric_prefix=env.get("SKETCHPARITY_METRIC_PREFIX", "foo_metric"),
            expected_family=env.get(
                "SKETCHPARITY_EXPECTED_FAMILY", ""
            ),
            timestamp_policy=policy,
            timeout=timeout,
        )
