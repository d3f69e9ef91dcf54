"""Sweep and run models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# Property namespace read by the remote benchmark framework.
BENCHMARK_PROPERTY_PREFIX = "uk.co.real_logic.benchmarks.remote"


class SweepAxes(BaseModel):
    """Configured sweep dimensions.

    ``message_rates`` and ``message_lengths`` are paired by position,
    ``burst_sizes`` is crossed with every pair.
    """
    message_rates: list[str] = Field(default_factory=list, description="Rates, e.g. 1001K")
    message_lengths: list[int] = Field(default_factory=list, description="Message lengths in bytes")
    burst_sizes: list[int] = Field(default_factory=lambda: [1], description="Messages per burst")
    runs: int = Field(default=3, description="Repetitions of every combination")
    iterations: int = Field(default=60, ge=1, description="Measured iterations (seconds)")
    warmup_iterations: int = Field(default=30, ge=0, description="Unmeasured warmup iterations")
    warmup_message_rate: str = Field(default="25K", description="Rate used during warmup")


class RunConfiguration(BaseModel):
    """One concrete combination of sweep values."""
    model_config = ConfigDict(frozen=True)

    message_rate: str
    message_length: int
    burst_size: int
    run_index: int
    iterations: int
    warmup_iterations: int
    warmup_message_rate: str

    def as_properties(self) -> dict[str, str]:
        """Runtime properties understood by the benchmark framework."""
        values = {
            "messageRate": self.message_rate,
            "messageLength": self.message_length,
            "batchSize": self.burst_size,
            "iterations": self.iterations,
            "warmupIterations": self.warmup_iterations,
            "warmupMessageRate": self.warmup_message_rate,
        }
        return {f"{BENCHMARK_PROPERTY_PREFIX}.{key}": str(value) for key, value in values.items()}

    @property
    def label(self) -> str:
        return (
            f"rate={self.message_rate} length={self.message_length} "
            f"burst={self.burst_size} run={self.run_index}"
        )


class RunStatus(str, Enum):
    """Outcome of a single run."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class RunOutcome(BaseModel):
    """Result of one run, successful or not."""
    scenario: str
    configuration: RunConfiguration
    status: RunStatus
    exit_code: int = 0
    failed_step: Optional[str] = None
    error_message: Optional[str] = None
    started_at: datetime = Field(default_factory=datetime.utcnow)
    duration_seconds: float = 0

    @property
    def succeeded(self) -> bool:
        return self.status == RunStatus.SUCCEEDED


class SweepReport(BaseModel):
    """Ordered outcomes of every run executed for one scenario."""
    scenario: str
    outcomes: list[RunOutcome] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for o in self.outcomes if o.succeeded)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if not o.succeeded)
