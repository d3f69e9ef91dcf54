"""Expansion of sweep axes into run configurations."""

from __future__ import annotations

import logging

from common.models.run import RunConfiguration, SweepAxes
from orchestrator.config import ConfigurationError

logger = logging.getLogger(__name__)


def validate_axes(axes: SweepAxes) -> None:
    """Reject axes that cannot be expanded."""
    problems = []
    if len(axes.message_rates) != len(axes.message_lengths):
        problems.append(
            f"MESSAGE_RATE has {len(axes.message_rates)} values but "
            f"MESSAGE_LENGTH has {len(axes.message_lengths)}"
        )
    if not axes.message_rates:
        problems.append("MESSAGE_RATE is empty")
    if not axes.message_lengths:
        problems.append("MESSAGE_LENGTH is empty")
    if not axes.burst_sizes:
        problems.append("BURST_SIZE is empty")
    if axes.runs < 1:
        problems.append(f"RUNS must be at least 1, got {axes.runs}")

    if problems:
        raise ConfigurationError("Invalid sweep configuration: " + "; ".join(problems))


def generate_sweep(axes: SweepAxes) -> list[RunConfiguration]:
    """Expand ``axes`` into run configurations.

    Order is rate/length pair, then burst size, then run index, which is also
    the order in which the remote processes are started.
    """
    validate_axes(axes)

    configurations = []
    for rate, length in zip(axes.message_rates, axes.message_lengths):
        for burst in axes.burst_sizes:
            for run_index in range(axes.runs):
                configurations.append(RunConfiguration(
                    message_rate=rate,
                    message_length=length,
                    burst_size=burst,
                    run_index=run_index,
                    iterations=axes.iterations,
                    warmup_iterations=axes.warmup_iterations,
                    warmup_message_rate=axes.warmup_message_rate,
                ))

    logger.info(
        f"Sweep expanded to {len(configurations)} runs "
        f"({len(axes.message_rates)} rate/length pairs x {len(axes.burst_sizes)} bursts x {axes.runs} runs)"
    )
    return configurations
