"""Common data models for the remote benchmarks runner."""

from common.models.connection import HostConnection, SSHTuning
from common.models.command import RemoteCommand, RemoteScript, format_properties
from common.models.run import (
    SweepAxes,
    RunConfiguration,
    RunStatus,
    RunOutcome,
    SweepReport,
)
from common.models.scenario import ScenarioFlags, ScenarioDescriptor

__all__ = [
    "HostConnection",
    "SSHTuning",
    "RemoteCommand",
    "RemoteScript",
    "format_properties",
    "SweepAxes",
    "RunConfiguration",
    "RunStatus",
    "RunOutcome",
    "SweepReport",
    "ScenarioFlags",
    "ScenarioDescriptor",
]
