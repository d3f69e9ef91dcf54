"""Common utilities and models shared across the orchestrator and CLI."""

from common.models.connection import HostConnection, SSHTuning
from common.models.command import RemoteCommand, RemoteScript
from common.models.run import SweepAxes, RunConfiguration, RunOutcome, SweepReport
from common.models.scenario import ScenarioFlags, ScenarioDescriptor

__all__ = [
    "HostConnection",
    "SSHTuning",
    "RemoteCommand",
    "RemoteScript",
    "SweepAxes",
    "RunConfiguration",
    "RunOutcome",
    "SweepReport",
    "ScenarioFlags",
    "ScenarioDescriptor",
]
