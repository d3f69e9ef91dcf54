"""Scenario drivers composing the orchestrator into labeled test matrices."""

from orchestrator.scenarios.base import DriverReport, ScenarioDriver
from orchestrator.scenarios.grpc_streaming import GrpcStreamingScenarioDriver

__all__ = ["DriverReport", "ScenarioDriver", "GrpcStreamingScenarioDriver"]
