"""Pytest configuration and shared fixtures."""

import tempfile
import shutil
from pathlib import Path
from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest

from common.models.run import RunConfiguration, SweepAxes
from common.models.scenario import ScenarioDescriptor
from orchestrator.config import Settings
from orchestrator.remote.ssh_client import SSHClient, SSHCommandResult
from orchestrator.storage.run_store import RunStore


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def run_store(temp_dir: Path) -> RunStore:
    """Create a RunStore backed by a temporary database."""
    return RunStore(temp_dir / "runs.db")


@pytest.fixture
def settings_values(temp_dir: Path) -> dict:
    """Complete settings for a client/server pair."""
    return {
        "client_host": "10.0.0.1",
        "client_user": "bench",
        "ssh_client_key_file": "/keys/client",
        "server_host": "10.0.0.2",
        "server_user": "bench",
        "ssh_server_key_file": "/keys/server",
        "benchmarks_path": "/opt/benchmarks",
        "message_rate": "1001K,501K",
        "message_length": "32,288",
        "burst_size": "1",
        "runs": 2,
        "local_results_path": temp_dir / "results",
        "data_path": temp_dir / "data",
    }


@pytest.fixture
def settings(settings_values: dict) -> Settings:
    """Settings that pass validation."""
    return Settings(_env_file=None, **settings_values)


@pytest.fixture
def sample_axes() -> SweepAxes:
    """Sweep axes used by the end-to-end scenario."""
    return SweepAxes(
        message_rates=["1001K", "501K"],
        message_lengths=[32, 288],
        burst_sizes=[1],
        runs=2,
    )


@pytest.fixture
def sample_configuration() -> RunConfiguration:
    return RunConfiguration(
        message_rate="1001K",
        message_length=32,
        burst_size=1,
        run_index=0,
        iterations=60,
        warmup_iterations=30,
        warmup_message_rate="25K",
    )


@pytest.fixture
def sample_scenario() -> ScenarioDescriptor:
    return ScenarioDescriptor(test_type="grpc", name="grpc-streaming")


def ok(stdout: str = "") -> SSHCommandResult:
    return SSHCommandResult(exit_code=0, stdout=stdout, stderr="")


def failed(exit_code: int = 1, stderr: str = "boom") -> SSHCommandResult:
    return SSHCommandResult(exit_code=exit_code, stdout="", stderr=stderr)


def make_mock_ssh(hostname: str) -> MagicMock:
    """Create a mock SSH client that succeeds by default."""
    mock = MagicMock(spec=SSHClient)
    mock.hostname = hostname
    mock.run_command = AsyncMock(return_value=ok())
    mock.download = AsyncMock()
    return mock


@pytest.fixture
def mock_client_ssh() -> MagicMock:
    return make_mock_ssh("client-host")


@pytest.fixture
def mock_server_ssh() -> MagicMock:
    return make_mock_ssh("server-host")
