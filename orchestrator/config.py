"""Orchestrator configuration settings."""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar, Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

from common.models.connection import HostConnection, SSHTuning
from common.models.run import SweepAxes
from common.utils import parse_csv, parse_int_csv


class ConfigurationError(ValueError):
    """Required configuration is missing or inconsistent."""


class Settings(BaseSettings):
    """Settings loaded from environment variables, ``.env`` or a YAML file."""

    # Client node
    client_host: str = ""
    client_user: str = ""
    ssh_client_key_file: str = ""

    # Server node
    server_host: str = ""
    server_user: str = ""
    ssh_server_key_file: str = ""

    # SSH tuning
    ssh_port: int = 22
    ssh_connection_attempts: int = 10
    ssh_connect_timeout: int = 5  # seconds
    ssh_server_alive_interval: int = 600  # seconds
    ssh_connection_timeout: Optional[float] = None  # seconds per remote call, except the measured client run

    # Benchmark installation on the remote nodes
    benchmarks_path: str = ""

    # Sweep axes (comma separated)
    message_rate: str = "1001K,501K"
    message_length: str = "32,288"
    burst_size: str = "1"
    runs: int = 3
    iterations: int = 60
    warmup_iterations: int = 30
    warmup_message_rate: str = "25K"

    # gRPC scenario
    server_port: int = 13400
    server_address: str = ""  # defaults to server_host
    certificates_path: str = ""  # defaults to <benchmarks_path>/certificates
    onload: str = "onload --profile=latency"
    server_cpu_core: Optional[int] = None
    server_thread_name: str = "grpc-nio-worker"
    process_runtime: str = "java"

    # Results
    remote_results_dir: str = ""  # defaults to <benchmarks_path>/scripts/results
    environment_info_command: str = ""  # defaults to <benchmarks_path>/scripts/collect-environment-info
    local_results_path: Path = Field(default=Path("./results"))

    # Run history
    data_path: Path = Field(default=Path("./data"))

    # Failure handling: fail_fast or continue
    failure_policy: Literal["fail_fast", "continue"] = "fail_fast"

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    class Config:
        env_prefix = ""
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    REQUIRED: ClassVar[tuple[str, ...]] = (
        "client_host",
        "client_user",
        "ssh_client_key_file",
        "server_host",
        "server_user",
        "ssh_server_key_file",
        "benchmarks_path",
    )

    def validate_required(self) -> None:
        """Raise ConfigurationError naming every missing required value."""
        missing = [name for name in self.REQUIRED if not str(getattr(self, name)).strip()]
        if missing:
            raise ConfigurationError(
                "Missing required configuration: " + ", ".join(name.upper() for name in missing)
            )

    @property
    def client_connection(self) -> HostConnection:
        return HostConnection(
            host=self.client_host,
            user=self.client_user,
            key_file=self.ssh_client_key_file,
            port=self.ssh_port,
        )

    @property
    def server_connection(self) -> HostConnection:
        return HostConnection(
            host=self.server_host,
            user=self.server_user,
            key_file=self.ssh_server_key_file,
            port=self.ssh_port,
        )

    @property
    def ssh_tuning(self) -> SSHTuning:
        return SSHTuning(
            connection_attempts=self.ssh_connection_attempts,
            connect_timeout=self.ssh_connect_timeout,
            server_alive_interval=self.ssh_server_alive_interval,
            command_timeout=self.ssh_connection_timeout,
        )

    @property
    def sweep_axes(self) -> SweepAxes:
        try:
            return SweepAxes(
                message_rates=parse_csv(self.message_rate),
                message_lengths=parse_int_csv(self.message_length),
                burst_sizes=parse_int_csv(self.burst_size),
                runs=self.runs,
                iterations=self.iterations,
                warmup_iterations=self.warmup_iterations,
                warmup_message_rate=self.warmup_message_rate,
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid sweep configuration: {e}") from e

    @property
    def results_dir(self) -> str:
        return self.remote_results_dir or f"{self.benchmarks_path}/scripts/results"

    @property
    def environment_info(self) -> str:
        return self.environment_info_command or f"{self.benchmarks_path}/scripts/collect-environment-info"

    @property
    def certificates(self) -> str:
        return self.certificates_path or f"{self.benchmarks_path}/certificates"

    @property
    def run_store_path(self) -> Path:
        return self.data_path / "runs.db"
