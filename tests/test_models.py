"""Unit tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from common.models.command import RemoteCommand, RemoteScript, format_properties
from common.models.connection import HostConnection, SSHTuning
from common.models.run import RunConfiguration, RunOutcome, RunStatus, SweepReport
from common.models.scenario import ScenarioDescriptor, ScenarioFlags


class TestConnectionModels:
    """Tests for connection models."""

    def test_ssh_tuning_defaults(self):
        tuning = SSHTuning()

        assert tuning.connection_attempts == 10
        assert tuning.connect_timeout == 5
        assert tuning.server_alive_interval == 600
        assert tuning.command_timeout is None

    def test_ssh_tuning_rejects_zero_attempts(self):
        with pytest.raises(ValidationError):
            SSHTuning(connection_attempts=0)

    def test_host_connection_destination(self):
        connection = HostConnection(host="10.0.0.1", user="bench", key_file="/keys/id")

        assert connection.destination == "bench@10.0.0.1"
        assert connection.port == 22


class TestRemoteCommand:
    """Tests for structured remote commands."""

    def test_simple_command(self):
        command = RemoteCommand(argv=["/opt/bench/client", "--fast"])

        assert command.to_shell() == "/opt/bench/client --fast"

    def test_env_values_are_quoted(self):
        command = RemoteCommand(
            argv=["/opt/bench/client"],
            env={"JVM_OPTS": "-Da=1 -Db=2"},
        )

        assert command.to_shell() == "JVM_OPTS='-Da=1 -Db=2' /opt/bench/client"

    def test_arguments_cannot_inject_shell(self):
        command = RemoteCommand(argv=["echo", "x; rm -rf /"])

        assert command.to_shell() == "echo 'x; rm -rf /'"

    def test_wrapper_precedes_argv(self):
        command = RemoteCommand(argv=["/opt/bench/server"], wrapper=["onload", "--profile=latency"])

        assert command.to_shell() == "onload --profile=latency /opt/bench/server"

    def test_detached_command(self):
        command = RemoteCommand(
            argv=["/opt/bench/server"],
            env={"JVM_OPTS": "-Dx=1"},
            detach=True,
            log_file="/tmp/server.log",
        )

        assert command.to_shell() == (
            "JVM_OPTS=-Dx=1 nohup /opt/bench/server < /dev/null > /tmp/server.log 2>&1 &"
        )

    def test_detached_without_log_file_discards_output(self):
        command = RemoteCommand(argv=["server"], detach=True)

        assert command.to_shell().endswith("> /dev/null 2>&1 &")

    def test_foreground_log_file(self):
        command = RemoteCommand(argv=["./run"], log_file="/opt/my bench/run.log")

        assert command.to_shell() == "./run > '/opt/my bench/run.log' 2>&1"

    def test_empty_argv_rejected(self):
        with pytest.raises(ValidationError):
            RemoteCommand(argv=[])


class TestRemoteScript:
    """Tests for remote scripts."""

    def test_render_fail_fast(self):
        script = RemoteScript(steps=["mkdir -p /tmp/x", RemoteCommand(argv=["ls", "/tmp/x"])])

        assert script.render() == "set -e\nmkdir -p /tmp/x\nls /tmp/x"

    def test_render_without_fail_fast(self):
        script = RemoteScript(steps=["true"], fail_fast=False)

        assert script.render() == "true"


class TestRunModels:
    """Tests for run models."""

    def test_format_properties(self):
        assert format_properties({"a.b": "1", "c.d": 2}) == "-Da.b=1 -Dc.d=2"

    def test_format_properties_empty(self):
        assert format_properties({}) == ""

    def test_run_configuration_is_frozen(self, sample_configuration):
        with pytest.raises(ValidationError):
            sample_configuration.message_rate = "1K"

    def test_run_configuration_properties(self, sample_configuration):
        properties = sample_configuration.as_properties()

        assert properties == {
            "uk.co.real_logic.benchmarks.remote.messageRate": "1001K",
            "uk.co.real_logic.benchmarks.remote.messageLength": "32",
            "uk.co.real_logic.benchmarks.remote.batchSize": "1",
            "uk.co.real_logic.benchmarks.remote.iterations": "60",
            "uk.co.real_logic.benchmarks.remote.warmupIterations": "30",
            "uk.co.real_logic.benchmarks.remote.warmupMessageRate": "25K",
        }

    def test_sweep_report_counters(self, sample_configuration):
        report = SweepReport(scenario="grpc-streaming", outcomes=[
            RunOutcome(scenario="grpc-streaming", configuration=sample_configuration, status=RunStatus.SUCCEEDED),
            RunOutcome(scenario="grpc-streaming", configuration=sample_configuration, status=RunStatus.FAILED),
            RunOutcome(scenario="grpc-streaming", configuration=sample_configuration, status=RunStatus.SUCCEEDED),
        ])

        assert report.succeeded == 2
        assert report.failed == 1


class TestScenarioModels:
    """Tests for scenario models."""

    def test_offload_requires_command(self):
        assert ScenarioFlags(onload=True, onload_command="onload").offload_enabled is True
        assert ScenarioFlags(onload=True, onload_command="  ").offload_enabled is False
        assert ScenarioFlags(onload=False, onload_command="onload").offload_enabled is False

    def test_output_prefix_without_context(self):
        scenario = ScenarioDescriptor(test_type="grpc", name="grpc-streaming-tls")

        assert scenario.output_prefix == "grpc-streaming-tls"

    def test_output_prefix_with_context(self):
        scenario = ScenarioDescriptor(test_type="grpc", name="grpc-streaming", context="c5n large")

        assert scenario.output_prefix == "grpc-streaming_c5n_large"
