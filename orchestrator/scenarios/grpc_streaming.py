"""Streaming gRPC echo benchmark scenarios."""

from __future__ import annotations

import posixpath
import shlex

from common.models.command import RemoteCommand, RemoteScript, format_properties
from common.models.run import BENCHMARK_PROPERTY_PREFIX, RunConfiguration
from common.models.scenario import ScenarioDescriptor
from orchestrator.core.benchmark_runner import ScenarioCommands
from orchestrator.remote.process_helpers import (
    await_process_start,
    find_process,
    kill_process,
    pin_thread,
)
from orchestrator.scenarios.base import ScenarioDriver

GRPC_PROPERTY_PREFIX = "uk.co.real_logic.benchmarks.grpc.remote"
SERVER_MAIN_CLASS = "uk.co.real_logic.benchmarks.grpc.remote.EchoServer"


class GrpcStreamingScenarioDriver(ScenarioDriver):
    """TLS on/off and onload on/off variants of the streaming echo benchmark."""

    test_type = "grpc"
    scenario_prefix = "grpc-streaming"

    def scenarios(self) -> list[ScenarioDescriptor]:
        tls_variants = [False, True] if self.flags.tls else [False]
        onload = self.flags.offload_enabled

        scenarios = []
        for tls in tls_variants:
            name = self.scenario_prefix
            if tls:
                name += "-tls"
            if onload:
                name += "-onload"
            scenarios.append(ScenarioDescriptor(
                test_type=self.test_type,
                name=name,
                tls=tls,
                onload=onload,
                context=self.flags.context or None,
            ))
        return scenarios

    def connection_properties(self, scenario: ScenarioDescriptor) -> dict[str, str]:
        """Properties shared by the client and the server of a scenario."""
        return {
            f"{GRPC_PROPERTY_PREFIX}.server.host": self.settings.server_address or self.settings.server_host,
            f"{GRPC_PROPERTY_PREFIX}.server.port": str(self.settings.server_port),
            f"{GRPC_PROPERTY_PREFIX}.tls": str(scenario.tls).lower(),
            f"{GRPC_PROPERTY_PREFIX}.certificates": self.settings.certificates,
        }

    def _launcher(self, name: str) -> str:
        return posixpath.join(self.settings.benchmarks_path, "scripts", "grpc", name)

    def _wrapper(self, scenario: ScenarioDescriptor) -> list[str]:
        return shlex.split(self.flags.onload_command) if scenario.onload else []

    def build_commands(self, scenario: ScenarioDescriptor) -> ScenarioCommands:
        settings = self.settings
        results_dir = settings.results_dir
        make_results_dir = f"mkdir -p {shlex.quote(results_dir)}"
        shared = self.connection_properties(scenario)
        wrapper = self._wrapper(scenario)

        server = RemoteCommand(
            argv=[self._launcher("server")],
            env={"JVM_OPTS": format_properties(shared)},
            wrapper=wrapper,
            detach=True,
            log_file=posixpath.join(results_dir, f"{scenario.output_prefix}-server.log"),
        )
        start_steps = [
            make_results_dir,
            kill_process(SERVER_MAIN_CLASS),
            server,
            await_process_start(find_process(SERVER_MAIN_CLASS, settings.process_runtime)),
        ]
        if settings.server_cpu_core is not None:
            start_steps.append(pin_thread("${pid}", settings.server_thread_name, settings.server_cpu_core))

        def client_for(configuration: RunConfiguration) -> RemoteScript:
            properties = {
                **shared,
                **configuration.as_properties(),
                f"{BENCHMARK_PROPERTY_PREFIX}.outputDirectory": results_dir,
                f"{BENCHMARK_PROPERTY_PREFIX}.outputFileNamePrefix": scenario.output_prefix,
            }
            client = RemoteCommand(
                argv=[self._launcher("streaming-client")],
                env={"JVM_OPTS": format_properties(properties)},
                wrapper=wrapper,
            )
            return RemoteScript(steps=[make_results_dir, client])

        return ScenarioCommands(
            start_server=RemoteScript(steps=start_steps),
            stop_server=RemoteScript(steps=[kill_process(SERVER_MAIN_CLASS)]),
            client_for=client_for,
        )
