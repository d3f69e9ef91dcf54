"""Sequential client/server benchmark run orchestration."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import AsyncIterator, Callable, Optional, Union

from common.models.command import RemoteScript
from common.models.run import RunConfiguration, RunOutcome, RunStatus, SweepReport
from common.models.scenario import ScenarioDescriptor
from common.utils import Timer
from orchestrator.remote.ssh_client import RemoteCommandError, SSHClient, SSHConnectionError
from orchestrator.storage.run_store import RunStore

logger = logging.getLogger(__name__)


class FailurePolicy(str, Enum):
    """What to do when a remote step of a run exits non-zero."""
    FAIL_FAST = "fail_fast"
    CONTINUE = "continue"


class RunPhase(str, Enum):
    """Current step of the run being executed."""
    IDLE = "idle"
    START_SERVER = "start_server"
    START_CLIENT = "start_client"
    AWAIT_CLIENT_COMPLETION = "await_client_completion"
    STOP_SERVER = "stop_server"
    DONE = "done"


@dataclass
class ScenarioCommands:
    """Remote scripts making up one scenario."""
    start_server: RemoteScript
    stop_server: RemoteScript
    client_for: Callable[[RunConfiguration], RemoteScript]


class BenchmarkRunner:
    """Runs configurations one at a time against a client and a server host.

    For every run the server is started, the client is run to completion and
    the server is stopped again. The stop step executes whatever happened
    before it. Connection failures always abort the sweep; non-zero exits
    abort it only under ``FailurePolicy.FAIL_FAST``.
    """

    def __init__(
        self,
        client_ssh: SSHClient,
        server_ssh: SSHClient,
        policy: FailurePolicy = FailurePolicy.FAIL_FAST,
        run_store: Optional[RunStore] = None,
    ):
        self.client_ssh = client_ssh
        self.server_ssh = server_ssh
        self.policy = FailurePolicy(policy)
        self.run_store = run_store
        self.phase = RunPhase.IDLE

    async def run_sweep(
        self,
        scenario: ScenarioDescriptor,
        commands: ScenarioCommands,
        configurations: list[RunConfiguration],
        sweep_id: Optional[str] = None,
    ) -> SweepReport:
        """Execute every configuration in order."""
        report = SweepReport(scenario=scenario.name)
        total = len(configurations)
        logger.info(f"Starting scenario {scenario.name} with {total} runs")

        for i, configuration in enumerate(configurations, 1):
            logger.info(f"[{scenario.name}] run {i}/{total}: {configuration.label}")
            outcome, error = await self._run_once(scenario, commands, configuration)
            report.outcomes.append(outcome)

            if self.run_store and sweep_id:
                await self.run_store.record_run(sweep_id, outcome)

            if error is not None:
                if isinstance(error, SSHConnectionError) or self.policy == FailurePolicy.FAIL_FAST:
                    logger.error(f"[{scenario.name}] aborting sweep: {error}")
                    raise error
                logger.warning(f"[{scenario.name}] run failed, continuing: {error}")

        logger.info(
            f"Scenario {scenario.name} finished: {report.succeeded} succeeded, {report.failed} failed"
        )
        return report

    async def _run_once(
        self,
        scenario: ScenarioDescriptor,
        commands: ScenarioCommands,
        configuration: RunConfiguration,
    ) -> tuple[RunOutcome, Union[RemoteCommandError, SSHConnectionError, None]]:
        started_at = datetime.utcnow()
        error: Union[RemoteCommandError, SSHConnectionError, None] = None

        with Timer() as timer:
            try:
                async with self._server_running(commands):
                    await self._run_client(commands, configuration)
            except (RemoteCommandError, SSHConnectionError) as e:
                error = e
        self.phase = RunPhase.DONE

        if error is None:
            outcome = RunOutcome(
                scenario=scenario.name,
                configuration=configuration,
                status=RunStatus.SUCCEEDED,
                started_at=started_at,
                duration_seconds=timer.elapsed_seconds,
            )
        else:
            outcome = RunOutcome(
                scenario=scenario.name,
                configuration=configuration,
                status=RunStatus.FAILED,
                exit_code=error.exit_code,
                failed_step=error.step,
                error_message=str(error)[-2000:],
                started_at=started_at,
                duration_seconds=timer.elapsed_seconds,
            )
        return outcome, error

    @asynccontextmanager
    async def _server_running(self, commands: ScenarioCommands) -> AsyncIterator[None]:
        """Start the server, yield, then stop it no matter how the body ended."""
        try:
            self.phase = RunPhase.START_SERVER
            result = await self.server_ssh.run_command(
                commands.start_server, step="start server", raise_on_error=True
            )
            if result.stdout.strip():
                logger.info(f"[{self.server_ssh.hostname}] server started: {result.stdout.strip()}")
            yield
        except BaseException:
            await self._stop_server_after_failure(commands)
            raise
        else:
            self.phase = RunPhase.STOP_SERVER
            await self.server_ssh.run_command(
                commands.stop_server, step="stop server", raise_on_error=True
            )

    async def _stop_server_after_failure(self, commands: ScenarioCommands) -> None:
        # The error already propagating must not be replaced by a cleanup error.
        self.phase = RunPhase.STOP_SERVER
        try:
            result = await self.server_ssh.run_command(commands.stop_server, step="stop server")
        except SSHConnectionError as e:
            logger.error(f"Server on {self.server_ssh.hostname} may still be running: {e}")
            return
        if not result.success:
            logger.error(
                f"Stopping server on {self.server_ssh.hostname} failed with {result.exit_code}: "
                f"{result.stderr.strip()}"
            )

    async def _run_client(self, commands: ScenarioCommands, configuration: RunConfiguration) -> None:
        self.phase = RunPhase.START_CLIENT
        script = commands.client_for(configuration)

        self.phase = RunPhase.AWAIT_CLIENT_COMPLETION
        result = await self.client_ssh.run_command(
            script, step="client run", raise_on_error=True, unbounded=True
        )
        for line in result.stdout.splitlines():
            logger.debug(f"[{self.client_ssh.hostname}] {line}")
