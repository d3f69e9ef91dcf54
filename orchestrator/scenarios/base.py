"""Base class for scenario drivers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from common.models.run import RunConfiguration, SweepReport
from common.models.scenario import ScenarioDescriptor, ScenarioFlags
from common.utils import generate_sweep_id, save_yaml
from orchestrator.config import Settings
from orchestrator.core.benchmark_runner import BenchmarkRunner, FailurePolicy, ScenarioCommands
from orchestrator.core.results_collector import ResultsCollector
from orchestrator.core.sweep import generate_sweep
from orchestrator.remote.ssh_client import SSHClient
from orchestrator.storage.run_store import RunStore, SweepStatus

logger = logging.getLogger(__name__)


@dataclass
class DriverReport:
    """Everything a driver invocation produced."""
    sweep_id: str
    reports: list[SweepReport] = field(default_factory=list)
    archive_path: Optional[Path] = None

    @property
    def failed_runs(self) -> int:
        return sum(r.failed for r in self.reports)


class ScenarioDriver:
    """Runs the sweep once per scenario, then collects results once.

    Subclasses define the scenario matrix and the remote commands of each
    scenario.
    """

    test_type: str = ""

    def __init__(
        self,
        settings: Settings,
        flags: ScenarioFlags,
        runner: Optional[BenchmarkRunner] = None,
        collector: Optional[ResultsCollector] = None,
        run_store: Optional[RunStore] = None,
    ):
        self.settings = settings
        self.flags = flags
        self.runner = runner
        self.collector = collector
        self.run_store = run_store

    def scenarios(self) -> list[ScenarioDescriptor]:
        raise NotImplementedError

    def build_commands(self, scenario: ScenarioDescriptor) -> ScenarioCommands:
        raise NotImplementedError

    def plan(self) -> list[RunConfiguration]:
        """Validate the configuration and expand the sweep without any remote call."""
        self.settings.validate_required()
        return generate_sweep(self.settings.sweep_axes)

    def _build_runner(self) -> BenchmarkRunner:
        tuning = self.settings.ssh_tuning
        return BenchmarkRunner(
            client_ssh=SSHClient(self.settings.client_connection, tuning),
            server_ssh=SSHClient(self.settings.server_connection, tuning),
            policy=FailurePolicy(self.settings.failure_policy),
            run_store=self.run_store,
        )

    def _build_collector(self) -> ResultsCollector:
        return ResultsCollector(
            ssh=SSHClient(self.settings.client_connection, self.settings.ssh_tuning),
            remote_results_dir=self.settings.results_dir,
            environment_info_command=self.settings.environment_info,
            local_results_path=self.settings.local_results_path,
        )

    async def run(self) -> DriverReport:
        """Run every scenario of the matrix and download the results archive."""
        configurations = self.plan()
        scenarios = self.scenarios()
        runner = self.runner or self._build_runner()
        collector = self.collector or self._build_collector()

        report = DriverReport(sweep_id=generate_sweep_id())
        context = self.flags.context or None
        logger.info(
            f"Running {len(scenarios)} {self.test_type} scenarios: "
            f"{', '.join(s.name for s in scenarios)}"
        )
        if self.run_store:
            await self.run_store.create_sweep(report.sweep_id, self.test_type, context)

        try:
            for scenario in scenarios:
                commands = self.build_commands(scenario)
                report.reports.append(
                    await runner.run_sweep(scenario, commands, configurations, report.sweep_id)
                )

            await collector.collect_environment_info()
            report.archive_path = await collector.download_results(self.test_type, context)
        except BaseException as e:
            if self.run_store:
                message = str(e) if isinstance(e, Exception) else f"interrupted ({type(e).__name__})"
                await self.run_store.complete_sweep(
                    report.sweep_id, SweepStatus.FAILED, error_message=message
                )
            raise

        if self.run_store:
            await self.run_store.complete_sweep(
                report.sweep_id, SweepStatus.COMPLETED, archive_path=str(report.archive_path)
            )
        self._save_summary(report)
        return report

    def _save_summary(self, report: DriverReport) -> None:
        if report.archive_path is None:
            return
        summary_path = report.archive_path.with_name(
            report.archive_path.name.replace(".tar.gz", ".summary.yaml")
        )
        save_yaml(summary_path, {
            "sweep_id": report.sweep_id,
            "test_type": self.test_type,
            "context": self.flags.context,
            "archive": report.archive_path.name,
            "scenarios": [
                {
                    "name": r.scenario,
                    "succeeded": r.succeeded,
                    "failed": r.failed,
                    "runs": [o.model_dump(mode="json") for o in r.outcomes],
                }
                for r in report.reports
            ],
        })
        logger.info(f"Sweep summary written to {summary_path}")
