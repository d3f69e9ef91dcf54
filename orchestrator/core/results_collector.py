"""Collection of benchmark results from the client host."""

from __future__ import annotations

import logging
import posixpath
import shlex
from datetime import datetime
from pathlib import Path
from typing import Optional

from common.models.command import RemoteCommand, RemoteScript
from common.utils import archive_timestamp, ensure_dir, sanitize_filename
from orchestrator.remote.ssh_client import SSHClient

logger = logging.getLogger(__name__)


class ResultsCollector:
    """Archives the remote results directory and copies it back."""

    def __init__(
        self,
        ssh: SSHClient,
        remote_results_dir: str,
        environment_info_command: str,
        local_results_path: str | Path,
    ):
        self.ssh = ssh
        self.remote_results_dir = remote_results_dir.rstrip("/")
        self.environment_info_command = environment_info_command
        self.local_results_path = Path(local_results_path)

    @staticmethod
    def archive_name(test_type: str, context: Optional[str] = None, now: Optional[datetime] = None) -> str:
        """``<timestamp>_<test_type>_<context>.tar.gz``; the context part is optional."""
        parts = [archive_timestamp(now), sanitize_filename(test_type)]
        if context:
            parts.append(sanitize_filename(context))
        return "_".join(parts) + ".tar.gz"

    def remote_archive_path(self, archive_name: str) -> str:
        return posixpath.join(posixpath.dirname(self.remote_results_dir), archive_name)

    async def collect_environment_info(self) -> None:
        """Capture environment metadata into the remote results directory."""
        script = RemoteScript(steps=[
            f"mkdir -p {shlex.quote(self.remote_results_dir)}",
            RemoteCommand(argv=[self.environment_info_command, self.remote_results_dir]),
        ])
        logger.info(f"Collecting environment info on {self.ssh.hostname}")
        await self.ssh.run_command(script, step="collect environment info", raise_on_error=True)

    def build_archive_script(self, archive_name: str) -> RemoteScript:
        archive_path = shlex.quote(self.remote_archive_path(archive_name))
        return RemoteScript(steps=[
            f"rm -f {archive_path}",
            f"tar -czf {archive_path} -C {shlex.quote(self.remote_results_dir)} .",
        ])

    async def download_results(
        self,
        test_type: str,
        context: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Path:
        """Create the results archive on the remote host and copy it locally."""
        archive_name = self.archive_name(test_type, context, now)
        logger.info(f"Archiving {self.remote_results_dir} on {self.ssh.hostname} as {archive_name}")
        await self.ssh.run_command(
            self.build_archive_script(archive_name), step="archive results", raise_on_error=True
        )

        ensure_dir(self.local_results_path)
        local_path = await self.ssh.download(
            self.remote_archive_path(archive_name),
            self.local_results_path / archive_name,
        )
        logger.info(f"Results downloaded to {local_path}")
        return local_path
