"""SSH client for remote command execution."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from common.models.command import RemoteCommand, RemoteScript
from common.models.connection import HostConnection, SSHTuning

logger = logging.getLogger(__name__)

# ssh and scp report their own failures (unreachable, auth, timeout) as 255.
SSH_ERROR_EXIT_CODE = 255


@dataclass
class SSHCommandResult:
    """Result of an SSH command execution."""
    exit_code: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class SSHConnectionError(ConnectionError):
    """The ssh session itself could not be established or timed out."""

    def __init__(self, host: str, message: str, step: Optional[str] = None):
        super().__init__(f"SSH connection to {host} failed: {message}")
        self.host = host
        self.step = step
        self.exit_code = SSH_ERROR_EXIT_CODE


class RemoteCommandError(RuntimeError):
    """A remote command exited with a non-zero status."""

    def __init__(self, host: str, step: str, result: SSHCommandResult):
        detail = (result.stderr or result.stdout).strip()
        super().__init__(f"{step} failed on {host} with exit code {result.exit_code}: {detail}")
        self.host = host
        self.step = step
        self.result = result

    @property
    def exit_code(self) -> int:
        return self.result.exit_code


class SSHClient:
    """Async SSH client using subprocess.

    Every call opens a fresh ssh session; there is no connection reuse.
    """

    def __init__(self, connection: HostConnection, tuning: Optional[SSHTuning] = None):
        self.connection = connection
        self.tuning = tuning or SSHTuning()

    @property
    def hostname(self) -> str:
        return self.connection.host

    def _connection_options(self) -> list[str]:
        return [
            "-o", "StrictHostKeyChecking=no",
            "-o", "UserKnownHostsFile=/dev/null",
            "-o", "LogLevel=ERROR",
            "-o", "BatchMode=yes",
            "-o", f"ConnectionAttempts={self.tuning.connection_attempts}",
            "-o", f"ConnectTimeout={self.tuning.connect_timeout}",
            "-o", f"ServerAliveInterval={self.tuning.server_alive_interval}",
            "-i", self.connection.key_file,
        ]

    def _build_ssh_command(self, command: str) -> list[str]:
        """Build SSH command with proper options."""
        return [
            "ssh", *self._connection_options(),
            "-p", str(self.connection.port),
            self.connection.destination,
            command,
        ]

    def _build_scp_command(self, remote_path: str, local_path: str) -> list[str]:
        return [
            "scp", *self._connection_options(),
            "-P", str(self.connection.port),
            f"{self.connection.destination}:{remote_path}",
            local_path,
        ]

    async def _exec(self, argv: list[str], step: str, timeout: Optional[float]) -> SSHCommandResult:
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise SSHConnectionError(self.hostname, f"{argv[0]} executable not found", step)

        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=timeout)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise SSHConnectionError(self.hostname, f"{step} timed out after {timeout}s", step)

        result = SSHCommandResult(
            exit_code=proc.returncode or 0,
            stdout=stdout.decode(errors='replace'),
            stderr=stderr.decode(errors='replace'),
        )
        if result.exit_code == SSH_ERROR_EXIT_CODE:
            raise SSHConnectionError(
                self.hostname, result.stderr.strip() or "ssh exited with 255", step
            )
        return result

    async def run_command(
        self,
        command: Union[str, RemoteCommand, RemoteScript],
        step: str = "remote command",
        raise_on_error: bool = False,
        unbounded: bool = False,
    ) -> SSHCommandResult:
        """Execute a command on the remote host and wait for it to finish.

        ``tuning.command_timeout`` caps the call unless ``unbounded`` is set,
        which is how measured benchmark runs are executed.
        """
        if isinstance(command, RemoteScript):
            text = command.render()
        elif isinstance(command, RemoteCommand):
            text = command.to_shell()
        else:
            text = command

        timeout = None if unbounded else self.tuning.command_timeout
        logger.debug(f"[{self.hostname}] {step}: {text}")
        result = await self._exec(self._build_ssh_command(text), step, timeout)

        if result.success:
            logger.debug(f"[{self.hostname}] {step} finished")
        else:
            logger.warning(f"[{self.hostname}] {step} exited with {result.exit_code}")
            if raise_on_error:
                raise RemoteCommandError(self.hostname, step, result)
        return result

    async def download(self, remote_path: str, local_path: Union[str, Path]) -> Path:
        """Copy a remote file to the local host."""
        local_path = Path(local_path)
        local_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"Downloading {self.connection.destination}:{remote_path} to {local_path}")
        result = await self._exec(
            self._build_scp_command(remote_path, str(local_path)), "download", self.tuning.command_timeout
        )
        if not result.success:
            raise RemoteCommandError(self.hostname, "download", result)
        return local_path
