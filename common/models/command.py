"""Structured remote command models.

Remote commands are built as data and turned into shell text in one place
(``RemoteCommand.to_shell`` / ``RemoteScript.render``). Every interpolated
value goes through ``shlex.quote``.
"""

from __future__ import annotations

import shlex
from typing import Optional, Union

from pydantic import BaseModel, Field


def format_properties(properties: dict[str, object]) -> str:
    """Serialize runtime properties as a space separated ``-Dkey=value`` list."""
    return " ".join(f"-D{key}={value}" for key, value in properties.items())


class RemoteCommand(BaseModel):
    """A single process launch on a remote host."""
    argv: list[str] = Field(..., min_length=1, description="Executable and arguments")
    env: dict[str, str] = Field(default_factory=dict, description="Environment bindings")
    wrapper: list[str] = Field(
        default_factory=list,
        description="Command prefix the process is launched under (e.g. onload)"
    )
    detach: bool = Field(default=False, description="Run in background under nohup")
    log_file: Optional[str] = Field(default=None, description="Remote file for stdout/stderr")

    def to_shell(self) -> str:
        """Render the command as one line of POSIX shell."""
        parts = [f"{key}={shlex.quote(value)}" for key, value in self.env.items()]
        if self.detach:
            parts.append("nohup")
        parts.extend(shlex.quote(arg) for arg in [*self.wrapper, *self.argv])
        line = " ".join(parts)

        if self.detach:
            log_file = shlex.quote(self.log_file or "/dev/null")
            line = f"{line} < /dev/null > {log_file} 2>&1 &"
        elif self.log_file:
            line = f"{line} > {shlex.quote(self.log_file)} 2>&1"
        return line


class RemoteScript(BaseModel):
    """Ordered remote shell steps executed in one ssh session.

    Steps are either ``RemoteCommand`` objects or snippets produced by
    ``orchestrator.remote.process_helpers``, which quote their own inputs.
    """
    steps: list[Union[RemoteCommand, str]] = Field(default_factory=list)
    fail_fast: bool = Field(default=True, description="Abort the remote shell on the first failing step")

    def render(self) -> str:
        lines = ["set -e"] if self.fail_fast else []
        for step in self.steps:
            lines.append(step.to_shell() if isinstance(step, RemoteCommand) else step)
        return "\n".join(lines)
