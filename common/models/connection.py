"""Connection models for the client and server benchmark nodes."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class SSHTuning(BaseModel):
    """Connection tuning passed through to ssh/scp."""
    connection_attempts: int = Field(default=10, ge=1, description="ssh ConnectionAttempts")
    connect_timeout: int = Field(default=5, ge=1, description="ssh ConnectTimeout in seconds")
    server_alive_interval: int = Field(
        default=600, ge=0,
        description="ssh ServerAliveInterval in seconds (0 disables keepalive)"
    )
    command_timeout: Optional[float] = Field(
        default=None, gt=0,
        description="Upper bound for a remote call in seconds, not applied to client runs (None = unbounded)"
    )


class HostConnection(BaseModel):
    """How to reach one benchmark node."""
    host: str = Field(..., description="Hostname or IP address")
    user: str = Field(..., description="Remote user")
    key_file: str = Field(..., description="Private key used for authentication")
    port: int = Field(default=22, ge=1, le=65535)

    @property
    def destination(self) -> str:
        return f"{self.user}@{self.host}"
