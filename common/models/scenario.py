"""Scenario models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from common.utils import sanitize_filename


class ScenarioFlags(BaseModel):
    """Feature toggles selected on the command line."""
    tls: bool = Field(default=True, description="Include the TLS variant")
    onload: bool = Field(default=True, description="Wrap processes with the offload command")
    onload_command: str = Field(default="", description="Offload wrapper, e.g. 'onload --profile=latency'")
    context: str = Field(default="", description="Free-form label added to output names")

    @property
    def offload_enabled(self) -> bool:
        return self.onload and bool(self.onload_command.strip())


class ScenarioDescriptor(BaseModel):
    """A named combination of toggles driving one sweep."""
    test_type: str = Field(..., description="Benchmark family, e.g. grpc")
    name: str = Field(..., description="Scenario name, e.g. grpc-streaming-tls-onload")
    tls: bool = False
    onload: bool = False
    context: Optional[str] = None

    @property
    def output_prefix(self) -> str:
        """Prefix for result files written by the remote benchmark."""
        if self.context:
            return sanitize_filename(f"{self.name}_{self.context}")
        return self.name
