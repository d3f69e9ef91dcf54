"""Common utility functions."""

from __future__ import annotations

import re
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional

import yaml


ARCHIVE_TIMESTAMP_FORMAT = "%Y-%m-%d-%H-%M-%S"


def generate_id(prefix: str = "") -> str:
    """Generate a unique identifier."""
    timestamp = datetime.utcnow().strftime("%Y%m%d_%H%M%S")
    short_uuid = uuid.uuid4().hex[:8]
    if prefix:
        return f"{prefix}_{timestamp}_{short_uuid}"
    return f"{timestamp}_{short_uuid}"


def generate_sweep_id() -> str:
    """Generate a sweep ID."""
    return generate_id("sweep")


def archive_timestamp(now: Optional[datetime] = None) -> str:
    """Timestamp used as the leading part of result archive names."""
    return (now or datetime.now()).strftime(ARCHIVE_TIMESTAMP_FORMAT)


def parse_csv(value: str) -> list[str]:
    """Split a comma-separated option value, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_int_csv(value: str) -> list[int]:
    """Split a comma-separated option value into integers."""
    items = parse_csv(value)
    try:
        return [int(item) for item in items]
    except ValueError:
        raise ValueError(f"Invalid integer list: {value}")


def format_duration(seconds: int) -> str:
    """Format seconds to human-readable duration."""
    if seconds < 60:
        return f"{seconds}s"
    elif seconds < 3600:
        minutes = seconds // 60
        secs = seconds % 60
        return f"{minutes}m {secs}s"
    else:
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        secs = seconds % 60
        return f"{hours}h {minutes}m {secs}s"


def load_yaml(path: str | Path) -> dict:
    """Load a YAML file."""
    with open(path, 'r') as f:
        return yaml.safe_load(f) or {}


def save_yaml(path: str | Path, data: dict) -> None:
    """Save data to a YAML file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)


def ensure_dir(path: str | Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def sanitize_filename(name: str) -> str:
    """Sanitize a string to be used as a filename."""
    # Replace spaces with underscores
    name = name.replace(' ', '_')
    # Remove any characters that aren't alphanumeric, underscore, hyphen, or dot
    name = re.sub(r'[^\w\-.]', '', name)
    # Limit length
    return name[:255]


class Timer:
    """Simple context manager for timing code blocks."""

    def __init__(self):
        self.start_time: datetime | None = None
        self.end_time: datetime | None = None

    def __enter__(self):
        self.start_time = datetime.utcnow()
        return self

    def __exit__(self, *args):
        self.end_time = datetime.utcnow()

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None:
            return 0
        end = self.end_time or datetime.utcnow()
        return (end - self.start_time).total_seconds()
