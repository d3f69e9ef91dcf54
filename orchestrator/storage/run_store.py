"""Run history storage using SQLite."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

import aiosqlite

from common.models.run import RunOutcome
from common.utils import ensure_dir

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
-- One row per scenario driver invocation
CREATE TABLE IF NOT EXISTS sweeps (
    id TEXT PRIMARY KEY,
    test_type TEXT NOT NULL,
    context TEXT,
    status TEXT DEFAULT 'running',
    started_at TIMESTAMP,
    completed_at TIMESTAMP,
    archive_path TEXT,
    error_message TEXT
);

CREATE INDEX IF NOT EXISTS idx_sweeps_started ON sweeps(started_at);

-- One row per executed run
CREATE TABLE IF NOT EXISTS runs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    sweep_id TEXT NOT NULL,
    scenario TEXT NOT NULL,
    message_rate TEXT,
    message_length INTEGER,
    burst_size INTEGER,
    run_index INTEGER,
    status TEXT,
    exit_code INTEGER,
    failed_step TEXT,
    error_message TEXT,
    started_at TIMESTAMP,
    duration_seconds REAL,
    FOREIGN KEY (sweep_id) REFERENCES sweeps(id)
);

CREATE INDEX IF NOT EXISTS idx_runs_sweep ON runs(sweep_id);
"""


class SweepStatus(str, Enum):
    """Lifecycle of a recorded sweep."""
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class RunStore:
    """History of sweeps and their runs."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        ensure_dir(self.db_path.parent)
        self._init_database_sync()

    def _init_database_sync(self) -> None:
        """Initialize SQLite database synchronously."""
        conn = sqlite3.connect(self.db_path)
        try:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
            logger.debug(f"Initialized run history at {self.db_path}")
        finally:
            conn.close()

    # ==================== Sweeps ====================

    async def create_sweep(self, sweep_id: str, test_type: str, context: Optional[str] = None) -> None:
        async with aiosqlite.connect(self.db_path) as conn:
            await conn.execute(
                "INSERT INTO sweeps (id, test_type, context, status, started_at) VALUES (?, ?, ?, ?, ?)",
                (sweep_id, test_type, context, SweepStatus.RUNNING.value, datetime.utcnow().isoformat()),
            )
            await conn.commit()
        logger.info(f"Recording sweep {sweep_id}")

    async def complete_sweep(
        self,
        sweep_id: str,
        status: SweepStatus = SweepStatus.COMPLETED,
        archive_path: Optional[str] = None,
        error_message: Optional[str] = None,
    ) -> None:
        async with aiosqlite.connect(self.db_path) as conn:
            await conn.execute("""
                UPDATE sweeps SET
                    status = ?,
                    completed_at = ?,
                    archive_path = COALESCE(?, archive_path),
                    error_message = ?
                WHERE id = ?
            """, (
                SweepStatus(status).value,
                datetime.utcnow().isoformat(),
                archive_path,
                error_message,
                sweep_id,
            ))
            await conn.commit()

    async def get_sweep(self, sweep_id: str) -> Optional[dict]:
        async with aiosqlite.connect(self.db_path) as conn:
            conn.row_factory = aiosqlite.Row
            cursor = await conn.execute("SELECT * FROM sweeps WHERE id = ?", (sweep_id,))
            row = await cursor.fetchone()
            return dict(row) if row else None

    async def list_sweeps(self, limit: int = 20) -> list[dict]:
        async with aiosqlite.connect(self.db_path) as conn:
            conn.row_factory = aiosqlite.Row
            cursor = await conn.execute(
                "SELECT * FROM sweeps ORDER BY started_at DESC, rowid DESC LIMIT ?", (limit,)
            )
            rows = await cursor.fetchall()
            return [dict(row) for row in rows]

    # ==================== Runs ====================

    async def record_run(self, sweep_id: str, outcome: RunOutcome) -> None:
        config = outcome.configuration
        async with aiosqlite.connect(self.db_path) as conn:
            await conn.execute("""
                INSERT INTO runs (
                    sweep_id, scenario, message_rate, message_length, burst_size, run_index,
                    status, exit_code, failed_step, error_message, started_at, duration_seconds
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                sweep_id,
                outcome.scenario,
                config.message_rate,
                config.message_length,
                config.burst_size,
                config.run_index,
                outcome.status.value,
                outcome.exit_code,
                outcome.failed_step,
                outcome.error_message,
                outcome.started_at.isoformat(),
                outcome.duration_seconds,
            ))
            await conn.commit()

    async def get_runs(self, sweep_id: str) -> list[dict]:
        async with aiosqlite.connect(self.db_path) as conn:
            conn.row_factory = aiosqlite.Row
            cursor = await conn.execute(
                "SELECT * FROM runs WHERE sweep_id = ? ORDER BY id", (sweep_id,)
            )
            rows = await cursor.fetchall()
            return [dict(row) for row in rows]
