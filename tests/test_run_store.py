"""Unit tests for RunStore."""

import pytest

from common.models.run import RunOutcome, RunStatus
from orchestrator.storage.run_store import SweepStatus


@pytest.mark.asyncio
class TestRunStore:
    """Tests for RunStore."""

    async def test_create_and_get_sweep(self, run_store):
        await run_store.create_sweep("sweep-1", "grpc", "ctx")

        sweep = await run_store.get_sweep("sweep-1")

        assert sweep["test_type"] == "grpc"
        assert sweep["context"] == "ctx"
        assert sweep["status"] == "running"
        assert sweep["completed_at"] is None

    async def test_get_missing_sweep(self, run_store):
        assert await run_store.get_sweep("nope") is None

    async def test_complete_sweep(self, run_store):
        await run_store.create_sweep("sweep-1", "grpc")

        await run_store.complete_sweep("sweep-1", SweepStatus.COMPLETED, archive_path="/tmp/a.tar.gz")

        sweep = await run_store.get_sweep("sweep-1")
        assert sweep["status"] == "completed"
        assert sweep["archive_path"] == "/tmp/a.tar.gz"
        assert sweep["completed_at"] is not None

    async def test_failed_sweep_keeps_error(self, run_store):
        await run_store.create_sweep("sweep-1", "grpc")

        await run_store.complete_sweep("sweep-1", SweepStatus.FAILED, error_message="client run failed")

        sweep = await run_store.get_sweep("sweep-1")
        assert sweep["status"] == "failed"
        assert sweep["error_message"] == "client run failed"
        assert sweep["archive_path"] is None

    async def test_list_sweeps_newest_first(self, run_store):
        for sweep_id in ("a", "b", "c"):
            await run_store.create_sweep(sweep_id, "grpc")

        sweeps = await run_store.list_sweeps(limit=2)

        assert [s["id"] for s in sweeps] == ["c", "b"]

    async def test_record_and_get_runs(self, run_store, sample_configuration):
        await run_store.create_sweep("sweep-1", "grpc")
        await run_store.record_run("sweep-1", RunOutcome(
            scenario="grpc-streaming",
            configuration=sample_configuration,
            status=RunStatus.FAILED,
            exit_code=3,
            failed_step="client run",
            error_message="boom",
            duration_seconds=1.5,
        ))

        runs = await run_store.get_runs("sweep-1")

        assert len(runs) == 1
        run = runs[0]
        assert run["scenario"] == "grpc-streaming"
        assert run["message_rate"] == "1001K"
        assert run["message_length"] == 32
        assert run["status"] == "failed"
        assert run["exit_code"] == 3
        assert run["failed_step"] == "client run"
        assert run["duration_seconds"] == 1.5

    async def test_runs_are_scoped_to_sweep(self, run_store):
        await run_store.create_sweep("sweep-1", "grpc")

        assert await run_store.get_runs("other") == []
