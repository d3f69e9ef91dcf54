"""Remote benchmark orchestration: sweeps, SSH execution and result collection."""
