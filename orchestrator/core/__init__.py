"""Sweep expansion, run orchestration and result collection."""
