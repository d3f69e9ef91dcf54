"""Remote command execution over SSH."""
