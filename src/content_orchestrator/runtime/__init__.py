"""Agent execution loop, run state and lifecycle wrapper."""
