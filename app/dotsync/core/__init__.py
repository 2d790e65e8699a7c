"""Core configuration, orchestration and error types for dotsync."""
