"""Core engine, persistence and configuration for cleanctl."""
