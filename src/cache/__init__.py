"""Shared content cache for launch artifacts, keyed by name."""
