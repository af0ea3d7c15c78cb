"""Staging layout, run identity and storage backends."""
