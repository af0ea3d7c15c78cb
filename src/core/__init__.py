"""Shared domain models and the launch error taxonomy."""
