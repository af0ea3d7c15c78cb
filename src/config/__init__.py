"""Typed settings loaded from the environment and .env."""
