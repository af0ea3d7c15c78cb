"""Auxiliary files copied into the runtime-config bundle."""
