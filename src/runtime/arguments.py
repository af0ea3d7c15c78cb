# src/runtime/arguments.py — v1
"""Startup arguments codec: global arguments plus per-runnable arguments."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field


class Arguments(BaseModel):
    """Ordered startup arguments. Order is positional at execution time."""

    arguments: list[str] = Field(default_factory=list)
    runnable_arguments: dict[str, list[str]] = Field(default_factory=dict)

    def for_runnable(self, name: str) -> list[str]:
        """Global arguments followed by the runnable's own."""
        return [*self.arguments, *self.runnable_arguments.get(name, [])]


def save_arguments(arguments: Arguments, path: Path) -> None:
    path.write_text(arguments.model_dump_json(indent=2), encoding="utf-8")


def load_arguments(path: Path) -> Arguments:
    return Arguments.model_validate_json(path.read_text(encoding="utf-8"))
