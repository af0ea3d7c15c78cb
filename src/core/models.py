# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

Program description (ProgramSpec, RunnableSpec, LocalFileRef), launch
target (ProgramRun, ClusterInfo) and the dispatch payload (LaunchRequest).
No module redefines these types; all imports come from core.models.
"""

from __future__ import annotations

from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field


# === RUN IDENTITY ===


class ProgramRun(BaseModel):
    """Identifies one execution of a program."""

    model_config = ConfigDict(frozen=True)

    namespace: str = "default"
    application: str
    program: str
    run_id: str

    @property
    def qualified_name(self) -> str:
        return f"{self.namespace}.{self.application}.{self.program}"


class ClusterInfo(BaseModel):
    """Target cluster identity handed to the cluster launcher."""

    model_config = ConfigDict(frozen=True)

    name: str
    properties: dict[str, str] = Field(default_factory=dict)


# === PROGRAM DESCRIPTION ===


class ResourceSpec(BaseModel):
    """Container resource requirements for a runnable."""

    virtual_cores: int = 1
    memory_mb: int = 512
    instances: int = 1


class LocalFileRef(BaseModel):
    """A file a runnable needs at runtime.

    Declared refs may lack size and last_modified; resolved refs carry both
    and point at something the cluster launcher can read.
    """

    name: str
    uri: str
    archive: bool = False
    pattern: str | None = None
    last_modified: int | None = None  # epoch millis
    size: int | None = None

    @property
    def scheme(self) -> str | None:
        return urlparse(self.uri).scheme or None

    @property
    def is_resolved(self) -> bool:
        return self.size is not None and self.last_modified is not None


class RunnableSpec(BaseModel):
    """The single program unit launched by a preparer."""

    name: str
    entry_point: str
    resources: ResourceSpec = Field(default_factory=ResourceSpec)
    local_files: list[LocalFileRef] = Field(default_factory=list)

    @property
    def entry_module(self) -> str:
        """Module part of a ``module:callable`` entry point."""
        return self.entry_point.partition(":")[0]


class EventHandlerSpec(BaseModel):
    """Event handler the remote agent instantiates around the run."""

    class_name: str
    configs: dict[str, str] = Field(default_factory=dict)

    @property
    def module(self) -> str:
        return self.class_name.partition(":")[0]


class ProgramSpec(BaseModel):
    """Description of a runnable program."""

    name: str
    runnables: dict[str, RunnableSpec]
    orders: list[list[str]] = Field(default_factory=list)
    event_handler: EventHandlerSpec | None = None


# === INTERPRETER OPTIONS ===


class DebugOptions(BaseModel):
    """Remote debugging switches for selected runnables."""

    enabled: bool = False
    do_suspend: bool = False
    runnables: list[str] = Field(default_factory=list)

    def is_debug_runnable(self, name: str) -> bool:
        return self.enabled and (not self.runnables or name in self.runnables)


class InterpreterOptions(BaseModel):
    """Extra options for the container interpreter process."""

    extra_options: str = ""
    runnable_extra_options: dict[str, str] = Field(default_factory=dict)
    debug_options: DebugOptions = Field(default_factory=DebugOptions)

    def for_runnable(self, name: str) -> str:
        return self.runnable_extra_options.get(name, self.extra_options)


# === DISPATCH ===


class LaunchFile(BaseModel):
    """One file entry of a launch request."""

    name: str
    uri: str
    archive: bool = False


class LaunchRequest(BaseModel):
    """Payload handed to the external cluster launcher."""

    run_id: str
    cluster_name: str
    files: list[LaunchFile]
    cluster_properties: dict[str, str] = Field(default_factory=dict)


class Location(BaseModel):
    """A materialized artifact returned by the content cache."""

    name: str
    uri: str
    size: int
    last_modified: int  # epoch millis

    def as_local_file(self, name: str, archive: bool) -> LocalFileRef:
        return LocalFileRef(
            name=name,
            uri=self.uri,
            archive=archive,
            last_modified=self.last_modified,
            size=self.size,
        )
