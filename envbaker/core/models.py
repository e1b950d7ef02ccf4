"""Domain models for workspace planning and copy outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field

from .errors import CopyError


class EnvironmentTarget(BaseModel):
    """A single environment copy inside the solution workspace."""

    prefix: str = Field(..., description="Environment prefix, e.g. SANDBOX_")
    name: str = Field(..., description="Environment directory name")
    path: Path = Field(..., description="Absolute environment directory path")


class WorkspacePlan(BaseModel):
    """Resolved layout of a solution workspace."""

    source: Path = Field(..., description="Source directory to replicate")
    solution_path: Path = Field(..., description="Per-solution workspace root")
    environments: list[EnvironmentTarget] = Field(
        default_factory=list, description="Environment copies in prefix order"
    )


class EnvironmentFailure(BaseModel):
    """An environment directory that could not be created."""

    target: EnvironmentTarget
    reason: str


class PreparedWorkspace(BaseModel):
    """Outcome of creating the workspace directories."""

    plan: WorkspacePlan
    ready: list[EnvironmentTarget] = Field(default_factory=list)
    failed: list[EnvironmentFailure] = Field(default_factory=list)


@dataclass(frozen=True)
class CopyResult:
    """Terminal outcome of one copy unit."""

    destination: Path
    error: CopyError | None = None
    elapsed: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None
