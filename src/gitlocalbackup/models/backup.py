"""Backup-run models."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, computed_field


class ProjectDirectory(BaseModel):
    """A git project directly under the projects root."""

    name: str
    path: Path


class CandidateFile(BaseModel):
    """A project-relative path believed to need backing up."""

    project: str
    path: str

    @computed_field  # type: ignore[prop-decorator]
    @property
    def key(self) -> str:
        """Path relative to both the projects root and the backup root."""
        return os.path.join(self.project, self.path)


class BackupSnapshot(BaseModel):
    """Files and directories found in the backup tree at the start of a run.

    ``directories`` is in pre-order and always starts with ``"."``, the
    backup root itself.
    """

    root: Path
    files: set[str] = Field(default_factory=set)
    directories: list[str] = Field(default_factory=lambda: ["."])


class BackupAction(BaseModel):
    """A single copy, delete or prune decided by the reconciler."""

    op: Literal["copy", "delete", "prune"]
    path: str
    reason: Literal["new", "changed", "permissions"] | None = None
    error: str | None = None


class ReconcileResult(BaseModel):
    """Outcome of one reconciliation pass over the backup tree."""

    dry_run: bool = False
    actions: list[BackupAction] = Field(default_factory=list)
    skipped: int = 0
    vanished: list[str] = Field(default_factory=list)

    def _paths(self, op: str) -> list[str]:
        return [a.path for a in self.actions if a.op == op and a.error is None]

    @property
    def copied(self) -> list[str]:
        return self._paths("copy")

    @property
    def deleted(self) -> list[str]:
        return self._paths("delete")

    @property
    def pruned(self) -> list[str]:
        return self._paths("prune")

    @property
    def errors(self) -> list[BackupAction]:
        return [a for a in self.actions if a.error is not None]

    @property
    def succeeded(self) -> bool:
        return not self.errors
