"""Pydantic models for gitlocalbackup."""

from .backup import (
    BackupAction,
    BackupSnapshot,
    CandidateFile,
    ProjectDirectory,
    ReconcileResult,
)
from .config import BackupConfig

__all__ = [
    "BackupAction",
    "BackupConfig",
    "BackupSnapshot",
    "CandidateFile",
    "ProjectDirectory",
    "ReconcileResult",
]
