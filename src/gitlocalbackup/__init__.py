"""gitlocalbackup: mirror every unpushed file of local git projects into a backup tree."""

from ._version import __version__
from .config import async_load_config, load_config, merge_config
from .exceptions import (
    BackupError,
    ConfigError,
    FileError,
    FileTransferError,
    GitCommandError,
    GitError,
    GitNotFoundError,
    NotAGitRepositoryError,
    ProjectsRootError,
    SnapshotError,
)
from .git import GitQuery
from .manager import BackupManager
from .models import (
    BackupAction,
    BackupConfig,
    BackupSnapshot,
    CandidateFile,
    ProjectDirectory,
    ReconcileResult,
)
from .reconcile import Reconciler

__all__ = [
    "BackupAction",
    "BackupConfig",
    "BackupError",
    "BackupManager",
    "BackupSnapshot",
    "CandidateFile",
    "ConfigError",
    "FileError",
    "FileTransferError",
    "GitCommandError",
    "GitError",
    "GitNotFoundError",
    "GitQuery",
    "NotAGitRepositoryError",
    "ProjectDirectory",
    "ProjectsRootError",
    "ReconcileResult",
    "Reconciler",
    "SnapshotError",
    "__version__",
    "async_load_config",
    "load_config",
    "merge_config",
]
