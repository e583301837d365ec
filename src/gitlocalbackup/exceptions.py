"""Exception hierarchy for gitlocalbackup."""

from __future__ import annotations


class BackupError(Exception):
    """Base exception for all gitlocalbackup errors."""


class GitError(BackupError):
    """Error while querying a project's git repository."""


class GitNotFoundError(GitError):
    """The ``git`` executable could not be located on ``$PATH``."""


class NotAGitRepositoryError(GitError):
    """A project directory is not a git repository."""


class GitCommandError(GitError):
    """A ``git`` invocation exited with a non-zero status."""

    def __init__(self, args: list[str], returncode: int, stderr: str) -> None:
        self.args_list = args
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or f"exit status {returncode}"
        super().__init__(f"git {' '.join(args)} failed: {detail}")


class ConfigError(BackupError):
    """Invalid or unreadable configuration."""


class ProjectsRootError(BackupError):
    """The projects root directory could not be listed."""


class SnapshotError(BackupError):
    """The backup directory could not be walked."""


class FileError(BackupError):
    """Error during a file operation."""


class FileTransferError(FileError):
    """Copying a file into the backup tree failed."""
