"""Orchestrates one backup run.

Discovery (projects, git queries, backup snapshot) finishes before the
reconciler touches the backup tree, so a fatal discovery error never
leaves a half-updated backup behind.
"""

from __future__ import annotations

import asyncio
import logging

from .exceptions import BackupError, SnapshotError
from .files.snapshot import take_snapshot
from .git.query import GitQuery, find_git_binary
from .models.backup import BackupSnapshot, CandidateFile, ProjectDirectory, ReconcileResult
from .models.config import BackupConfig
from .projects import discover_projects, resolve_candidates
from .reconcile import Reconciler

logger = logging.getLogger(__name__)


class BackupManager:
    """Mirrors at-risk files of every project under ``config.projects_dir``.

    The constructor accepts plain values; nothing is read from the
    environment.
    """

    def __init__(self, config: BackupConfig, *, git_binary: str | None = None) -> None:
        self.config = config
        self.projects_root = config.projects_dir
        self.backup_root = config.backup_dir
        self._git_binary = git_binary

    @property
    def git_binary(self) -> str:
        if self._git_binary is None:
            self._git_binary = find_git_binary()
        return self._git_binary

    # ------------------------------------------------------------------
    # Discovery
    # ------------------------------------------------------------------

    def discover_projects(self) -> list[ProjectDirectory]:
        projects = discover_projects(self.projects_root)
        logger.debug("Found %d projects in %s", len(projects), self.projects_root)
        return projects

    def collect_candidates(self, projects: list[ProjectDirectory]) -> list[CandidateFile]:
        """Resolve candidates for each project in turn."""
        candidates: list[CandidateFile] = []
        for project in projects:
            query = GitQuery(project.path, git_binary=self.git_binary)
            try:
                candidates.extend(
                    resolve_candidates(
                        project,
                        query,
                        self.config.remote_branch,
                        self.config.force_include,
                    )
                )
            except BackupError as exc:
                logger.error("Failed to query project %s: %s", project.name, exc)
                raise
        return candidates

    def take_snapshot(self) -> BackupSnapshot:
        """Snapshot the backup tree; a missing root counts as empty.

        In live mode the missing root is created first.
        """
        if not self.backup_root.exists():
            if self.config.dry_run:
                logger.info("Backup directory %s does not exist yet", self.backup_root)
                return BackupSnapshot(root=self.backup_root)
            try:
                self.backup_root.mkdir(parents=True)
            except OSError as exc:
                raise SnapshotError(
                    f"Cannot create backup directory {self.backup_root}: {exc}"
                ) from exc
            logger.info("Created backup directory %s", self.backup_root)
        return take_snapshot(self.backup_root)

    # ------------------------------------------------------------------
    # Run
    # ------------------------------------------------------------------

    def run(self) -> ReconcileResult:
        """Bring the backup tree in line with the current project state."""
        logger.debug("Using git at %s", self.git_binary)
        projects = self.discover_projects()
        candidates = self.collect_candidates(projects)
        snapshot = self.take_snapshot()

        reconciler = Reconciler(
            self.projects_root,
            self.backup_root,
            dry_run=self.config.dry_run,
            compare_permissions=self.config.compare_permissions,
        )
        result = reconciler.reconcile(candidates, snapshot)
        logger.info(
            "Backed up %d projects from %s to %s",
            len(projects),
            self.projects_root,
            self.backup_root,
        )
        return result

    async def async_run(self) -> ReconcileResult:
        """Run :meth:`run` in a worker thread via ``asyncio.to_thread``."""
        return await asyncio.to_thread(self.run)
