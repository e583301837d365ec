"""Decide, and carry out, the changes that bring the backup tree up to date.

A reconciliation runs three passes strictly in order:

1. **copy** every candidate whose backup copy is missing or different,
   claiming each existing backup file that is still wanted;
2. **delete** every backup file nobody claimed;
3. **prune** directories emptied by the deletions, deepest first, never
   the backup root itself.

A new copy whose path is taken by a stale backup entry of the other type
(a file where a directory is needed, or the reverse) clears that entry
during the copy pass so a single run converges.

In dry-run mode the same passes run with the same bookkeeping; actions
are recorded instead of performed, and prunes are predicted from the
files that would survive.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path
from typing import Literal

from .exceptions import FileError
from .files.transfer import (
    copy_file,
    files_identical,
    remove_empty_dir,
    remove_file,
    same_permissions,
)
from .models.backup import BackupAction, BackupSnapshot, CandidateFile, ReconcileResult

logger = logging.getLogger(__name__)

CopyReason = Literal["new", "changed", "permissions"]


class Reconciler:
    """Mirrors candidate files from *projects_root* into *backup_root*."""

    def __init__(
        self,
        projects_root: Path,
        backup_root: Path,
        *,
        dry_run: bool = False,
        compare_permissions: bool = False,
    ) -> None:
        self.projects_root = projects_root
        self.backup_root = backup_root
        self.dry_run = dry_run
        self.compare_permissions = compare_permissions

    def reconcile(
        self,
        candidates: Iterable[CandidateFile],
        snapshot: BackupSnapshot,
    ) -> ReconcileResult:
        """Run the copy, delete and prune passes and return what was done."""
        result = ReconcileResult(dry_run=self.dry_run)
        pending_deletion = set(snapshot.files)

        replaced: set[str] = set()
        copied = self._copy_pass(candidates, snapshot, pending_deletion, replaced, result)
        self._delete_pass(pending_deletion, result)
        if self.dry_run:
            surviving = (snapshot.files - pending_deletion - replaced) | copied
            self._predict_prune_pass(snapshot, surviving, copied, result)
        else:
            self._prune_pass(snapshot, copied, result)

        logger.info(
            "%s%d copied, %d deleted, %d pruned, %d unchanged, %d errors",
            "[dry run] " if self.dry_run else "",
            len(result.copied),
            len(result.deleted),
            len(result.pruned),
            result.skipped,
            len(result.errors),
        )
        return result

    # ------------------------------------------------------------------
    # Copy
    # ------------------------------------------------------------------

    def _copy_pass(
        self,
        candidates: Iterable[CandidateFile],
        snapshot: BackupSnapshot,
        pending_deletion: set[str],
        replaced: set[str],
        result: ReconcileResult,
    ) -> set[str]:
        """Copy new and changed candidates; return the keys chosen for copying.

        Stale backup entries of the wrong type in the way of a new copy are
        removed first and their keys added to *replaced*.
        """
        seen: set[str] = set()
        copied: set[str] = set()

        for candidate in candidates:
            key = candidate.key
            if key in seen:
                continue
            seen.add(key)

            src = self.projects_root / key
            # Reported as changed but deleted since; the delete pass handles it.
            if not os.path.exists(src):
                logger.debug("Skipping %s: no longer exists in the project", key)
                result.vanished.append(key)
                continue
            if os.path.isdir(src):
                logger.debug("Skipping %s: is a directory", key)
                continue

            reason: CopyReason | None = "new"
            if key in snapshot.files:
                pending_deletion.discard(key)
                reason = self._change_reason(src, self.backup_root / key)
                if reason is None:
                    result.skipped += 1
                    continue
            else:
                self._clear_path(key, snapshot, pending_deletion, replaced, result)

            copied.add(key)
            result.actions.append(self._copy(src, key, reason))

        return copied

    def _clear_path(
        self,
        key: str,
        snapshot: BackupSnapshot,
        pending_deletion: set[str],
        replaced: set[str],
        result: ReconcileResult,
    ) -> None:
        """Remove stale backup files or directories that occupy *key* or its parents."""
        was_directory = key in snapshot.directories
        blocking = [parent for parent in _parents(key) if parent in pending_deletion]
        if was_directory:
            prefix = key + os.sep
            blocking.extend(sorted(p for p in pending_deletion if p.startswith(prefix)))

        for path in blocking:
            pending_deletion.discard(path)
            replaced.add(path)
            self._delete(path, result)

        if was_directory:
            for rel_dir in reversed(snapshot.directories):
                if _is_within(rel_dir, key):
                    self._prune(rel_dir, result)

    def _change_reason(self, src: Path, dst: Path) -> CopyReason | None:
        """Why *dst* must be refreshed from *src*, or ``None`` if it is current."""
        try:
            if not files_identical(src, dst):
                return "changed"
            if self.compare_permissions and not same_permissions(src, dst):
                return "permissions"
        except OSError as exc:
            logger.debug("Cannot compare %s with its backup copy: %s", src, exc)
            return "changed"
        return None

    def _copy(self, src: Path, key: str, reason: CopyReason) -> BackupAction:
        action = BackupAction(op="copy", path=key, reason=reason)
        if self.dry_run:
            return action

        try:
            copy_file(src, self.backup_root / key)
        except FileError as exc:
            logger.warning("%s", exc)
            action.error = str(exc)
        else:
            logger.info("Copied %s (%s)", key, reason)
        return action

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    def _delete_pass(self, pending_deletion: set[str], result: ReconcileResult) -> None:
        for key in sorted(pending_deletion):
            self._delete(key, result)

    def _delete(self, key: str, result: ReconcileResult) -> None:
        action = BackupAction(op="delete", path=key)
        result.actions.append(action)
        if self.dry_run:
            return

        try:
            if remove_file(self.backup_root / key):
                logger.info("Deleted %s", key)
            else:
                logger.debug("%s was already removed", key)
        except FileError as exc:
            logger.warning("%s", exc)
            action.error = str(exc)

    # ------------------------------------------------------------------
    # Prune
    # ------------------------------------------------------------------

    def _prune_pass(
        self, snapshot: BackupSnapshot, copied: set[str], result: ReconcileResult
    ) -> None:
        # Index 0 is the backup root.
        for rel_dir in reversed(snapshot.directories[1:]):
            if not _replaced_by_copy(rel_dir, copied):
                self._prune(rel_dir, result)

    def _prune(self, rel_dir: str, result: ReconcileResult) -> None:
        if self.dry_run:
            result.actions.append(BackupAction(op="prune", path=rel_dir))
            return

        try:
            removed = remove_empty_dir(self.backup_root / rel_dir)
        except FileError as exc:
            logger.warning("%s", exc)
            result.actions.append(BackupAction(op="prune", path=rel_dir, error=str(exc)))
            return

        if removed:
            logger.info("Removed empty directory %s", rel_dir)
            result.actions.append(BackupAction(op="prune", path=rel_dir))

    def _predict_prune_pass(
        self,
        snapshot: BackupSnapshot,
        surviving: set[str],
        copied: set[str],
        result: ReconcileResult,
    ) -> None:
        occupied: set[str] = set()
        for path in surviving:
            parent = os.path.dirname(path)
            while parent and parent not in occupied:
                occupied.add(parent)
                parent = os.path.dirname(parent)

        for rel_dir in reversed(snapshot.directories[1:]):
            if rel_dir not in occupied and not _replaced_by_copy(rel_dir, copied):
                result.actions.append(BackupAction(op="prune", path=rel_dir))


def _parents(path: str) -> list[str]:
    """Ancestors of *path*, nearest last, excluding the root."""
    parents: list[str] = []
    parent = os.path.dirname(path)
    while parent:
        parents.append(parent)
        parent = os.path.dirname(parent)
    return parents[::-1]


def _is_within(path: str, directory: str) -> bool:
    return path == directory or path.startswith(directory + os.sep)


def _replaced_by_copy(rel_dir: str, copied: set[str]) -> bool:
    """Whether a file copied this run now stands at or above *rel_dir*."""
    return rel_dir in copied or any(parent in copied for parent in _parents(rel_dir))
