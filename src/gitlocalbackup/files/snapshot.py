"""Capture the current contents of the backup tree."""

from __future__ import annotations

import logging
from pathlib import Path

from ..exceptions import SnapshotError
from ..models.backup import BackupSnapshot
from .paths import walk_tree

logger = logging.getLogger(__name__)


def take_snapshot(backup_root: Path) -> BackupSnapshot:
    """Walk *backup_root* once and record every file and directory in it.

    Directories are listed in pre-order starting with ``"."`` (the root),
    so iterating them in reverse visits children before their parents.
    Symbolic links are recorded as files and never followed.
    """
    snapshot = BackupSnapshot(root=backup_root)

    try:
        for rel_path, is_dir in walk_tree(backup_root):
            if is_dir:
                snapshot.directories.append(rel_path)
            else:
                snapshot.files.add(rel_path)
    except OSError as exc:
        logger.error("Failed to read backup directory %s: %s", backup_root, exc)
        raise SnapshotError(f"Cannot read backup directory {backup_root}: {exc}") from exc

    logger.debug(
        "Backup snapshot of %s: %d files, %d directories",
        backup_root,
        len(snapshot.files),
        len(snapshot.directories),
    )
    return snapshot
