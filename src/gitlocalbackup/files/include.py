"""Expand force-included paths into individual project-relative files.

Force-include lists are shared by every project, so entries that do not
exist in a given project are skipped without comment.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .paths import normalize_rel_path, walk_tree

logger = logging.getLogger(__name__)


def expand_force_includes(project_path: Path, rel_paths: Iterable[str]) -> list[str]:
    """Return every file named by *rel_paths*, relative to *project_path*.

    A file (or any non-directory entry) is returned as-is; a directory is
    replaced by all non-directory entries beneath it.
    """
    expanded: list[str] = []

    for raw in rel_paths:
        rel_path = normalize_rel_path(raw)
        if not rel_path:
            continue

        target = project_path / rel_path
        try:
            is_dir = target.is_dir()
            exists = is_dir or os.path.lexists(target)
        except OSError as exc:
            logger.error("Cannot inspect force-included path %s: %s", target, exc)
            raise

        if not exists:
            logger.debug("Force-included path %s not present in %s", rel_path, project_path)
            continue

        if not is_dir:
            expanded.append(rel_path)
            continue

        for entry_path, entry_is_dir in walk_tree(target):
            if not entry_is_dir:
                expanded.append(os.path.normpath(os.path.join(rel_path, entry_path)))

    return expanded
