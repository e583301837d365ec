"""Discover project directories and resolve which of their files to back up."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable
from pathlib import Path

from .exceptions import ProjectsRootError
from .files.include import expand_force_includes
from .files.paths import normalize_rel_path
from .git.query import GitQuery
from .models.backup import CandidateFile, ProjectDirectory

logger = logging.getLogger(__name__)

GIT_MARKER = ".git"


def discover_projects(projects_root: Path) -> list[ProjectDirectory]:
    """Return the git projects directly under *projects_root*, sorted by name.

    Plain files, symbolic links and directories without a ``.git`` entry
    are not projects and are skipped.
    """
    try:
        with os.scandir(projects_root) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as exc:
        logger.error("Failed to list projects directory %s: %s", projects_root, exc)
        raise ProjectsRootError(
            f"Cannot read projects directory {projects_root}: {exc}"
        ) from exc

    projects: list[ProjectDirectory] = []
    for entry in entries:
        if not entry.is_dir(follow_symlinks=False):
            continue
        path = projects_root / entry.name
        if not (path / GIT_MARKER).exists():
            logger.debug("Skipping non-git directory %s", path)
            continue
        projects.append(ProjectDirectory(name=entry.name, path=path))

    return projects


def resolve_candidates(
    project: ProjectDirectory,
    query: GitQuery,
    remote: str,
    force_includes: Iterable[str] = (),
) -> list[CandidateFile]:
    """Union everything at risk of loss in *project* into one candidate list.

    Sources are untracked files, files differing from ``<remote>/<branch>``
    and force-included paths.  Blank entries are dropped and each path is
    kept once, in first-seen order.
    """
    untracked = query.list_untracked()
    unpushed = query.list_unpushed(remote)
    forced = expand_force_includes(project.path, force_includes)

    seen: dict[str, None] = {}
    for raw in (*untracked, *unpushed, *forced):
        rel_path = normalize_rel_path(raw)
        if rel_path:
            seen.setdefault(rel_path, None)

    logger.debug(
        "%s: %d untracked, %d unpushed, %d force-included, %d candidates",
        project.name,
        len(untracked),
        len(unpushed),
        len(forced),
        len(seen),
    )
    return [CandidateFile(project=project.name, path=rel_path) for rel_path in seen]
