"""Ask a project's git repository which files are at risk of loss.

Ref inspection (current branch, upstream existence) goes through dulwich.
Listing untracked files and diffing the work tree against the upstream
ref use the ``git`` binary, since both depend on its ignore rules and
index handling.  Every invocation runs with ``cwd`` set to the project;
the process working directory is never changed.

Nothing here writes to the work tree, the index or the refs.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from pathlib import Path

from dulwich.errors import NotGitRepository
from dulwich.repo import Repo

from ..exceptions import GitCommandError, GitError, GitNotFoundError, NotAGitRepositoryError
from ..files.paths import normalize_rel_path

logger = logging.getLogger(__name__)

_BRANCH_PREFIX = b"refs/heads/"


def find_git_binary() -> str:
    """Return the full path of the ``git`` executable on ``$PATH``."""
    git = shutil.which("git")
    if git is None:
        raise GitNotFoundError("git executable not found on PATH")
    return git


def _split_paths(output: bytes) -> list[str]:
    """Split NUL-terminated ``-z`` output into normalised relative paths.

    Entries ending in ``/`` name directories (an embedded repository
    reported by ``ls-files --others``) and are dropped.
    """
    paths: list[str] = []
    for raw in output.split(b"\0"):
        if raw.endswith(b"/"):
            logger.debug("Ignoring directory entry %s", os.fsdecode(raw))
            continue
        rel_path = normalize_rel_path(os.fsdecode(raw))
        if rel_path:
            paths.append(rel_path)
    return paths


class GitQuery:
    """Read-only queries against the repository at *project_path*."""

    def __init__(self, project_path: Path, *, git_binary: str | None = None) -> None:
        self.project_path = project_path
        self.git_binary = git_binary or find_git_binary()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _open_repo(self) -> Repo:
        try:
            return Repo(str(self.project_path))
        except NotGitRepository as exc:
            raise NotAGitRepositoryError(
                f"Not a git repository: {self.project_path}"
            ) from exc

    def _run(self, *args: str) -> bytes:
        """Run ``git <args>`` inside the project and return stdout.

        ``--no-optional-locks`` keeps git from rewriting the project index
        while it runs.
        """
        try:
            result = subprocess.run(
                [self.git_binary, "--no-pager", "--no-optional-locks", *args],
                cwd=str(self.project_path),
                capture_output=True,
            )
        except FileNotFoundError as exc:
            raise GitNotFoundError(f"git executable not found: {self.git_binary}") from exc
        except OSError as exc:
            raise GitError(f"Failed to run git in {self.project_path}: {exc}") from exc

        if result.returncode != 0:
            raise GitCommandError(
                list(args),
                result.returncode,
                result.stderr.decode("utf-8", errors="replace"),
            )
        return result.stdout

    # ------------------------------------------------------------------
    # Refs
    # ------------------------------------------------------------------

    def current_branch(self) -> str | None:
        """Return the checked-out branch name, or ``None`` if HEAD is detached.

        An unborn branch (no commits yet) still reports its name.
        """
        repo = self._open_repo()
        try:
            refnames, _sha = repo.refs.follow(b"HEAD")
        finally:
            repo.close()

        target = refnames[-1]
        if not target.startswith(_BRANCH_PREFIX):
            return None
        return target[len(_BRANCH_PREFIX):].decode("utf-8", errors="replace")

    def has_upstream(self, remote: str, branch: str) -> bool:
        """Return ``True`` if ``refs/remotes/<remote>/<branch>`` exists."""
        ref = f"refs/remotes/{remote}/{branch}".encode()
        repo = self._open_repo()
        try:
            return ref in repo.refs
        finally:
            repo.close()

    # ------------------------------------------------------------------
    # File lists
    # ------------------------------------------------------------------

    def list_untracked(self) -> list[str]:
        """Untracked files not excluded by any ignore rule, repo-root relative."""
        output = self._run("ls-files", "--exclude-standard", "--others", "--full-name", "-z")
        return _split_paths(output)

    def list_unpushed(self, remote: str) -> list[str]:
        """Files whose work-tree state differs from ``<remote>/<branch>``.

        Covers commits not yet pushed as well as staged and unstaged
        changes.  Empty when HEAD is detached or the branch has no
        upstream counterpart under *remote*.
        """
        branch = self.current_branch()
        if branch is None:
            logger.debug("%s: detached HEAD, no unpushed files", self.project_path)
            return []

        if not self.has_upstream(remote, branch):
            logger.debug(
                "%s: no upstream %s/%s, no unpushed files", self.project_path, remote, branch
            )
            return []

        output = self._run("diff", "--name-only", "-z", f"refs/remotes/{remote}/{branch}", "--")
        return _split_paths(output)
