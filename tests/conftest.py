"""Shared fixtures for gitlocalbackup tests."""

from __future__ import annotations

import shutil
from collections.abc import Callable
from pathlib import Path

import pytest
from dulwich import porcelain
from dulwich.repo import Repo

_AUTHOR = b"Test <test@example.com>"


def commit_all(repo_path: Path, message: str = "commit") -> bytes:
    """Stage every file in *repo_path* outside ``.git`` and commit it."""
    paths = [
        str(p)
        for p in repo_path.rglob("*")
        if p.is_file() and ".git" not in p.relative_to(repo_path).parts
    ]
    porcelain.add(str(repo_path), paths=paths)
    return porcelain.commit(
        str(repo_path),
        message=message.encode("utf-8"),
        author=_AUTHOR,
        committer=_AUTHOR,
    )


def push_upstream(repo_path: Path, remote: str = "origin") -> str:
    """Point ``refs/remotes/<remote>/<branch>`` at the current HEAD.

    Stands in for ``git push`` without needing a real remote.  Returns the
    branch name.
    """
    repo = Repo(str(repo_path))
    try:
        refnames, sha = repo.refs.follow(b"HEAD")
        branch = refnames[-1][len(b"refs/heads/"):]
        repo.refs[b"refs/remotes/" + remote.encode() + b"/" + branch] = sha
    finally:
        repo.close()
    return branch.decode()


def detach_head(repo_path: Path) -> None:
    repo = Repo(str(repo_path))
    try:
        sha = repo.head()
    finally:
        repo.close()
    (repo_path / ".git" / "HEAD").write_bytes(sha + b"\n")


@pytest.fixture
def git_binary() -> str:
    """Path of the git executable; skips the test when git is missing."""
    git = shutil.which("git")
    if git is None:
        pytest.skip("git binary not installed")
    return git


@pytest.fixture
def projects_root(tmp_path: Path) -> Path:
    root = tmp_path / "projects"
    root.mkdir()
    return root


@pytest.fixture
def backup_root(tmp_path: Path) -> Path:
    root = tmp_path / "backup"
    root.mkdir()
    return root


@pytest.fixture
def make_project(projects_root: Path) -> Callable[..., Path]:
    """Factory creating a git project with *committed* files under the projects root."""

    def _make(name: str, committed: dict[str, str] | None = None) -> Path:
        path = projects_root / name
        path.mkdir()
        porcelain.init(str(path)).close()
        for rel_path, content in (committed or {}).items():
            target = path / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content)
        if committed:
            commit_all(path, "initial")
        return path

    return _make
