"""Relative-path helpers shared by project space and backup space."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path


def normalize_rel_path(raw: str) -> str:
    """Return *raw* in native-separator form, or ``""`` when it is blank.

    git reports forward slashes on every platform, so both separators are
    folded to ``os.sep`` before normalising.
    """
    if not raw.strip():
        return ""
    return os.path.normpath(raw.replace("/", os.sep))


def walk_tree(root: Path, rel_dir: str = "") -> Iterator[tuple[str, bool]]:
    """Yield ``(rel_path, is_dir)`` for every entry below *root* in pre-order.

    Entries are visited in name order and symbolic links are never
    followed: a link is reported as a non-directory.  ``OSError`` from
    listing any directory propagates.
    """
    with os.scandir(os.path.join(root, rel_dir) if rel_dir else root) as it:
        entries = sorted(it, key=lambda entry: entry.name)

    for entry in entries:
        rel_path = os.path.join(rel_dir, entry.name) if rel_dir else entry.name
        if entry.is_dir(follow_symlinks=False):
            yield rel_path, True
            yield from walk_tree(root, rel_path)
        else:
            yield rel_path, False
