"""Filesystem side of a backup run: snapshots, force-includes and transfers."""

from .include import expand_force_includes
from .paths import normalize_rel_path, walk_tree
from .snapshot import take_snapshot
from .transfer import (
    copy_file,
    files_identical,
    remove_empty_dir,
    remove_file,
    same_permissions,
)

__all__ = [
    "copy_file",
    "expand_force_includes",
    "files_identical",
    "normalize_rel_path",
    "remove_empty_dir",
    "remove_file",
    "same_permissions",
    "take_snapshot",
    "walk_tree",
]
