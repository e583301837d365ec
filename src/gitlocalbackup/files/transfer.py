"""Byte-level file transfer into the backup tree.

Every function here acts on a single path and reports failure by raising
:class:`~gitlocalbackup.exceptions.FileError`; the reconciler decides
whether a failure is fatal.
"""

from __future__ import annotations

import errno
import os
import shutil
import stat
import tempfile
from contextlib import suppress
from pathlib import Path

from ..exceptions import FileError, FileTransferError

_CHUNK_SIZE = 64 * 1024


def copy_file(src: Path, dst: Path) -> None:
    """Copy *src* to *dst* byte for byte and replicate its permission bits.

    Missing parent directories of *dst* are created.  The bytes land in a
    temporary file beside *dst* which then replaces it, so a read-only
    earlier copy is overwritten and a failed copy leaves the old one intact.
    """
    tmp_path: str | None = None
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        # Temp name length is fixed so it fits wherever dst.name does.
        fd, tmp_path = tempfile.mkstemp(prefix=".glb-", suffix=".tmp", dir=dst.parent)
        with os.fdopen(fd, "wb") as out_fh, open(src, "rb") as in_fh:
            shutil.copyfileobj(in_fh, out_fh, _CHUNK_SIZE)
        shutil.copymode(src, tmp_path)
        os.replace(tmp_path, dst)
    except OSError as exc:
        if tmp_path is not None:
            with suppress(FileNotFoundError):
                os.unlink(tmp_path)
        raise FileTransferError(f"Failed to copy {src} to {dst}: {exc}") from exc


def files_identical(first: Path, second: Path) -> bool:
    """Return ``True`` if both files hold exactly the same bytes."""
    if os.path.getsize(first) != os.path.getsize(second):
        return False

    with open(first, "rb") as fh1, open(second, "rb") as fh2:
        while True:
            chunk1 = fh1.read(_CHUNK_SIZE)
            chunk2 = fh2.read(_CHUNK_SIZE)
            if chunk1 != chunk2:
                return False
            if not chunk1:
                return True


def same_permissions(first: Path, second: Path) -> bool:
    return stat.S_IMODE(os.stat(first).st_mode) == stat.S_IMODE(os.stat(second).st_mode)


def remove_file(path: Path) -> bool:
    """Delete *path*.  Returns ``False`` if it was already gone."""
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise FileError(f"Failed to remove {path}: {exc}") from exc
    return True


def remove_empty_dir(path: Path) -> bool:
    """Remove *path* if it is an empty directory.

    Returns ``False`` when the directory is not empty or no longer exists;
    any other failure raises :class:`FileError`.
    """
    try:
        path.rmdir()
    except FileNotFoundError:
        return False
    except OSError as exc:
        if exc.errno in (errno.ENOTEMPTY, errno.EEXIST):
            return False
        raise FileError(f"Failed to remove directory {path}: {exc}") from exc
    return True
