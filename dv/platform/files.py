"""Filesystem helpers."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

__all__ = ["atomic_write_text", "create_exclusive", "replace_file"]


def atomic_write_text(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Write text to path atomically using temp file + replace.

    The file ends up with mode 0644; ``replace_file`` restores an existing
    file's own mode afterwards.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.",
        suffix=".tmp",
        dir=str(path.parent),
    )
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink(missing_ok=True)


def replace_file(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Atomically rewrite an existing file, keeping its mode and ownership.

    The temp file is created with mkstemp's 0600 mode, so the original
    permission bits are copied over after the rename. Ownership is restored
    when the process is allowed to chown; otherwise it stays with the
    current user.
    """
    try:
        st = path.stat()
    except FileNotFoundError:
        atomic_write_text(path, content, encoding=encoding)
        return

    atomic_write_text(path, content, encoding=encoding)
    os.chmod(path, st.st_mode & 0o7777)
    if hasattr(os, "chown"):
        try:
            os.chown(path, st.st_uid, st.st_gid)
        except PermissionError:
            pass


def create_exclusive(path: Path, content: str, *, encoding: str = "utf-8") -> None:
    """Create a new file with mode 0644, failing if it already exists.

    Raises:
        FileExistsError: If ``path`` exists.
    """
    flags = os.O_WRONLY | os.O_CREAT | os.O_EXCL
    fd = os.open(path, flags, 0o644)
    with os.fdopen(fd, "w", encoding=encoding, newline="") as handle:
        handle.write(content)
