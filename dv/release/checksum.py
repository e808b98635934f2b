"""Release package checksums."""

from __future__ import annotations

import hashlib
from pathlib import Path

from dv.core.result import Err, Ok, Result
from dv.platform.files import atomic_write_text
from dv.release.errors import ReleaseError

__all__ = ["file_digest", "write_checksum"]

_CHUNK_SIZE = 1024 * 1024


def file_digest(path: Path, algorithm: str = "sha512") -> str:
    h = hashlib.new(algorithm)
    with path.open("rb") as f:
        for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
            h.update(chunk)
    return h.hexdigest()


def write_checksum(package: Path, dest: Path) -> Result[str, ReleaseError]:
    """Write the sha512 of ``package`` to ``dest`` and return the digest."""
    try:
        digest = file_digest(package)
    except OSError as e:
        return Err(
            ReleaseError(
                kind="io",
                message=f"Cannot read {package.name}: {e}",
                hint="Run 'dv run package' first",
            )
        )

    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        atomic_write_text(dest, digest)
    except OSError as e:
        return Err(ReleaseError(kind="io", message=f"Cannot write {dest}: {e}"))
    return Ok(digest)
