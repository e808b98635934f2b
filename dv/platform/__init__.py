"""Platform abstraction layer: subprocesses and file replacement."""

from .files import (
    atomic_write_text,
    create_exclusive,
    replace_file,
)
from .process import (
    ProcessError,
    run,
    run_silent,
)

__all__ = [
    # files
    "atomic_write_text",
    "create_exclusive",
    "replace_file",
    # process
    "ProcessError",
    "run",
    "run_silent",
]
