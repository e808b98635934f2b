"""Error codes for CLI exit status, and project setup errors.

Every task failure is mapped onto an ``ErrorCode`` when the run is
aborted, so shell scripts and CI jobs can tell a broken project setup
apart from a failed release check.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Literal

__all__ = ["ErrorCode", "ProjectError", "ProjectErrorKind"]


class ErrorCode(IntEnum):
    """Exit codes for the dv runner.

    These values are used as process exit codes and should remain stable:
    - 0: Success
    - 1: User error (bad arguments, declined confirmation)
    - 2: Environment error (malformed project setup, missing tools)
    - 3: Build error (failed checks, tests, or release gating)
    - 5: I/O error (file not readable or writable)
    """

    OK = 0
    USER_ERROR = 1
    ENV_ERROR = 2
    BUILD_ERROR = 3
    IO_ERROR = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_error(self) -> bool:
        """Check if this code indicates an error."""
        return self != ErrorCode.OK


ProjectErrorKind = Literal["not_found", "malformed", "invalid_name", "config", "io"]


@dataclass(frozen=True, slots=True)
class ProjectError:
    """Error describing a project that cannot be loaded as-is.

    Attributes:
        kind: ``not_found`` for a missing conventional file, ``malformed``
            for unparseable input (no version string, unknown history
            format), ``invalid_name``, ``config`` or ``io``
        message: Error description
        hint: Optional fix suggestion
    """

    kind: ProjectErrorKind
    message: str
    hint: str | None = None
