"""External tool runner: validate the conversion executable and run command lines."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional, Protocol, Sequence

from .exceptions import ExternalToolError, ExternalToolErrorKind
from .utils import run_subprocess, which

_LOGGER = logging.getLogger("svg2vector.runner")


class ToolRunner(Protocol):
    """Protocol for executing one command line synchronously."""

    def run(self, command: Sequence[str]) -> int:
        """Run *command*, wait for it and return its exit status.

        Launch failures raise :class:`OSError` or :class:`subprocess.SubprocessError`.
        """


class SubprocessRunner:
    """Runner implementation backed by :func:`subprocess.run`."""

    def __init__(self, timeout: Optional[float] = None) -> None:
        self.timeout = timeout

    def run(self, command: Sequence[str]) -> int:
        completed = run_subprocess(command, timeout=self.timeout)
        if completed.returncode != 0 and completed.stderr:
            _LOGGER.warning("Tool reported: %s", completed.stderr.strip())
        return completed.returncode


def check_executable(executable: Optional[str]) -> str:
    """Validate the conversion tool executable and return its path.

    A bare command name is looked up on ``PATH`` first; anything else is
    checked as a file path.
    """
    if executable is None or not executable.strip():
        raise ExternalToolError(
            f"expected tool executable, found <{executable}>",
            kind=ExternalToolErrorKind.BLANK,
            flag="inkscape-exec",
        )

    if os.sep not in executable and (os.altsep is None or os.altsep not in executable):
        found = which([executable])
        if found:
            return found

    path = Path(executable)
    if not path.exists():
        raise ExternalToolError(
            f"tool executable <{executable}> does not exist, please check path and filename",
            kind=ExternalToolErrorKind.MISSING,
            path=path,
            flag="inkscape-exec",
        )
    if not path.is_file():
        raise ExternalToolError(
            f"tool executable <{executable}> is not a file, please check path and filename",
            kind=ExternalToolErrorKind.NOT_A_FILE,
            path=path,
            flag="inkscape-exec",
        )
    if not os.access(path, os.X_OK):
        raise ExternalToolError(
            f"cannot execute tool executable <{executable}>, please check file permissions",
            kind=ExternalToolErrorKind.NOT_EXECUTABLE,
            path=path,
            flag="inkscape-exec",
        )
    return str(path)


__all__ = ["ToolRunner", "SubprocessRunner", "check_executable"]
