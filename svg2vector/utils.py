"""Utility helpers for :mod:`svg2vector`."""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from typing import Optional, Sequence

_LOGGER = logging.getLogger("svg2vector")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Attach a single stream handler to the package logger and set its level.

    Quiet mode silences everything below CRITICAL; verbose mode shows the
    progress and detail messages (command lines, temporary paths).
    """
    logger = logging.getLogger("svg2vector")
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler):
            handler.setStream(sys.stderr)

    if quiet:
        logger.setLevel(logging.CRITICAL)
    elif verbose:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.WARNING)
    return logger


def which(executables: Sequence[str]) -> Optional[str]:
    """Return the first executable from *executables* found on ``PATH``."""

    for candidate in executables:
        found = shutil.which(candidate)
        if found:
            _LOGGER.debug("Detected external tool: %s -> %s", candidate, found)
            return found
    return None


def run_subprocess(
    command: Sequence[str],
    *,
    timeout: Optional[float] = None,
) -> subprocess.CompletedProcess:
    """Run *command* to completion capturing its output.

    The exit status is not checked; callers decide what a non-zero status means.
    """

    _LOGGER.debug("Executing command: %s", " ".join(command))
    completed = subprocess.run(
        list(command),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        check=False,
        text=True,
        errors="replace",
        timeout=timeout,
    )
    _LOGGER.debug(
        "Command finished with exit code %s\nstdout: %s\nstderr: %s",
        completed.returncode,
        completed.stdout,
        completed.stderr,
    )
    return completed


__all__ = ["configure_logging", "which", "run_subprocess"]
