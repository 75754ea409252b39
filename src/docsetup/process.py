"""Thin wrapper around :mod:`subprocess` for the external tools we drive."""

from __future__ import annotations

import logging
import subprocess  # nosec B404
from collections.abc import Sequence
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Outcome of a finished external command."""

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        """Combined stdout and stderr, as shown to the operator."""
        return "\n".join(part for part in (self.stdout.strip(), self.stderr.strip()) if part)


def run_command(command: Sequence[str], *, timeout: float) -> CommandResult:
    """Run ``command`` to completion and capture its output.

    The exit status is never checked here; callers decide what a non-zero
    status means. ``FileNotFoundError`` and ``subprocess.TimeoutExpired``
    propagate unchanged.
    """
    logger.debug("Running %s (timeout %ss)", " ".join(command), timeout)
    completed = subprocess.run(  # noqa: S603
        list(command),
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=False,
        timeout=timeout,
    )
    result = CommandResult(
        command=tuple(command),
        returncode=completed.returncode,
        stdout=completed.stdout or "",
        stderr=completed.stderr or "",
    )
    logger.debug("%s exited with %d", command[0], result.returncode)
    return result


def timeout_output(exc: subprocess.TimeoutExpired) -> str:
    """Return whatever output a timed-out command produced before it was killed."""
    parts = []
    for stream in (exc.stdout, exc.stderr):
        if not stream:
            continue
        if isinstance(stream, bytes):
            stream = stream.decode("utf-8", errors="replace")
        parts.append(stream.strip())
    return "\n".join(part for part in parts if part)


__all__ = ["CommandResult", "run_command", "timeout_output"]
