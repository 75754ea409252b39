"""Environment probe run before anything on disk is touched.

Checks that the configured interpreter is on ``PATH`` and recent enough,
and reports whether MkDocs can already be imported by it.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess  # nosec B404
from dataclasses import dataclass
from pathlib import Path

from docsetup.config import SetupSettings
from docsetup.exceptions import EnvironmentProbeError, InterpreterNotFoundError
from docsetup.process import run_command

logger = logging.getLogger(__name__)

_VERSION_PATTERN = re.compile(r"(\d+)\.(\d+)(?:\.(\d+))?")


@dataclass(frozen=True, slots=True)
class ProbeResult:
    """Capabilities of the host, as seen by the probe.

    Attributes:
        interpreter: Absolute path of the resolved interpreter
        version: Version string reported by ``--version`` (e.g. "Python 3.12.1")
        mkdocs_available: True if ``import mkdocs`` succeeds in that interpreter
        config_present: True if the configuration document exists

    """

    interpreter: str
    version: str
    mkdocs_available: bool
    config_present: bool

    @property
    def interpreter_present(self) -> bool:
        return bool(self.interpreter)


def parse_version(text: str) -> tuple[int, int] | None:
    """Extract ``(major, minor)`` from a ``--version`` banner."""
    match = _VERSION_PATTERN.search(text)
    if match is None:
        return None
    return int(match.group(1)), int(match.group(2))


def probe_interpreter(settings: SetupSettings) -> tuple[str, str]:
    """Resolve the interpreter and return ``(path, version string)``."""
    interpreter = shutil.which(settings.python)
    if not interpreter:
        raise InterpreterNotFoundError(settings.python)

    try:
        result = run_command([interpreter, "--version"], timeout=settings.probe_timeout)
    except (FileNotFoundError, PermissionError) as exc:
        raise InterpreterNotFoundError(settings.python) from exc
    except subprocess.TimeoutExpired as exc:
        msg = f"{settings.python} --version did not answer within {settings.probe_timeout}s"
        raise EnvironmentProbeError(msg) from exc

    # Python 2 prints its version on stderr.
    version = result.output.splitlines()[0] if result.output else ""
    if not result.ok or not version:
        msg = f"{settings.python} --version exited with status {result.returncode}"
        raise EnvironmentProbeError(msg, output=result.output)

    parsed = parse_version(version)
    if parsed is None or parsed < settings.min_python:
        required = ".".join(str(part) for part in settings.min_python)
        msg = f"{version} found, but Python {required}+ is required"
        raise EnvironmentProbeError(msg, output=version)

    return interpreter, version


def mkdocs_importable(interpreter: str, *, timeout: float) -> bool:
    """Return True if ``interpreter`` can import mkdocs."""
    try:
        result = run_command([interpreter, "-c", "import mkdocs"], timeout=timeout)
    except (OSError, subprocess.TimeoutExpired):
        logger.debug("Could not query mkdocs availability", exc_info=True)
        return False
    return result.ok


def probe_environment(settings: SetupSettings) -> ProbeResult:
    """Run the environment probe.

    Raises:
        InterpreterNotFoundError: the interpreter is not on PATH
        EnvironmentProbeError: the interpreter is unusable or too old

    """
    interpreter, version = probe_interpreter(settings)
    logger.info("Interpreter found: %s (%s)", version, interpreter)

    config_path = Path(settings.config_path)
    return ProbeResult(
        interpreter=interpreter,
        version=version,
        mkdocs_available=mkdocs_importable(interpreter, timeout=settings.probe_timeout),
        config_present=config_path.is_file(),
    )


__all__ = ["ProbeResult", "mkdocs_importable", "parse_version", "probe_environment", "probe_interpreter"]
