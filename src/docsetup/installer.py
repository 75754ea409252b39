"""Package installation through pip, and the yes/no theme decision."""

from __future__ import annotations

import logging
import subprocess  # nosec B404
from collections.abc import Callable
from dataclasses import dataclass

from docsetup.config import SetupSettings
from docsetup.constants import AFFIRMATIVE_ANSWERS, BASE_PACKAGES, ENHANCED_THEME_PACKAGES, ThemeChoice
from docsetup.environment import ProbeResult
from docsetup.exceptions import InstallError
from docsetup.process import run_command, timeout_output

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class InstallResult:
    """Outcome of a successful pip invocation."""

    packages: tuple[str, ...]
    output: str
    enhanced_theme_available: bool = False


def parse_answer(answer: str) -> ThemeChoice:
    """Map a keystroke to a :class:`ThemeChoice`; anything but y/Y means no."""
    key = answer.strip()[:1]
    if key in AFFIRMATIVE_ANSWERS:
        return ThemeChoice.ENHANCED
    return ThemeChoice.DEFAULT


def ask_theme_choice(read_key: Callable[[], str]) -> ThemeChoice:
    """Read a single keystroke and turn it into the theme decision."""
    try:
        answer = read_key()
    except (EOFError, OSError) as exc:
        logger.debug("No answer available (%r); keeping the default theme", exc)
        return ThemeChoice.DEFAULT
    return parse_answer(answer or "")


def pip_install(interpreter: str, packages: tuple[str, ...], settings: SetupSettings) -> InstallResult:
    """Install ``packages`` with ``<interpreter> -m pip install``.

    Raises:
        InstallError: pip exited non-zero, timed out, or could not be started

    """
    command = [interpreter, "-m", "pip", "install", *settings.pip_args, *packages]
    logger.info("Installing %s", ", ".join(packages))
    try:
        result = run_command(command, timeout=settings.install_timeout)
    except subprocess.TimeoutExpired as exc:
        raise InstallError(
            packages, f"pip did not finish within {settings.install_timeout:g}s", output=timeout_output(exc)
        ) from exc
    except OSError as exc:
        raise InstallError(packages, str(exc)) from exc

    if not result.ok:
        raise InstallError(packages, f"pip exited with status {result.returncode}", output=result.output)
    return InstallResult(packages=packages, output=result.output)


def ensure_mkdocs(probe: ProbeResult, settings: SetupSettings) -> InstallResult | None:
    """Install MkDocs itself when the probe found it missing."""
    if probe.mkdocs_available:
        logger.info("MkDocs already installed")
        return None
    return pip_install(probe.interpreter, BASE_PACKAGES, settings)


def install_enhanced_theme(probe: ProbeResult, settings: SetupSettings) -> InstallResult:
    """Install the Material theme and the pymdown extensions it is configured with."""
    result = pip_install(probe.interpreter, ENHANCED_THEME_PACKAGES, settings)
    return InstallResult(packages=result.packages, output=result.output, enhanced_theme_available=True)


__all__ = [
    "InstallResult",
    "ask_theme_choice",
    "ensure_mkdocs",
    "install_enhanced_theme",
    "parse_answer",
    "pip_install",
]
