"""Trial ``mkdocs build`` used to validate the rewritten configuration."""

from __future__ import annotations

import logging
import subprocess  # nosec B404
from dataclasses import dataclass
from pathlib import Path

from docsetup.config import SetupSettings
from docsetup.exceptions import BuildConfigNotFoundError, BuildValidationError
from docsetup.process import run_command, timeout_output

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BuildReport:
    """Result of a successful trial build."""

    command: tuple[str, ...]
    output: str
    site_dir: Path | None


def build_command(interpreter: str, config_path: Path, site_dir: Path | None = None) -> list[str]:
    command = [interpreter, "-m", "mkdocs", "build", "--clean", "-f", str(config_path)]
    if site_dir is not None:
        command.extend(["-d", str(site_dir)])
    return command


def validate_build(interpreter: str, settings: SetupSettings) -> BuildReport:
    """Run ``mkdocs build --clean`` against the configured document.

    No rollback happens on failure; the operator gets the build's own output.

    Raises:
        BuildConfigNotFoundError: the configuration document does not exist
        BuildValidationError: the build exited non-zero, timed out or could not start

    """
    config_path = Path(settings.config_path)
    if not config_path.is_file():
        raise BuildConfigNotFoundError(config_path)

    command = build_command(interpreter, config_path, settings.site_dir)
    logger.info("Testing MkDocs build with %s", config_path)
    try:
        result = run_command(command, timeout=settings.build_timeout)
    except subprocess.TimeoutExpired as exc:
        msg = f"mkdocs build did not finish within {settings.build_timeout:g}s"
        raise BuildValidationError(msg, output=timeout_output(exc)) from exc
    except OSError as exc:
        msg = f"Could not start mkdocs build: {exc}"
        raise BuildValidationError(msg) from exc

    if not result.ok:
        msg = f"mkdocs build exited with status {result.returncode}"
        raise BuildValidationError(msg, output=result.output)

    return BuildReport(command=result.command, output=result.output, site_dir=settings.site_dir)


__all__ = ["BuildReport", "build_command", "validate_build"]
