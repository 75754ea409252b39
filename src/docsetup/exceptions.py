"""Centralized exceptions for the docsetup pipeline.

Every stage failure is a :class:`SetupError` that knows which stage raised it
and which exit code the process should terminate with.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from docsetup.constants import ExitCode, Stage

if TYPE_CHECKING:
    from pathlib import Path


class DocsetupError(Exception):
    """Base exception for all docsetup errors."""


class SetupError(DocsetupError):
    """A fatal failure of one pipeline stage."""

    stage: Stage = Stage.PROBE
    exit_code: ExitCode = ExitCode.UNEXPECTED

    def __init__(self, message: str, *, output: str = "", backup_path: Path | None = None) -> None:
        self.output = output
        self.backup_path = backup_path
        super().__init__(message)


class EnvironmentProbeError(SetupError):
    """Raised when the host environment cannot run the pipeline."""

    stage = Stage.PROBE
    exit_code = ExitCode.ENVIRONMENT


class InterpreterNotFoundError(EnvironmentProbeError):
    """Raised when the required interpreter is not on PATH."""

    def __init__(self, interpreter: str) -> None:
        self.interpreter = interpreter
        super().__init__(f"{interpreter} is required but was not found on PATH")


class InstallError(SetupError):
    """Raised when the package manager exits non-zero or times out."""

    stage = Stage.INSTALL
    exit_code = ExitCode.INSTALL

    def __init__(self, packages: tuple[str, ...], reason: str, *, output: str = "") -> None:
        self.packages = packages
        super().__init__(f"Failed to install {', '.join(packages)}: {reason}", output=output)


class ConfigError(SetupError):
    """Base exception for configuration document failures."""

    stage = Stage.TRANSFORM
    exit_code = ExitCode.CONFIG


class ConfigParseError(ConfigError):
    """Raised when the configuration document is not a valid YAML mapping."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot parse '{path}': {reason}")


class ConfigNotFoundError(ConfigParseError):
    """Raised when the configuration document does not exist."""

    def __init__(self, path: Path) -> None:
        super().__init__(path, "file not found")


class BuildConfigNotFoundError(ConfigNotFoundError):
    """Raised when the document to build is missing and no rewrite was attempted."""

    stage = Stage.BUILD


class ConfigWriteError(ConfigError):
    """Raised when the configuration document or its backup cannot be written."""

    def __init__(self, path: Path, original_exception: OSError, *, backup_path: Path | None = None) -> None:
        self.path = path
        super().__init__(f"Cannot write '{path}': {original_exception}", backup_path=backup_path)
        self.__cause__ = original_exception


class BuildValidationError(SetupError):
    """Raised when the trial build exits non-zero or times out."""

    stage = Stage.BUILD
    exit_code = ExitCode.BUILD
