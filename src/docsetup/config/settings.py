"""Runtime settings for the docsetup pipeline.

Defaults reproduce the behaviour of the plain setup script: ``mkdocs.yml`` in
the working directory, ``python3`` as the interpreter and a ``.bak`` backup
next to the configuration. Every field can be overridden from the environment
with the ``DOCSETUP_`` prefix (e.g. ``DOCSETUP_BUILD_TIMEOUT=120``) or from
the command line.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path("mkdocs.yml")
DEFAULT_PYTHON = "python3"
DEFAULT_MIN_PYTHON = (3, 7)


class SetupSettings(BaseSettings):
    """Settings shared by every pipeline stage."""

    config_path: Path = Field(
        default=DEFAULT_CONFIG_PATH,
        description="MkDocs configuration document rewritten by the transform stage",
    )
    python: str = Field(
        default=DEFAULT_PYTHON,
        description="Interpreter used to run pip and mkdocs",
    )
    min_python: tuple[int, int] = Field(
        default=DEFAULT_MIN_PYTHON,
        description="Minimum interpreter version accepted by the environment probe",
    )
    site_dir: Path | None = Field(
        default=None,
        description="Output directory for the trial build (mkdocs default when unset)",
    )
    pip_args: list[str] = Field(
        default_factory=list,
        description="Extra arguments passed to 'pip install' (e.g. --user)",
    )
    backup_suffix: str = Field(default=".bak", min_length=1)
    probe_timeout: float = Field(default=10.0, gt=0)
    install_timeout: float = Field(default=900.0, gt=0, description="Seconds before pip is abandoned")
    build_timeout: float = Field(default=600.0, gt=0, description="Seconds before the trial build is abandoned")
    lock_timeout: float = Field(default=10.0, ge=0)

    model_config = SettingsConfigDict(
        extra="forbid",
        validate_assignment=True,
        env_prefix="DOCSETUP_",
    )

    @field_validator("backup_suffix")
    @classmethod
    def _suffix_has_no_separator(cls, value: str) -> str:
        if "/" in value or "\\" in value:
            msg = f"backup_suffix must not contain a path separator: {value!r}"
            raise ValueError(msg)
        return value

    @property
    def backup_path(self) -> Path:
        """Location of the Backup Copy for the configured document."""
        return self.config_path.with_name(self.config_path.name + self.backup_suffix)


__all__ = ["DEFAULT_CONFIG_PATH", "DEFAULT_PYTHON", "SetupSettings"]
