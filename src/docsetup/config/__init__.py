"""Configuration for docsetup."""

from docsetup.config.settings import DEFAULT_CONFIG_PATH, DEFAULT_PYTHON, SetupSettings

__all__ = ["DEFAULT_CONFIG_PATH", "DEFAULT_PYTHON", "SetupSettings"]
