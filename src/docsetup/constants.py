"""Central location for the constants used by the setup pipeline.

Stage names, exit codes and the theme decision are enums so the pipeline,
the CLI and the tests agree on the same values.
"""

from enum import Enum, IntEnum


class Stage(str, Enum):
    """Pipeline stages, in execution order."""

    PROBE = "Environment Probe"
    INSTALL = "Installation"
    TRANSFORM = "Configuration Transform"
    BUILD = "Build Validation"


class ThemeChoice(str, Enum):
    """Operator decision taken once at the install prompt."""

    DEFAULT = "default"
    ENHANCED = "enhanced"


class ExitCode(IntEnum):
    """Process exit codes, one per failure category."""

    OK = 0
    UNEXPECTED = 1
    ENVIRONMENT = 3
    INSTALL = 4
    CONFIG = 5
    BUILD = 6
    INTERRUPTED = 130


ENHANCED_THEME_NAME = "material"

BASE_PACKAGES = ("mkdocs",)
ENHANCED_THEME_PACKAGES = ("mkdocs-material", "pymdown-extensions")

AFFIRMATIVE_ANSWERS = frozenset({"y", "Y"})
