"""Setup pipeline: probe, install, transform, validate.

Stages run strictly in order and every failure is fatal. The theme decision
is taken exactly once and handed to the later stages as a value.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from docsetup.builder import BuildReport, validate_build
from docsetup.config import SetupSettings
from docsetup.constants import Stage, ThemeChoice
from docsetup.environment import ProbeResult, probe_environment
from docsetup.exceptions import BuildValidationError
from docsetup.installer import InstallResult, ensure_mkdocs, install_enhanced_theme
from docsetup.mkdocs_config import MATERIAL_REPLACEMENT, ReplacementBlocks, TransformResult, apply_replacement

logger = logging.getLogger(__name__)

ChoiceProvider = Callable[[], ThemeChoice]
StageCallback = Callable[[Stage], None]


@dataclass(slots=True)
class SetupOutcome:
    """Everything a successful run produced."""

    probe: ProbeResult
    choice: ThemeChoice
    build: BuildReport
    installs: list[InstallResult] = field(default_factory=list)
    transform: TransformResult | None = None

    @property
    def enhanced_theme_available(self) -> bool:
        return any(result.enhanced_theme_available for result in self.installs)


def _noop(_stage: Stage) -> None:
    return None


def run_setup(
    settings: SetupSettings,
    choose: ChoiceProvider,
    *,
    blocks: ReplacementBlocks = MATERIAL_REPLACEMENT,
    on_stage: StageCallback | None = None,
) -> SetupOutcome:
    """Run the whole setup pipeline.

    Args:
        settings: Paths, interpreter and timeouts for every stage
        choose: Called once, after the probe, to decide whether the enhanced
            theme is installed and configured
        blocks: Sections written into the configuration when the enhanced
            theme is chosen
        on_stage: Progress callback invoked when a stage starts

    Raises:
        SetupError: a stage failed; the subclass identifies which one

    """
    notify = on_stage or _noop

    notify(Stage.PROBE)
    probe = probe_environment(settings)

    notify(Stage.INSTALL)
    installs: list[InstallResult] = []
    base_install = ensure_mkdocs(probe, settings)
    if base_install is not None:
        installs.append(base_install)

    choice = choose()
    logger.debug("Theme choice: %s", choice.value)

    transform: TransformResult | None = None
    if choice is ThemeChoice.ENHANCED:
        installs.append(install_enhanced_theme(probe, settings))

        notify(Stage.TRANSFORM)
        transform = apply_replacement(
            settings.config_path,
            blocks,
            backup_path=settings.backup_path,
            lock_timeout=settings.lock_timeout,
        )
    else:
        logger.info("Keeping the existing theme; %s left untouched", settings.config_path)

    notify(Stage.BUILD)
    try:
        build = validate_build(probe.interpreter, settings)
    except BuildValidationError as exc:
        if transform is not None:
            exc.backup_path = transform.backup_path
        raise

    return SetupOutcome(probe=probe, choice=choice, build=build, installs=installs, transform=transform)


__all__ = ["ChoiceProvider", "SetupOutcome", "StageCallback", "run_setup"]
