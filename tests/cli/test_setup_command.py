from __future__ import annotations

import io
from pathlib import Path

from typer.testing import CliRunner

from docsetup import __version__
from docsetup.cli import _prompt_choice, app
from docsetup.constants import ExitCode, ThemeChoice
from docsetup.mkdocs_config import load_document

runner = CliRunner()


def test_answering_no_keeps_config_and_builds(processes, config_path: Path) -> None:
    original = config_path.read_bytes()

    result = runner.invoke(app, ["--config", str(config_path)], input="n")

    assert result.exit_code == 0, result.output
    assert "Using ReadTheDocs theme" in result.output
    assert "Setup complete" in result.output
    assert config_path.read_bytes() == original
    assert not (config_path.parent / "mkdocs.yml.bak").exists()
    assert len(processes.commands_matching("mkdocs build")) == 1


def test_empty_answer_means_no(processes, config_path: Path) -> None:
    original = config_path.read_bytes()

    result = runner.invoke(app, ["--config", str(config_path)], input="")

    assert result.exit_code == 0, result.output
    assert config_path.read_bytes() == original


def test_answering_yes_installs_and_rewrites(processes, config_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(config_path)], input="Y")

    assert result.exit_code == 0, result.output
    assert "Material theme installed and configured" in result.output
    assert load_document(config_path)["theme"]["name"] == "material"
    assert (config_path.parent / "mkdocs.yml.bak").exists()
    assert processes.commands_matching("mkdocs-material")


def test_enhanced_flag_skips_the_prompt(processes, config_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(config_path), "--enhanced"])

    assert result.exit_code == 0, result.output
    assert "Do you want to install" not in result.output
    assert load_document(config_path)["theme"]["name"] == "material"


def test_build_failure_exits_with_build_code(processes, config_path: Path) -> None:
    processes.respond("mkdocs build", returncode=1, stderr="Aborted with a configuration error!")
    original = config_path.read_bytes()

    result = runner.invoke(app, ["--config", str(config_path)], input="y")

    assert result.exit_code == ExitCode.BUILD
    assert "Build Validation failed" in result.output
    assert "Aborted with a configuration error!" in result.output
    assert "original configuration is saved" in result.output
    assert (config_path.parent / "mkdocs.yml.bak").read_bytes() == original


def test_missing_interpreter_exits_with_environment_code(processes, config_path: Path, monkeypatch) -> None:
    monkeypatch.setattr("docsetup.environment.shutil.which", lambda _name: None)
    original = config_path.read_bytes()

    result = runner.invoke(app, ["--config", str(config_path)], input="y")

    assert result.exit_code == ExitCode.ENVIRONMENT
    assert "Environment Probe failed" in result.output
    assert config_path.read_bytes() == original


def test_install_failure_exits_with_install_code(processes, config_path: Path) -> None:
    processes.respond("mkdocs-material", returncode=1, stderr="Could not find a version")
    original = config_path.read_bytes()

    result = runner.invoke(app, ["--config", str(config_path), "--enhanced"])

    assert result.exit_code == ExitCode.INSTALL
    assert "Installation failed" in result.output
    assert config_path.read_bytes() == original
    assert processes.commands_matching("mkdocs build") == []


def test_parse_failure_exits_with_config_code(processes, tmp_path: Path) -> None:
    config_path = tmp_path / "mkdocs.yml"
    config_path.write_text("- not\n- a mapping\n", encoding="utf-8")

    result = runner.invoke(app, ["--config", str(config_path), "--enhanced"])

    assert result.exit_code == ExitCode.CONFIG
    assert "Configuration Transform failed" in result.output
    assert not (tmp_path / "mkdocs.yml.bak").exists()


def test_version_option() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


class _Terminal(io.StringIO):
    def isatty(self) -> bool:
        return True


def test_piped_answer_is_read_from_stdin(monkeypatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("y\n"))

    assert _prompt_choice() is ThemeChoice.ENHANCED


def test_closed_stdin_means_no(monkeypatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO(""))

    assert _prompt_choice() is ThemeChoice.DEFAULT


def test_terminal_that_cannot_be_opened_means_no(monkeypatch) -> None:
    def no_tty(echo: bool = False) -> str:
        raise OSError(6, "No such device or address", "/dev/tty")

    monkeypatch.setattr("sys.stdin", _Terminal())
    monkeypatch.setattr("docsetup.cli.typer.getchar", no_tty)

    assert _prompt_choice() is ThemeChoice.DEFAULT


def test_interrupt_exits_130_and_keeps_backup(processes, config_path: Path, monkeypatch) -> None:
    original = config_path.read_bytes()

    def interrupted(*_args, **_kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr("docsetup.pipeline.validate_build", interrupted)

    result = runner.invoke(app, ["--config", str(config_path), "--enhanced"])

    assert result.exit_code == ExitCode.INTERRUPTED
    assert "Interrupted" in result.output
    assert (config_path.parent / "mkdocs.yml.bak").read_bytes() == original


def test_unusable_lock_exits_with_config_code(processes, config_path: Path) -> None:
    (config_path.parent / "mkdocs.yml.lock").mkdir()

    result = runner.invoke(app, ["--config", str(config_path), "--enhanced"])

    assert result.exit_code == ExitCode.CONFIG
    assert "Configuration Transform failed" in result.output


def test_missing_config_without_rewrite_names_the_build_stage(processes, tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(tmp_path / "mkdocs.yml"), "--default"])

    assert result.exit_code == ExitCode.CONFIG
    assert "Build Validation failed" in result.output
    assert "Configuration Transform" not in result.output
