from __future__ import annotations

import subprocess
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from docsetup.config import SetupSettings

SAMPLE_CONFIG = """\
site_name: Modern Software Development Practices
site_url: !ENV [SITE_URL, "http://localhost:8000"]
repo_url: https://github.com/example/docs
theme:
  name: readthedocs
  highlightjs: true
plugins:
- search
markdown_extensions:
- toc
- pymdownx.emoji:
    emoji_index: !!python/name:material.extensions.emoji.twemoji
nav:
- Home: index.md
- Practices:
  - Testing: practices/testing.md
  - Reviews: practices/reviews.md
extra:
  version: 1.2
  social:
  - icon: fontawesome/brands/github
    link: https://github.com/example
"""


@dataclass
class _Response:
    marker: str
    returncode: int = 0
    stdout: str = ""
    stderr: str = ""
    timeout: bool = False


@dataclass
class FakeProcesses:
    """Stand-in for ``subprocess.run`` that records commands and answers by substring."""

    calls: list[list[str]] = field(default_factory=list)
    responses: list[_Response] = field(default_factory=list)
    options: dict = field(default_factory=dict)

    def respond(self, marker: str, **kwargs) -> None:
        self.responses.insert(0, _Response(marker, **kwargs))

    def commands_matching(self, marker: str) -> list[list[str]]:
        return [command for command in self.calls if marker in " ".join(command)]

    def __call__(self, command, *, capture_output, text, check, timeout, **options):
        self.calls.append(list(command))
        self.options = options
        joined = " ".join(command)
        for response in self.responses:
            if response.marker in joined:
                if response.timeout:
                    raise subprocess.TimeoutExpired(command, timeout, output=response.stdout)
                return subprocess.CompletedProcess(
                    command, response.returncode, stdout=response.stdout, stderr=response.stderr
                )
        return subprocess.CompletedProcess(command, 0, stdout="", stderr="")


@pytest.fixture
def processes(monkeypatch) -> FakeProcesses:
    fake = FakeProcesses()
    fake.respond("--version", stdout="Python 3.12.1\n")
    monkeypatch.setattr("docsetup.process.subprocess.run", fake)
    monkeypatch.setattr("docsetup.environment.shutil.which", lambda name: f"/usr/bin/{name}")
    return fake


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "mkdocs.yml"
    path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    return path


@pytest.fixture
def settings(config_path: Path, monkeypatch) -> SetupSettings:
    for name in ("DOCSETUP_CONFIG_PATH", "DOCSETUP_PYTHON", "DOCSETUP_SITE_DIR", "DOCSETUP_PIP_ARGS"):
        monkeypatch.delenv(name, raising=False)
    return SetupSettings(config_path=config_path, lock_timeout=1)
