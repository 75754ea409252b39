"""Command line entry point for docsetup."""

from __future__ import annotations

import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.text import Text

from docsetup import __version__
from docsetup.config import DEFAULT_CONFIG_PATH, SetupSettings
from docsetup.constants import ExitCode, Stage, ThemeChoice
from docsetup.exceptions import SetupError
from docsetup.installer import ask_theme_choice
from docsetup.pipeline import SetupOutcome, run_setup

app = typer.Typer(
    name="docsetup",
    help="Set up the MkDocs documentation environment and validate the build",
    add_completion=False,
)

console = Console()
logging.basicConfig(
    level=logging.INFO,
    format="%(message)s",
    handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
)
logger = logging.getLogger(__name__)

INSTALL_PROMPT = "📦 Do you want to install the Material theme for enhanced UI? (y/n): "

_STAGE_MESSAGES = {
    Stage.PROBE: "🔍 Checking environment...",
    Stage.INSTALL: "📦 Checking packages...",
    Stage.TRANSFORM: "📝 Updating configuration to use Material theme...",
    Stage.BUILD: "🔧 Testing MkDocs build...",
}

USAGE_INSTRUCTIONS = """\
[bold]📖 Serve documentation locally:[/bold]
   [cyan]python3 -m mkdocs serve[/cyan]
   Then open: http://localhost:8000

[bold]🏗️  Build static site:[/bold]
   [cyan]python3 -m mkdocs build[/cyan]

[bold]🐳 Using with Podman/Docker:[/bold]
   [cyan]podman build -f Containerfile.docs -t docs-dev .[/cyan]
   [cyan]podman run -p 8000:8000 docs-dev[/cyan]

[bold]📚 Documentation structure:[/bold]
   {docs:<18} - Source markdown files
   {config:<18} - Configuration file
   {site:<18} - Generated static site"""


@contextmanager
def handle_setup_errors(*, debug: bool = False) -> Generator[None, None, None]:
    """Turn pipeline failures into a report and a stage-specific exit code.

    Args:
        debug: If True, print the full traceback as well.

    """
    try:
        yield
    except typer.Exit:
        raise
    except KeyboardInterrupt as e:
        console.print("\n[bold red]⛔ Interrupted.[/bold red] No cleanup was attempted.")
        raise typer.Exit(ExitCode.INTERRUPTED) from e
    except SetupError as e:
        if debug:
            console.print_exception(show_locals=False)
        console.print(f"[bold red]❌ {e.stage.value} failed:[/bold red] {escape(str(e))}")
        if e.output:
            console.print(Panel(Text(e.output), title="Output", border_style="red"))
        if e.backup_path is not None:
            console.print(f"💾 The original configuration is saved at [cyan]{e.backup_path}[/cyan].")
            console.print("   Copy it back over the configuration to restore the previous state.")
        raise typer.Exit(e.exit_code) from e
    except Exception as e:
        if debug:
            console.print_exception(show_locals=False)
            raise typer.Exit(ExitCode.UNEXPECTED) from e

        console.print(f"[bold red]💥 An unexpected error occurred:[/bold red] {e}")
        console.print("[dim]Run with [bold]--debug[/bold] for more details.[/dim]")
        raise typer.Exit(ExitCode.UNEXPECTED) from e


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"docsetup {__version__}")
        raise typer.Exit


def _read_answer() -> str:
    console.print(INSTALL_PROMPT, end="")
    if sys.stdin is None or not sys.stdin.isatty():
        # Piped or absent input: one character, empty means no.
        answer = sys.stdin.read(1) if sys.stdin is not None else ""
        console.print(answer.strip())
        return answer
    answer = typer.getchar(echo=True)
    console.print()
    return answer


def _prompt_choice() -> ThemeChoice:
    choice = ask_theme_choice(_read_answer)
    if choice is ThemeChoice.DEFAULT:
        console.print("📝 Using ReadTheDocs theme (default)")
    return choice


def _report_stage(stage: Stage) -> None:
    console.print(_STAGE_MESSAGES[stage])


def _report_success(outcome: SetupOutcome, config_path: Path) -> None:
    console.print(f"✅ {outcome.probe.version} found: {outcome.probe.interpreter}")
    if outcome.transform is not None:
        console.print("✅ Material theme installed and configured")
        console.print(f"💾 Previous configuration saved at [cyan]{outcome.transform.backup_path}[/cyan]")
    console.print("✅ Documentation builds successfully")
    console.print(
        Panel(
            USAGE_INSTRUCTIONS.format(docs="docs/", config=str(config_path), site=f"{outcome.build.site_dir or 'site'}/"),
            title="🎉 Setup complete! Here's how to use the documentation",
            border_style="green",
        )
    )
    console.print("✨ Happy documenting!")


@app.command()
def setup(
    *,
    config: Annotated[
        Path | None,
        typer.Option("--config", "-c", help=f"MkDocs configuration file to update [default: {DEFAULT_CONFIG_PATH}]"),
    ] = None,
    enhanced: Annotated[
        bool | None,
        typer.Option(
            "--enhanced/--default",
            help="Answer the theme prompt up front instead of asking",
            show_default=False,
        ),
    ] = None,
    site_dir: Annotated[
        Path | None, typer.Option("--site-dir", "-d", help="Output directory for the trial build")
    ] = None,
    debug: Annotated[bool, typer.Option("--debug", help="Show full tracebacks and debug logging")] = False,
    version: Annotated[
        bool | None,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show the version and exit"),
    ] = None,
) -> None:
    """Probe the environment, optionally install the Material theme, and validate the build."""
    if debug:
        logging.getLogger().setLevel(logging.DEBUG)

    console.print("🚀 Setting up the MkDocs documentation environment")

    with handle_setup_errors(debug=debug):
        try:
            overrides = {"config_path": config, "site_dir": site_dir}
            settings = SetupSettings(**{key: value for key, value in overrides.items() if value is not None})
        except ValidationError as e:
            console.print(f"[bold red]⚙️ Invalid settings:[/bold red] {e}")
            raise typer.Exit(ExitCode.CONFIG) from e

        if enhanced is None:
            choose = _prompt_choice
        else:
            choice = ThemeChoice.ENHANCED if enhanced else ThemeChoice.DEFAULT

            def choose() -> ThemeChoice:
                return choice

        outcome = run_setup(settings, choose, on_stage=_report_stage)
        _report_success(outcome, settings.config_path)


def main() -> None:
    """Entry point used by the console script."""
    app()


__all__ = ["app", "console", "handle_setup_errors", "main"]
