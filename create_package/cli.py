"""
CLI entry point for create-package.
"""

import logging
import os
import time
from functools import wraps
from pathlib import Path

import typer
from rich.console import Console

from create_package.config import (
    PUBLIC_PROVIDERS,
    Settings,
    find_config_file,
    load_config_dict,
)
from create_package.exceptions import CreatePackageError, format_error_for_cli
from create_package.orchestrator import create_orchestrator
from create_package.prompt import RichAnswerSource, ScriptedAnswerSource
from create_package.util.files import to_yaml
from create_package.util.logging import configure_logging

app = typer.Typer(
    name="create-package",
    help="Set up GitHub, CI, Codecov and npm publishing for a new npm package",
    add_completion=False,
)
console = Console()
logger = logging.getLogger(__name__)

LOG_LEVEL_ENV_VAR = "CREATE_PACKAGE_LOG_LEVEL"

# Seconds to wait before exiting so pending terminal output is flushed
EXIT_DELAY = 0.1


def handle_errors(func):
    """Decorator to handle exceptions in CLI commands with nice formatting."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            exit_code = func(*args, **kwargs) or 0
        except typer.Exit:
            raise
        except CreatePackageError as e:
            console.print()
            console.print(format_error_for_cli(e))
            if e.show_stack:
                console.print_exception()
            exit_code = 1
        except Exception:
            # Unexpected errors
            console.print("\n[red]Unexpected error[/red]")
            console.print_exception()
            exit_code = 1

        time.sleep(EXIT_DELAY)
        raise typer.Exit(exit_code)

    return wrapper


def _resolve_config_file(directory: Path, config: Path | None) -> Path | None:
    if config is not None:
        return config
    return find_config_file(directory)


def _load_settings(directory: Path, config: Path | None, public_ci: str | None) -> Settings:
    settings = Settings.from_dict(load_config_dict(_resolve_config_file(directory, config)))
    if public_ci:
        settings = settings.with_public_ci_provider(public_ci)
    return settings


def _setup_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else os.environ.get(LOG_LEVEL_ENV_VAR, "WARNING")
    configure_logging(level)


def _run(
    directory: Path | None,
    config: Path | None,
    answers: Path | None,
    public_ci: str | None,
    verbose: bool,
) -> int:
    _setup_logging(verbose)
    root = (directory or Path.cwd()).resolve()
    if not root.is_dir():
        raise CreatePackageError(
            f"Directory not found: {root}",
            "Create the directory first, or pass an existing one with --directory.",
        )

    settings = _load_settings(root, config, public_ci)

    answer_source = RichAnswerSource(console)
    if answers is not None:
        answer_source = ScriptedAnswerSource.from_file(answers, fallback=answer_source)

    orchestrator = create_orchestrator(root, settings, os.environ, answer_source, console)
    exit_code = orchestrator.run()
    console.print("[green]✨ Done[/green]")
    return exit_code


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context):
    """Set up a new npm package in the current directory (same as `run`)."""
    if ctx.invoked_subcommand is None:
        handle_errors(_run)(None, None, None, None, False)


@app.command()
@handle_errors
def run(
    directory: Path | None = typer.Option(
        None, "--directory", "-C", help="Package directory (default: current directory)"
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Configuration file (default: .create-package.yaml if present)"
    ),
    answers: Path | None = typer.Option(
        None, "--answers", help="YAML file with answers to the setup questions"
    ),
    public_ci: str | None = typer.Option(
        None,
        "--public-ci",
        help=f"CI provider for public packages ({'|'.join(PUBLIC_PROVIDERS)})",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Set up GitHub, Codecov, CI and npm publishing for a package."""
    return _run(directory, config, answers, public_ci, verbose)


@app.command(name="show-config")
@handle_errors
def show_config(
    directory: Path | None = typer.Option(
        None, "--directory", "-C", help="Package directory (default: current directory)"
    ),
    config: Path | None = typer.Option(
        None, "--config", help="Configuration file (default: .create-package.yaml if present)"
    ),
):
    """Print the effective configuration. Tokens are never included."""
    root = (directory or Path.cwd()).resolve()
    config_file = _resolve_config_file(root, config)
    effective = load_config_dict(config_file)

    if config_file is not None:
        console.print(f"[dim]# Loaded from {config_file}[/dim]")
    else:
        console.print("[dim]# Built-in defaults[/dim]")
    console.print(to_yaml(effective), markup=False, highlight=False)


if __name__ == "__main__":
    app()
