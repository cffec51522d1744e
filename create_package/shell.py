"""
Local command adapters: git, the package installer and the formatter.
"""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from create_package.exceptions import CommandError

logger = logging.getLogger(__name__)


class CommandRunner:
    """Runs commands in the target project directory."""

    def __init__(self, cwd: Path, timeout_seconds: float = 900.0):
        self.cwd = Path(cwd)
        self.timeout_seconds = timeout_seconds

    def run(self, args: Sequence[str], capture: bool = True) -> str:
        """
        Run a command and return its stdout.

        Args:
            args: Command and arguments
            capture: Capture output; when False the command writes straight to
                the terminal (used for installers that draw progress bars)

        Returns:
            Captured stdout ("" when not capturing)

        Raises:
            CommandError: If the command is missing, times out or exits non-zero
        """
        command = list(args)
        logger.debug(f"Running {' '.join(command)} in {self.cwd}")
        try:
            result = subprocess.run(
                command,
                cwd=str(self.cwd),
                check=True,
                text=True,
                capture_output=capture,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as error:
            raise CommandError(command, f"'{command[0]}' was not found in PATH") from error
        except subprocess.TimeoutExpired as error:
            raise CommandError(command, f"timed out after {self.timeout_seconds}s") from error
        except subprocess.CalledProcessError as error:
            details = ((error.stderr or "") or (error.stdout or "")).strip()
            raise CommandError(command, details, error.returncode) from error

        return result.stdout or ""


class GitRepository:
    """The local git repository of the target project."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def is_initialized(self) -> bool:
        return (self.runner.cwd / ".git").exists()

    def init(self) -> None:
        self.runner.run(["git", "init"])

    def has_remote(self) -> bool:
        return bool(self.runner.run(["git", "remote"]).strip())

    def add_remote(self, url: str, name: str = "origin") -> None:
        self.runner.run(["git", "remote", "add", name, url])

    def remote_url(self, name: str = "origin") -> str | None:
        """URL of the named remote, or None when the remote does not exist."""
        try:
            url = self.runner.run(["git", "remote", "get-url", name]).strip()
        except CommandError as error:
            logger.debug(f"No URL for remote {name}: {error.message}")
            return None
        return url or None


class PackageInstaller:
    """yarn, the installer the generated package and its CI use."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def add_dev(self, names: Sequence[str]) -> None:
        self.runner.run(["yarn", "add", "--dev", *names], capture=False)

    def install(self) -> None:
        self.runner.run(["yarn"], capture=False)


class Formatter:
    """prettier, installed into the project by the dependency step."""

    GLOB = "**/*.{js?(on),ts?(x),md,yml}"

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def format(self) -> None:
        self.runner.run(["node_modules/.bin/prettier", self.GLOB, "--write"])
