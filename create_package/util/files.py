"""
File utility functions.

Every file create-package emits goes through ``ConfigFileWriter`` so that an
existing file, whether written by a previous run or by the user, is never
overwritten.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console

logger = logging.getLogger(__name__)


def ensure_dir(path: str | Path) -> Path:
    """Ensure directory exists, creating if necessary."""
    p = Path(path)
    p.mkdir(parents=True, exist_ok=True)
    return p


def read_json(path: str | Path) -> Any | None:
    """Read a JSON file, returning None when it does not exist."""
    try:
        return json.loads(Path(path).read_text())
    except FileNotFoundError:
        return None


def write_text(path: str | Path, content: str) -> None:
    """Write text to file, creating parent directories if needed."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content)


def to_json(data: Any) -> str:
    """Serialize data the way npm tooling writes JSON files."""
    return json.dumps(data, indent=2) + "\n"


def to_yaml(data: Any) -> str:
    """Serialize data as block-style YAML, preserving key order."""
    return yaml.dump(data, default_flow_style=False, sort_keys=False)


class ConfigFileWriter:
    """
    Writes files into the target project only when they are absent.

    Attributes:
        root: Target project directory all paths are relative to
        console: Console used for progress lines
    """

    def __init__(self, root: Path, console: Console):
        self.root = Path(root)
        self.console = console

    def path(self, relative_path: str) -> Path:
        return self.root / relative_path

    def exists(self, relative_path: str) -> bool:
        return self.path(relative_path).exists()

    def write_if_absent(self, relative_path: str, content: str) -> bool:
        """
        Write ``content`` to ``relative_path`` unless the file already exists.

        Args:
            relative_path: Path relative to the project root
            content: Serialized file content

        Returns:
            True if the file was written, False if it already existed
        """
        target = self.path(relative_path)
        if target.exists():
            self.console.print(f"[dim]📄 {relative_path} already exists, skipping creation[/dim]")
            logger.debug(f"Skipped existing file {target}")
            return False

        self.console.print(f"📄 Adding {relative_path}")
        write_text(target, content)
        logger.debug(f"Wrote {target}")
        return True

    def write_json_if_absent(self, relative_path: str, data: Any) -> bool:
        return self.write_if_absent(relative_path, to_json(data))

    def write_yaml_if_absent(self, relative_path: str, data: Any) -> bool:
        return self.write_if_absent(relative_path, to_yaml(data))
