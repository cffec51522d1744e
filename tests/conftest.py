"""
Pytest configuration and shared fixtures.
"""

import io
from collections.abc import Callable
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

import httpx
import pytest
from rich.console import Console

from create_package.config import DEFAULT_CONFIG, Settings
from create_package.exceptions import CommandError
from create_package.prompt import Prompter, ScriptedAnswerSource

ResponseSpec = tuple[int, Any] | Callable[[httpx.Request], httpx.Response]


class FakeProviderApi:
    """
    Routes requests to canned responses by method, host and path.

    A route given several responses answers with them in order and keeps
    repeating the last one. Unrouted requests get a 404.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str, str], list[ResponseSpec]] = {}
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def add(self, method: str, url: str, *responses: ResponseSpec) -> None:
        parts = urlsplit(url)
        self.routes[(method, parts.hostname, parts.path)] = list(responses)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responses = self.routes.get((request.method, request.url.host, request.url.path))
        if not responses:
            return httpx.Response(404, json={"message": "Not Found"})

        response = responses.pop(0) if len(responses) > 1 else responses[0]
        if callable(response):
            return response(request)
        status, body = response
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    def calls(self, method: str, url: str) -> list[httpx.Request]:
        parts = urlsplit(url)
        return [
            r
            for r in self.requests
            if r.method == method and r.url.host == parts.hostname and r.url.path == parts.path
        ]

    def hosts(self) -> set[str]:
        return {r.url.host for r in self.requests}


class FakeRunner:
    """Records commands instead of running them; emulates the bits of git we read."""

    def __init__(self, cwd: Path, remotes: str = ""):
        self.cwd = Path(cwd)
        self.remotes = remotes
        self.remote_urls: dict[str, str] = {}
        self.commands: list[list[str]] = []

    def run(self, args, capture: bool = True) -> str:
        command = list(args)
        self.commands.append(command)
        if command == ["git", "init"]:
            (self.cwd / ".git").mkdir(exist_ok=True)
        elif command == ["git", "remote"]:
            return self.remotes
        elif command[:3] == ["git", "remote", "add"]:
            self.remotes += f"{command[3]}\n"
            self.remote_urls[command[3]] = command[4]
        elif command[:3] == ["git", "remote", "get-url"]:
            if command[3] not in self.remote_urls:
                raise CommandError(command, f"error: No such remote '{command[3]}'", 2)
            return self.remote_urls[command[3]]
        return ""


@pytest.fixture
def settings():
    """Settings built from the built-in defaults."""
    return Settings.from_dict(DEFAULT_CONFIG)


@pytest.fixture
def console():
    """Console writing to a buffer; read it back with console.file.getvalue()."""
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def fake_api():
    return FakeProviderApi()


@pytest.fixture
def project_dir(tmp_path):
    """An empty package directory named like the package."""
    path = tmp_path / "widget"
    path.mkdir()
    return path


@pytest.fixture
def fake_runner(project_dir):
    return FakeRunner(project_dir)


@pytest.fixture
def env():
    return {
        "GITHUB_TOKEN": "gh-token",
        "CODECOV_TOKEN": "codecov-token",
        "BUILDKITE_TOKEN": "buildkite-token",
    }


@pytest.fixture
def make_prompter():
    """Build a prompter answering from a mapping."""

    def _make(answers: dict[str, Any]) -> Prompter:
        return Prompter(ScriptedAnswerSource(answers))

    return _make
