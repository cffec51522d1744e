"""
Travis CI for public packages, selected with ``ci.public_provider: travis``.

Travis only sees a new GitHub repository after it has synced the user's
repositories, so activation waits for the sync and retries while the
repository is still unknown.
"""

import logging
import time
from collections.abc import Callable
from typing import Any

from rich.console import Console

from create_package.ci import CiResult
from create_package.config import Settings
from create_package.context import RunContext
from create_package.exceptions import MissingProviderFieldError, ProviderAPIError
from create_package.prompt import Prompter
from create_package.providers.github import GitHubClient
from create_package.providers.npm import NpmRegistry
from create_package.providers.travis import TravisClient
from create_package.util.files import ConfigFileWriter
from create_package.util.retry import retry_on, wait_until

logger = logging.getLogger(__name__)

CONFIG_FILE = ".travis.yml"


def travis_yaml(has_tests: bool) -> dict[str, Any]:
    test_script = [
        "yarn run prettier-check",
        "yarn run eslint",
        "yarn run build",
    ]
    if has_tests:
        test_script += [
            "yarn test",
            "nyc report --reporter json",
            "bash <(curl -s https://codecov.io/bash)",
        ]

    return {
        "language": "node_js",
        "node_js": "lts/*",
        "cache": "yarn",
        "env": {"global": ["FORCE_COLOR=1"]},
        "install": ["yarn --frozen-lockfile"],
        "jobs": {
            "include": [
                {"stage": "test", "script": test_script},
                {"stage": "release", "script": ["yarn run build", "yarn run semantic-release"]},
            ]
        },
        "stages": [
            "test",
            {"name": "release", "if": "branch = master AND type = push AND fork = false"},
        ],
        "branches": {"only": ["master", "/^renovate\\//"]},
    }


def _is_not_found(error: Exception) -> bool:
    return isinstance(error, ProviderAPIError) and error.status_code == 404


class TravisCi:
    name = "travis"

    def __init__(
        self,
        travis: TravisClient,
        github: GitHubClient,
        npm: NpmRegistry,
        writer: ConfigFileWriter,
        console: Console,
        prompter: Prompter,
        settings: Settings,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.travis = travis
        self.github = github
        self.npm = npm
        self.writer = writer
        self.console = console
        self.prompter = prompter
        self.org = settings.github_org
        self.poll_interval = settings.poll_interval
        self.poll_timeout = settings.poll_timeout
        self.sleep = sleep

    def repo_url(self, repo_name: str) -> str:
        return f"https://travis-ci.org/{self.org}/{repo_name}"

    def setup(self, context: RunContext) -> CiResult:
        repo_name = context.require("repo_name")
        self.console.print("⚙️ Setting up Travis CI")

        self.writer.write_yaml_if_absent(CONFIG_FILE, travis_yaml(context.require("has_tests")))

        self._sync_repositories()
        self._activate(repo_name)
        self._ensure_env_vars(repo_name)

        return CiResult(
            badge_url=f"{self.repo_url(repo_name)}.svg?branch=master",
            web_url=self.repo_url(repo_name),
        )

    def _sync_repositories(self) -> None:
        user = self.travis.current_user()
        user_id = user.get("id") if isinstance(user, dict) else None
        if user_id is None:
            raise MissingProviderFieldError(
                "Travis CI", "user id", f"{self.travis.api.base_url}user"
            )
        self.console.print("Triggering Travis sync of repositories")
        self.travis.sync(user_id)
        wait_until(
            lambda: not self.travis.current_user().get("is_syncing"),
            "Travis repository sync",
            interval=self.poll_interval,
            timeout=self.poll_timeout,
            on_wait=lambda: self.console.print("[dim]Waiting for sync to finish...[/dim]"),
            sleep=self.sleep,
        )

    def _activate(self, repo_name: str) -> None:
        self.console.print(f"Activating repository at {self.repo_url(repo_name)}")
        retry_on(
            _is_not_found,
            lambda: self.travis.activate(repo_name),
            f"Travis to discover {self.org}/{repo_name}",
            interval=self.poll_interval,
            timeout=self.poll_timeout,
            on_retry=lambda e: self.console.print(
                "[dim]Repository not visible to Travis yet, retrying...[/dim]"
            ),
            sleep=self.sleep,
        )

    def _ensure_env_vars(self, repo_name: str) -> None:
        existing = self.travis.env_var_names(repo_name)

        if "NPM_TOKEN" in existing:
            self.console.print("[dim]🔑 NPM_TOKEN already set in Travis, skipping creation[/dim]")
        else:
            npm_token = self.npm.create_bot_token()
            self.console.print("🔑 Setting NPM_TOKEN env var in Travis")
            self.travis.create_env_var(repo_name, "NPM_TOKEN", npm_token)

        if "GITHUB_TOKEN" in existing:
            self.console.print("[dim]🔑 GITHUB_TOKEN already set in Travis, skipping creation[/dim]")
        else:
            github_token = self.github.create_bot_token(repo_name, self.prompter)
            self.console.print("🔑 Setting GITHUB_TOKEN env var in Travis")
            self.travis.create_env_var(repo_name, "GITHUB_TOKEN", github_token)
