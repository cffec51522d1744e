"""
GitHub Actions workflow for public packages.

GitHub derives the badge and run URLs from the repository name, so nothing
has to be registered with a CI service.
"""

import logging
from typing import Any

from rich.console import Console

from create_package.ci import CiResult
from create_package.config import Settings
from create_package.context import RunContext
from create_package.providers.github import GitHubClient
from create_package.providers.npm import NpmRegistry
from create_package.util.files import ConfigFileWriter

logger = logging.getLogger(__name__)

CONFIG_FILE = ".github/workflows/build.yml"


def workflow_yaml(org: str, has_tests: bool) -> dict[str, Any]:
    steps: list[dict[str, Any]] = [
        {"uses": "actions/checkout@v4"},
        {
            "name": "Use Node.js",
            "uses": "actions/setup-node@v4",
            "with": {"node-version": "20.x"},
        },
        {"run": "yarn --frozen-lockfile"},
        {"run": "yarn run prettier-check"},
        {"run": "yarn run eslint"},
        {"run": "yarn run build"},
    ]
    if has_tests:
        steps += [
            {"run": "yarn test"},
            {"run": "nyc report --reporter json"},
            {
                "name": "Upload coverage to Codecov",
                "uses": "codecov/codecov-action@v4",
                "with": {"token": "${{ secrets.CODECOV_TOKEN }}"},
            },
        ]
    steps.append(
        {
            "name": "release",
            "if": (
                f"github.repository_owner == '{org}' && github.event_name == 'push' "
                "&& github.ref == 'refs/heads/master'"
            ),
            "run": "yarn run semantic-release",
            "env": {
                "GITHUB_TOKEN": "${{ secrets.GITHUB_TOKEN }}",
                "NPM_TOKEN": "${{ secrets.NPM_TOKEN }}",
            },
        }
    )

    return {
        "name": "build",
        "on": ["push", "pull_request"],
        "env": {"FORCE_COLOR": 3},
        "jobs": {
            "build": {
                "runs-on": "ubuntu-latest",
                "steps": steps,
            }
        },
    }


class GitHubWorkflowCi:
    name = "github-actions"

    def __init__(
        self,
        github: GitHubClient,
        npm: NpmRegistry,
        writer: ConfigFileWriter,
        console: Console,
        settings: Settings,
    ):
        self.github = github
        self.npm = npm
        self.writer = writer
        self.console = console
        self.org = settings.github_org

    def setup(self, context: RunContext) -> CiResult:
        repo_name = context.require("repo_name")
        has_tests = context.require("has_tests")
        self.console.print("⚙️ Setting up GitHub Actions workflow")

        self.writer.write_yaml_if_absent(CONFIG_FILE, workflow_yaml(self.org, has_tests))

        if self.github.secret_exists(repo_name, "NPM_TOKEN"):
            self.console.print("[dim]🔑 NPM_TOKEN already set in GitHub secrets, skipping creation[/dim]")
        else:
            npm_token = self.npm.create_bot_token()
            self.console.print("🔑 Setting NPM_TOKEN GitHub secret")
            self.github.create_secret(repo_name, "NPM_TOKEN", npm_token)

        if has_tests:
            if self.github.secret_exists(repo_name, "CODECOV_TOKEN"):
                self.console.print(
                    "[dim]🔑 CODECOV_TOKEN already set in GitHub secrets, skipping creation[/dim]"
                )
            else:
                self.console.print("🔑 Setting CODECOV_TOKEN GitHub secret")
                self.github.create_secret(
                    repo_name, "CODECOV_TOKEN", context.require("codecov_upload_token")
                )

        return self.result(repo_name)

    def result(self, repo_name: str) -> CiResult:
        repo_url = self.github.repo_url(repo_name)
        return CiResult(
            badge_url=f"{repo_url}/actions/workflows/build.yml/badge.svg?branch=master",
            web_url=f"{repo_url}/actions?query=branch%3Amaster+workflow%3Abuild",
        )
