"""
Buildkite CI for private packages.
"""

import logging
from typing import Any

from rich.console import Console

from create_package.ci import CiResult
from create_package.config import Settings
from create_package.context import RunContext
from create_package.providers.buildkite import BuildkiteClient
from create_package.providers.github import GitHubClient
from create_package.providers.npm import NpmRegistry
from create_package.providers.result import AlreadyExists, Failed
from create_package.util.files import ConfigFileWriter

logger = logging.getLogger(__name__)

CONFIG_FILE = "buildkite.yml"

WEBHOOK_EVENTS = ["push", "pull_request", "deployment"]


def buildkite_yaml(has_tests: bool) -> dict[str, Any]:
    """Pipeline steps uploaded by the agent from buildkite.yml."""
    commands = [
        "yarn --frozen-lockfile",
        "yarn run prettier-check",
        "yarn run eslint",
        "yarn run build",
    ]
    if has_tests:
        commands += [
            "yarn test",
            "nyc report --reporter json",
            "bash <(curl -s https://codecov.io/bash)",
        ]

    return {
        "env": {
            "FORCE_COLOR": 1,
        },
        "steps": [
            {
                "label": ":typescript:",
                "command": "\n".join(commands),
            },
            "wait",
            {
                "label": ":npm:",
                "command": [
                    "yarn --frozen-lockfile",
                    "yarn run build",
                    "yarn run semantic-release",
                ],
                "branches": "master",
            },
        ],
    }


class BuildkiteCi:
    name = "buildkite"

    def __init__(
        self,
        buildkite: BuildkiteClient,
        github: GitHubClient,
        npm: NpmRegistry,
        writer: ConfigFileWriter,
        console: Console,
        settings: Settings,
    ):
        self.buildkite = buildkite
        self.github = github
        self.npm = npm
        self.writer = writer
        self.console = console
        self.settings = settings

    def setup(self, context: RunContext) -> CiResult:
        repo_name = context.require("repo_name")
        self.console.print("⚙️ Setting up Buildkite CI")

        self.writer.write_yaml_if_absent(CONFIG_FILE, buildkite_yaml(context.require("has_tests")))

        pipeline = self._ensure_pipeline(repo_name, context.require("codecov_upload_token"))
        self._ensure_webhook(repo_name, pipeline["provider"]["webhook_url"])

        self.console.print("🔐 Granting Buildkite team pull access to repo")
        self.github.grant_team_permission(self.settings.ci_team_id, repo_name, "pull")

        self._ensure_npm_token(pipeline)

        return CiResult(badge_url=f"{pipeline['badge_url']}?branch=master", web_url=pipeline["web_url"])

    def _ensure_pipeline(self, repo_name: str, codecov_upload_token: str) -> dict[str, Any]:
        self.console.print("Creating Buildkite pipeline")
        result = self.buildkite.create_pipeline(
            {
                "name": repo_name,
                "repository": f"git@github.com:{self.settings.github_org}/{repo_name}.git",
                "steps": [
                    {
                        "type": "script",
                        "name": ":pipeline:",
                        "command": f"buildkite-agent pipeline upload {CONFIG_FILE}",
                    }
                ],
                "env": {
                    "CODECOV_TOKEN": codecov_upload_token,
                },
            }
        )
        if isinstance(result, Failed):
            raise result.cause
        if isinstance(result, AlreadyExists):
            self.console.print(
                f'[dim]Buildkite pipeline "{repo_name}" already exists, skipping creation[/dim]'
            )
            return self.buildkite.get_pipeline(repo_name)
        return result.value

    def _ensure_webhook(self, repo_name: str, webhook_url: str) -> None:
        self.console.print("🔗 Creating GitHub webhook for pipeline")
        result = self.github.create_webhook(repo_name, webhook_url, WEBHOOK_EVENTS)
        if isinstance(result, Failed):
            raise result.cause
        if isinstance(result, AlreadyExists):
            self.console.print("[dim]Webhook already exists[/dim]")

    def _ensure_npm_token(self, pipeline: dict[str, Any]) -> None:
        env = dict(pipeline.get("env") or {})
        if "NPM_TOKEN" in env:
            self.console.print("[dim]🔑 NPM_TOKEN already set in Buildkite, skipping creation[/dim]")
            return

        npm_token = self.npm.create_bot_token()
        self.console.print("🔑 Setting NPM_TOKEN env var in Buildkite")
        env["NPM_TOKEN"] = npm_token
        self.buildkite.update_pipeline_env(pipeline.get("slug") or pipeline["name"], env)
