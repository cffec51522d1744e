"""
Provisioning orchestrator.

Runs the fixed, ordered list of provisioning steps against one run context.
Every step checks local or remote state first, so rerunning the tool after a
failure picks up where the previous run stopped. Nothing is rolled back: the
first unrecovered error aborts the run.
"""

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

import httpx
from rich.console import Console

from create_package import scaffold
from create_package.ci import CiDependencies, create_ci_provider
from create_package.config import Credentials, Settings
from create_package.context import DEFAULT_LICENSE, LicenseName, RunContext, Visibility
from create_package.prompt import AnswerSource, Prompter
from create_package.providers.buildkite import BuildkiteClient, create_buildkite_api
from create_package.providers.codecov import CodecovClient, create_codecov_api
from create_package.providers.github import GitHubClient, create_github_api
from create_package.providers.http import ApiClient
from create_package.providers.npm import NpmRegistry, create_npm_api
from create_package.providers.result import AlreadyExists, Failed
from create_package.providers.travis import TravisClient, create_travis_api
from create_package.shell import CommandRunner, Formatter, GitRepository, PackageInstaller
from create_package.util.files import ConfigFileWriter, ensure_dir, read_json
from create_package.util.progress import StepTracker
from create_package.util.templates import TemplateLoader

logger = logging.getLogger(__name__)

GITHUB_REMOTE_PATTERN = re.compile(r"github\.com[:/][^/]+/(?P<repo>[^/]+?)(?:\.git)?/?$")


@dataclass
class Clients:
    """Provider adapters for one run, plus the HTTP clients behind them."""

    github: GitHubClient
    codecov: CodecovClient
    npm: NpmRegistry
    buildkite: BuildkiteClient
    travis: TravisClient | None
    apis: list[ApiClient]

    def close(self) -> None:
        for api in self.apis:
            api.close()


def create_clients(
    credentials: Credentials,
    settings: Settings,
    prompter: Prompter,
    console: Console,
    transport: httpx.BaseTransport | None = None,
) -> Clients:
    """
    Build every provider adapter from the run's credentials.

    Args:
        credentials: Tokens read from the environment
        settings: Effective configuration
        prompter: Used by adapters that mint tokens interactively
        console: Console for progress lines
        transport: Optional httpx transport shared by all clients (tests)
    """
    github_api = create_github_api(credentials.github_token, settings, transport)
    codecov_api = create_codecov_api(credentials.codecov_token, settings, transport)
    npm_api = create_npm_api(settings, transport)
    buildkite_api = create_buildkite_api(credentials.buildkite_token, settings, transport)
    apis = [github_api, codecov_api, npm_api, buildkite_api]

    travis = None
    if credentials.travis_token:
        travis_api = create_travis_api(credentials.travis_token, settings, transport)
        apis.append(travis_api)
        travis = TravisClient(travis_api, settings)

    return Clients(
        github=GitHubClient(github_api, settings),
        codecov=CodecovClient(codecov_api, settings),
        npm=NpmRegistry(npm_api, settings, prompter, console),
        buildkite=BuildkiteClient(buildkite_api, settings),
        travis=travis,
        apis=apis,
    )


class Orchestrator:
    """
    Provisions the infrastructure of one npm package.

    Attributes:
        root: Target project directory
        context: Values gathered during the run, each assigned once
    """

    def __init__(
        self,
        root: Path,
        settings: Settings,
        clients: Clients,
        prompter: Prompter,
        console: Console,
        runner: CommandRunner | None = None,
        today: Callable[[], date] = date.today,
    ):
        self.root = Path(root)
        self.settings = settings
        self.clients = clients
        self.prompter = prompter
        self.console = console
        self.today = today

        runner = runner or CommandRunner(self.root)
        self.git = GitRepository(runner)
        self.installer = PackageInstaller(runner)
        self.formatter = Formatter(runner)
        self.writer = ConfigFileWriter(self.root, console)
        self.templates = TemplateLoader(settings.templates_dir)

        self.context = RunContext()
        self.tracker = StepTracker("Package setup", console)

    @property
    def steps(self) -> list[tuple[str, Callable[[], None]]]:
        return [
            ("Initializing git repository", self.init_git),
            ("Package identity", self.discover_identity),
            ("Visibility", self.choose_visibility),
            ("GitHub repository", self.ensure_remote_repository),
            ("Team access", self.grant_admin_access),
            ("License", self.ensure_license),
            ("Tests", self.ask_has_tests),
            ("Configuration files", self.write_config_files),
            ("Installing dependencies", self.install_dependencies),
            ("Fetching Codecov repository tokens", self.fetch_coverage_tokens),
            ("Setting up CI", self.setup_ci),
            ("README", self.write_readme),
            ("Prettifying", self.format_sources),
        ]

    def run(self) -> int:
        """
        Execute every step in order.

        Returns:
            Process exit code (0); failures propagate as exceptions
        """
        self.console.print("*️⃣ Welcome to the npm package initializer")
        steps = self.steps
        self.tracker.start(len(steps))
        try:
            for name, step in steps:
                self.tracker.step(name)
                logger.debug(f"Running step: {name}")
                step()
        finally:
            self.clients.close()

        self.tracker.complete()
        return 0

    # Steps

    def init_git(self) -> None:
        if self.git.is_initialized():
            self.console.print("[dim]📘 Existing .git directory found[/dim]")
            return
        self.console.print("📘 .git directory not found, initializing git repository")
        self.git.init()

    def discover_identity(self) -> None:
        manifest = self._manifest() or {}
        scope = self.settings.npm_scope

        if manifest.get("name"):
            self.context.package_name = manifest["name"]
            self.console.print(f'Package name is "{self.context.package_name}"')
        else:
            self.context.package_name = self.prompter.text(
                "package_name",
                f"What should the name of the package be? Examples: {scope}/codeintellify, "
                f"{scope}/react-loading-spinner, cxp",
                default=f"{scope}/{self.root.resolve().name}",
            )

        if manifest.get("description"):
            self.context.description = manifest["description"]
            self.console.print(f'Description is "{self.context.description}"')
        else:
            self.context.description = self.prompter.text("description", "Description")

    def choose_visibility(self) -> None:
        answer = self.prompter.choice(
            "visibility",
            "🔐 Should this package be public or private?",
            [Visibility.PUBLIC.value, Visibility.PRIVATE.value],
        )
        self.context.visibility = Visibility(answer)

    def ensure_remote_repository(self) -> None:
        github = self.clients.github
        default_repo_name = _strip_scope(self.context.require("package_name"), self.settings.npm_scope)

        if self.git.has_remote():
            self.context.repo_name = repo_name_from_url(self.git.remote_url()) or default_repo_name
            self.console.print(
                "[dim]📘 Existing git remote detected, skipping GitHub repository creation[/dim]"
            )
            return

        self.context.repo_name = self.prompter.text(
            "repo_name", "Repository name", default=default_repo_name
        )
        repo_name = self.context.repo_name

        result = github.create_repository(
            repo_name,
            private=self.context.visibility == Visibility.PRIVATE,
            description=self.context.require("description"),
        )
        if isinstance(result, Failed):
            raise result.cause
        if isinstance(result, AlreadyExists):
            self.console.print(
                f"[dim]📘 Repository already exists at {github.repo_url(repo_name)}, "
                "skipping creation[/dim]"
            )
        else:
            self.console.print(f"[green]📘 Created {github.repo_url(repo_name)}[/green]")

        self.git.add_remote(github.clone_url(repo_name))

    def grant_admin_access(self) -> None:
        self.console.print("🔑 Giving admin access to all team members")
        self.clients.github.grant_team_permission(
            self.settings.admin_team_id, self.context.require("repo_name"), "admin"
        )

    def ensure_license(self) -> None:
        default = DEFAULT_LICENSE[self.context.require("visibility")]
        answer = self.prompter.choice(
            "license",
            "License?",
            [LicenseName.UNLICENSED.value, LicenseName.APACHE_2.value],
            default=default.value,
        )
        self.context.license_name = LicenseName(answer)

        if self.context.license_name == LicenseName.UNLICENSED:
            return
        if self.writer.exists("LICENSE"):
            self.console.print("[dim]📄 LICENSE already exists, skipping creation[/dim]")
            return

        template = self.clients.github.get_license_text(self.context.license_name.value)
        self.writer.write_if_absent(
            "LICENSE",
            scaffold.fill_license(template, self.today().year, self.settings.license_holder),
        )

    def ask_has_tests(self) -> None:
        self.context.has_tests = self.prompter.confirm(
            "has_tests", "Does this package have tests?", default=True
        )

    def write_config_files(self) -> None:
        scope = self.settings.npm_scope
        has_tests = self.context.require("has_tests")

        if self.writer.exists("tsconfig.json"):
            self.console.print("[dim]📄 tsconfig.json already exists, skipping creation[/dim]")
        else:
            self.context.uses_node = self.prompter.confirm(
                "uses_node",
                "Will this package be used in NodeJS, or only in the browser? If the package runs "
                "only in the browser, TypeScript will be configured to output ES6 modules.",
                default=True,
            )
            self.writer.write_json_if_absent(
                "tsconfig.json", scaffold.tsconfig(scope, self.context.uses_node)
            )

        self.writer.write_json_if_absent(".eslintrc.json", scaffold.eslintrc(scope))
        self.writer.write_json_if_absent(".vscode/settings.json", scaffold.VSCODE_SETTINGS)
        self.writer.write_if_absent(".editorconfig", scaffold.EDITORCONFIG)
        self.writer.write_if_absent("prettier.config.js", scaffold.prettier_config(scope))
        self.writer.write_if_absent(".prettierignore", scaffold.prettierignore(has_tests))
        self.writer.write_if_absent(".gitignore", scaffold.gitignore(has_tests))
        self.writer.write_json_if_absent("renovate.json", scaffold.renovate(self.settings.github_org))
        self.writer.write_json_if_absent(
            "package.json",
            scaffold.package_manifest(
                name=self.context.require("package_name"),
                description=self.context.require("description"),
                license_name=self.context.require("license_name").value,
                repository_url=self.clients.github.clone_url(self.context.require("repo_name")),
                has_tests=has_tests,
            ),
        )

        if not self.writer.exists("src"):
            self.console.print("📂 Creating src directory")
            ensure_dir(self.writer.path("src"))

    def install_dependencies(self) -> None:
        required = scaffold.dev_dependencies(self.settings.npm_scope, self.context.require("has_tests"))
        missing = scaffold.missing_dependencies(required, self._manifest())

        self.console.print("📦 Installing dependencies")
        if missing:
            logger.info(f"Missing dev dependencies: {', '.join(missing)}")
            self.installer.add_dev(required)
        else:
            self.installer.install()

    def fetch_coverage_tokens(self) -> None:
        tokens = self.clients.codecov.get_tokens(self.context.require("repo_name"))
        self.context.codecov_upload_token = tokens.upload_token
        self.context.codecov_image_token = tokens.image_token
        self.console.print("[green]✓ Got Codecov upload and graphing tokens[/green]")

    def setup_ci(self) -> None:
        provider = create_ci_provider(
            self.context.require("visibility"),
            CiDependencies(
                settings=self.settings,
                writer=self.writer,
                console=self.console,
                prompter=self.prompter,
                github=self.clients.github,
                npm=self.clients.npm,
                buildkite=self.clients.buildkite,
                travis=self.clients.travis,
            ),
        )
        logger.info(f"Using CI provider {provider.name}")
        result = provider.setup(self.context)
        self.context.build_badge = result.badge_markdown()

    def write_readme(self) -> None:
        if self.writer.exists("README.md"):
            self.console.print("[dim]📄 README.md already exists, skipping creation[/dim]")
            return

        repo_name = self.context.require("repo_name")
        has_tests = self.context.require("has_tests")
        coverage_badge = None
        if has_tests:
            coverage_badge = self.clients.codecov.badge(
                repo_name, self.context.require("codecov_image_token")
            )

        readme = self.templates.render(
            "README.md.j2",
            {
                "package_name": self.context.require("package_name"),
                "description": self.context.require("description"),
                "is_public": self.context.is_public,
                "build_badge": self.context.require("build_badge"),
                "coverage_badge": coverage_badge,
                "has_tests": has_tests,
            },
        )
        self.writer.write_if_absent("README.md", readme)

    def format_sources(self) -> None:
        self.console.print("💄 Prettifying")
        self.formatter.format()

    def _manifest(self) -> dict[str, Any] | None:
        return read_json(self.writer.path("package.json"))


def repo_name_from_url(url: str | None) -> str | None:
    """
    Repository name of a GitHub remote URL.

    Accepts ``https://github.com/<org>/<repo>(.git)`` and
    ``git@github.com:<org>/<repo>.git``; returns None for anything else.
    """
    if not url:
        return None
    match = GITHUB_REMOTE_PATTERN.search(url.strip())
    return match.group("repo") if match else None


def _strip_scope(package_name: str, scope: str) -> str:
    prefix = f"{scope}/"
    if package_name.startswith(prefix):
        return package_name[len(prefix) :]
    return package_name


def create_orchestrator(
    root: Path,
    settings: Settings,
    env: Mapping[str, str],
    answer_source: AnswerSource,
    console: Console,
    transport: httpx.BaseTransport | None = None,
    runner: CommandRunner | None = None,
) -> Orchestrator:
    """
    Check credentials and build an orchestrator for ``root``.

    Credentials are read before anything else so a missing token fails the run
    before any side effect.

    Raises:
        MissingTokenError: If a required token is not set
    """
    credentials = Credentials.from_env(env, settings)
    console.print("[green]✓ Using provider tokens from environment[/green]")

    prompter = Prompter(answer_source)
    clients = create_clients(credentials, settings, prompter, console, transport)
    return Orchestrator(root, settings, clients, prompter, console, runner=runner)
