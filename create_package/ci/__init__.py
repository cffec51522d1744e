"""
CI provider adapters.

Exactly one adapter runs per invocation. ``create_ci_provider`` picks it with a
single switch on visibility: private packages build on Buildkite, public ones
on GitHub Actions (or Travis CI when configured).
"""

from dataclasses import dataclass
from typing import Protocol

from rich.console import Console

from create_package.config import Settings
from create_package.context import RunContext, Visibility
from create_package.prompt import Prompter
from create_package.providers.buildkite import BuildkiteClient
from create_package.providers.github import GitHubClient
from create_package.providers.npm import NpmRegistry
from create_package.providers.travis import TravisClient
from create_package.util.files import ConfigFileWriter


@dataclass(frozen=True)
class CiResult:
    """Where the build status of the new package can be seen."""

    badge_url: str
    web_url: str

    def badge_markdown(self) -> str:
        return f"[![build]({self.badge_url})]({self.web_url})"


class CiProvider(Protocol):
    name: str

    def setup(self, context: RunContext) -> CiResult: ...


@dataclass
class CiDependencies:
    """Collaborators CI adapters are built from."""

    settings: Settings
    writer: ConfigFileWriter
    console: Console
    prompter: Prompter
    github: GitHubClient
    npm: NpmRegistry
    buildkite: BuildkiteClient | None = None
    travis: TravisClient | None = None


def select_ci_provider_name(visibility: Visibility, settings: Settings) -> str:
    if visibility == Visibility.PRIVATE:
        return "buildkite"
    return settings.public_ci_provider


def create_ci_provider(visibility: Visibility, deps: CiDependencies) -> CiProvider:
    """
    Build the CI adapter for a package of the given visibility.

    Args:
        visibility: Visibility chosen for the package
        deps: Clients and helpers the adapters need

    Returns:
        The one adapter to run
    """
    from create_package.ci.buildkite import BuildkiteCi
    from create_package.ci.github_workflow import GitHubWorkflowCi
    from create_package.ci.travis import TravisCi

    name = select_ci_provider_name(visibility, deps.settings)
    if name == "buildkite":
        if deps.buildkite is None:
            raise ValueError("Buildkite client is required for private packages")
        return BuildkiteCi(deps.buildkite, deps.github, deps.npm, deps.writer, deps.console, deps.settings)
    if name == "travis":
        if deps.travis is None:
            raise ValueError("Travis client is required when ci.public_provider is travis")
        return TravisCi(deps.travis, deps.github, deps.npm, deps.writer, deps.console, deps.prompter, deps.settings)
    return GitHubWorkflowCi(deps.github, deps.npm, deps.writer, deps.console, deps.settings)


__all__ = [
    "CiDependencies",
    "CiProvider",
    "CiResult",
    "create_ci_provider",
    "select_ci_provider_name",
]
