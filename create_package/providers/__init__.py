"""
Provider adapters for the remote services a package is wired up to.
"""

from create_package.providers.buildkite import BuildkiteClient
from create_package.providers.codecov import CodecovClient, CoverageTokens
from create_package.providers.github import GitHubClient
from create_package.providers.http import ApiClient
from create_package.providers.npm import NpmRegistry
from create_package.providers.result import AlreadyExists, Created, CreateResult, Failed
from create_package.providers.travis import TravisClient

__all__ = [
    "ApiClient",
    "AlreadyExists",
    "BuildkiteClient",
    "CodecovClient",
    "CoverageTokens",
    "Created",
    "CreateResult",
    "Failed",
    "GitHubClient",
    "NpmRegistry",
    "TravisClient",
]
