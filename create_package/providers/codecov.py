"""
Codecov adapter.
"""

from dataclasses import dataclass

import httpx

from create_package.config import Settings
from create_package.exceptions import MissingProviderFieldError
from create_package.providers.http import ApiClient


@dataclass(frozen=True)
class CoverageTokens:
    upload_token: str
    image_token: str


def create_codecov_api(
    token: str, settings: Settings, transport: httpx.BaseTransport | None = None
) -> ApiClient:
    return ApiClient(
        "Codecov",
        settings.codecov_api_url,
        headers={"Authorization": f"token {token}"},
        timeout=settings.http_timeout,
        transport=transport,
    )


class CodecovClient:
    def __init__(self, api: ApiClient, settings: Settings):
        self.api = api
        self.org = settings.github_org

    def repo_url(self, repo_name: str) -> str:
        return f"https://codecov.io/gh/{self.org}/{repo_name}"

    def get_tokens(self, repo_name: str) -> CoverageTokens:
        """
        Fetch the upload and graph image tokens of a repository.

        Raises:
            MissingProviderFieldError: If either token is absent, which means the
                repository is not registered with Codecov
        """
        payload = self.api.get(f"gh/{self.org}/{repo_name}") or {}
        repo = payload.get("repo") or {}

        if not repo.get("upload_token"):
            raise MissingProviderFieldError("Codecov", "upload token", self.repo_url(repo_name))
        if not repo.get("image_token"):
            raise MissingProviderFieldError(
                "Codecov", "graphing image token", self.repo_url(repo_name)
            )

        return CoverageTokens(upload_token=repo["upload_token"], image_token=repo["image_token"])

    def badge(self, repo_name: str, image_token: str) -> str:
        url = self.repo_url(repo_name)
        return f"[![codecov]({url}/branch/master/graph/badge.svg?token={image_token})]({url})"
