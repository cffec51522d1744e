"""
Travis CI (API v3) client.
"""

from typing import Any
from urllib.parse import quote

import httpx

from create_package.config import Settings
from create_package.providers.http import ApiClient


def create_travis_api(
    token: str, settings: Settings, transport: httpx.BaseTransport | None = None
) -> ApiClient:
    return ApiClient(
        "Travis CI",
        settings.travis_api_url,
        headers={"Authorization": f"token {token}", "Travis-API-Version": "3"},
        timeout=settings.http_timeout,
        transport=transport,
    )


class TravisClient:
    def __init__(self, api: ApiClient, settings: Settings):
        self.api = api
        self.org = settings.github_org

    def repo_slug(self, repo_name: str) -> str:
        """URL-encoded ``org/repo`` slug as Travis expects it in paths."""
        return quote(f"{self.org}/{repo_name}", safe="")

    def current_user(self) -> dict[str, Any]:
        return self.api.get("user")

    def sync(self, user_id: int) -> None:
        self.api.post(f"user/{user_id}/sync")

    def activate(self, repo_name: str) -> None:
        self.api.post(f"repo/{self.repo_slug(repo_name)}/activate")

    def env_var_names(self, repo_name: str) -> set[str]:
        payload = self.api.get(f"repo/{self.repo_slug(repo_name)}/env_vars") or {}
        return {env_var["name"] for env_var in payload.get("env_vars", [])}

    def create_env_var(self, repo_name: str, name: str, value: str) -> None:
        self.api.post(
            f"repo/{self.repo_slug(repo_name)}/env_vars",
            json={
                "env_var.name": name,
                "env_var.value": value,
                "env_var.public": False,
            },
        )
