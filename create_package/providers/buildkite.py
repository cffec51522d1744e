"""
Buildkite REST API client.
"""

from typing import Any

import httpx

from create_package.config import Settings
from create_package.providers.http import ApiClient, error_entries
from create_package.providers.result import CreateResult


def create_buildkite_api(
    token: str, settings: Settings, transport: httpx.BaseTransport | None = None
) -> ApiClient:
    return ApiClient(
        "Buildkite",
        settings.buildkite_api_url,
        headers={"Authorization": f"Bearer {token}"},
        timeout=settings.http_timeout,
        transport=transport,
    )


def is_pipeline_name_conflict(response: httpx.Response) -> bool:
    if response.status_code != 422:
        return False
    errors = error_entries(response)
    return bool(errors) and errors[0].get("field") == "name" and errors[0].get("code") == "already_exists"


class BuildkiteClient:
    def __init__(self, api: ApiClient, settings: Settings):
        self.api = api
        self.organization = settings.buildkite_organization

    def create_pipeline(self, pipeline: dict[str, Any]) -> CreateResult:
        return self.api.create(
            f"organizations/{self.organization}/pipelines",
            json=pipeline,
            key=pipeline["name"],
            is_conflict=is_pipeline_name_conflict,
        )

    def get_pipeline(self, slug: str) -> dict[str, Any]:
        return self.api.get(f"organizations/{self.organization}/pipelines/{slug}")

    def update_pipeline_env(self, slug: str, env: dict[str, str]) -> dict[str, Any]:
        return self.api.patch(
            f"organizations/{self.organization}/pipelines/{slug}",
            json={"env": env},
        )
