"""
GitHub adapter: repositories, team permissions, licenses, webhooks,
Actions secrets and bot tokens.
"""

import logging
import re
from base64 import b64encode

import httpx
from nacl import encoding, public

from create_package.config import Settings
from create_package.exceptions import MissingProviderFieldError, ProviderAPIError
from create_package.prompt import Prompter
from create_package.providers.http import ApiClient, error_entries
from create_package.providers.result import CreateResult

logger = logging.getLogger(__name__)

ALREADY_EXISTS = re.compile(r"already exists", re.IGNORECASE)
HOOK_ALREADY_EXISTS = re.compile(r"hook already exists", re.IGNORECASE)


def create_github_api(
    token: str, settings: Settings, transport: httpx.BaseTransport | None = None
) -> ApiClient:
    return ApiClient(
        "GitHub",
        settings.github_api_url,
        headers={
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
        },
        timeout=settings.http_timeout,
        transport=transport,
    )


def is_repository_name_conflict(response: httpx.Response) -> bool:
    if response.status_code != 422:
        return False
    return any(
        error.get("resource") == "Repository"
        and error.get("field") == "name"
        and isinstance(error.get("message"), str)
        and ALREADY_EXISTS.search(error["message"])
        for error in error_entries(response)
    )


def is_hook_conflict(response: httpx.Response) -> bool:
    if response.status_code != 422:
        return False
    return any(
        isinstance(error.get("message"), str) and HOOK_ALREADY_EXISTS.search(error["message"])
        for error in error_entries(response)
    )


def seal_secret(public_key: str, value: str) -> str:
    """
    Encrypt ``value`` with a libsodium sealed box for the given base64 public key.

    Only the holder of the matching private key (GitHub) can decrypt the result.

    Returns:
        Base64 encoded ciphertext
    """
    key = public.PublicKey(public_key.encode("utf-8"), encoding.Base64Encoder)
    sealed_box = public.SealedBox(key)
    return b64encode(sealed_box.encrypt(value.encode("utf-8"))).decode("utf-8")


class GitHubClient:
    """GitHub operations scoped to the configured organization."""

    def __init__(self, api: ApiClient, settings: Settings):
        self.api = api
        self.org = settings.github_org
        self.bot_username = settings.github_bot_username

    def repo_url(self, repo_name: str) -> str:
        return f"https://github.com/{self.org}/{repo_name}"

    def clone_url(self, repo_name: str) -> str:
        return f"https://github.com/{self.org}/{repo_name}.git"

    def create_repository(self, name: str, private: bool, description: str) -> CreateResult:
        return self.api.create(
            f"orgs/{self.org}/repos",
            json={
                "name": name,
                "private": private,
                "description": description,
                "has_wiki": False,
                "has_projects": False,
                "allow_merge_commit": False,
            },
            key=name,
            is_conflict=is_repository_name_conflict,
        )

    def grant_team_permission(self, team_id: int, repo_name: str, permission: str) -> None:
        self.api.put(
            f"teams/{team_id}/repos/{self.org}/{repo_name}",
            json={"permission": permission},
        )

    def get_license_text(self, spdx_id: str) -> str:
        """Return the license template text, with [year]/[fullname] placeholders intact."""
        license_data = self.api.get(f"licenses/{spdx_id}")
        body = (license_data or {}).get("body")
        if not body:
            raise MissingProviderFieldError("GitHub", "license body", f"licenses/{spdx_id}")
        return body

    def create_webhook(self, repo_name: str, url: str, events: list[str]) -> CreateResult:
        return self.api.create(
            f"repos/{self.org}/{repo_name}/hooks",
            json={
                "name": "web",
                "events": events,
                "config": {"url": url, "content_type": "json"},
            },
            key=url,
            is_conflict=is_hook_conflict,
        )

    def secret_exists(self, repo_name: str, name: str) -> bool:
        try:
            self.api.get(f"repos/{self.org}/{repo_name}/actions/secrets/{name}")
        except ProviderAPIError as e:
            if e.status_code == 404:
                return False
            raise
        return True

    def create_secret(self, repo_name: str, name: str, value: str) -> None:
        """Store an Actions secret, sealed against the repository's public key."""
        key = self.api.get(f"repos/{self.org}/{repo_name}/actions/secrets/public-key")
        if not key or "key" not in key or "key_id" not in key:
            raise MissingProviderFieldError(
                "GitHub", "public key", f"{self.repo_url(repo_name)}/settings/secrets"
            )
        self.api.put(
            f"repos/{self.org}/{repo_name}/actions/secrets/{name}",
            json={
                "encrypted_value": seal_secret(key["key"], value),
                "key_id": key["key_id"],
            },
        )

    def create_bot_token(self, repo_name: str, prompter: Prompter) -> str:
        """
        Issue a personal access token for the bot account.

        Needs the bot password and a current one-time code from the operator.

        Returns:
            The new token
        """
        password = prompter.password("github_bot_password", f"@{self.bot_username} GitHub password")
        otp = prompter.text("github_bot_otp", f"@{self.bot_username} GitHub 2FA code")

        authorization = self.api.post(
            "authorizations",
            json={
                "scopes": ["repo"],
                "note": f"create-package CI token for {self.org}/{repo_name}",
            },
            auth=(self.bot_username, password),
            headers={"X-GitHub-OTP": otp},
        )
        token = (authorization or {}).get("token")
        if not token:
            raise MissingProviderFieldError("GitHub", "token", "authorizations")

        logger.info(f"Created @{self.bot_username} GitHub token")
        return token
