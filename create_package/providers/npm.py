"""
npm registry adapter: issues publishing tokens for the bot account.
"""

import logging
from datetime import datetime, timezone

import httpx
from rich.console import Console

from create_package.config import Settings
from create_package.exceptions import RegistryTokenError
from create_package.prompt import Prompter
from create_package.providers.http import ApiClient

logger = logging.getLogger(__name__)


def create_npm_api(settings: Settings, transport: httpx.BaseTransport | None = None) -> ApiClient:
    return ApiClient(
        "npm",
        settings.npm_registry_url,
        timeout=settings.http_timeout,
        transport=transport,
    )


class NpmRegistry:
    def __init__(self, api: ApiClient, settings: Settings, prompter: Prompter, console: Console):
        self.api = api
        self.username = settings.npm_bot_username
        self.credentials_hint = settings.npm_credentials_hint
        self.prompter = prompter
        self.console = console

    def create_bot_token(self) -> str:
        """
        Log the bot account in and return a new publishing token.

        The login is interactive: the operator supplies the bot password and a
        one-time code from its authenticator.

        Raises:
            RegistryTokenError: If the registry answers without a token
        """
        if self.credentials_hint:
            self.console.print(f"[dim]{self.credentials_hint}[/dim]")
        password = self.prompter.password("npm_bot_password", f"@{self.username} npm password")
        otp = self.prompter.text("npm_bot_otp", f"@{self.username} npm 2FA code")

        user_id = f"org.couchdb.user:{self.username}"
        response = self.api.put(
            f"-/user/{user_id}",
            json={
                "_id": user_id,
                "name": self.username,
                "password": password,
                "type": "user",
                "roles": [],
                "date": datetime.now(timezone.utc).isoformat(),
            },
            headers={"npm-otp": otp},
        )
        token = (response or {}).get("token")
        if not token:
            raise RegistryTokenError(self.api.base_url, self.username)

        self.console.print(f"[green]🔑 Created @{self.username} npm token[/green]")
        return token
