"""
Explicitly configured JSON-over-HTTP client shared by all providers.
"""

import logging
from collections.abc import Callable, Mapping
from typing import Any

import httpx

from create_package.exceptions import ProviderAPIError
from create_package.providers.result import AlreadyExists, Created, CreateResult, Failed
from create_package.util.redact import redact_sensitive

logger = logging.getLogger(__name__)

USER_AGENT = "create-package"

# Response bodies longer than this are truncated in error messages
MAX_ERROR_BODY = 2000


class ApiClient:
    """
    HTTP client bound to one provider.

    Attributes:
        provider_name: Human readable provider name used in errors
        base_url: Base URL all request paths are relative to
    """

    def __init__(
        self,
        provider_name: str,
        base_url: str,
        headers: Mapping[str, str] | None = None,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.provider_name = provider_name
        self.base_url = base_url
        self._client = httpx.Client(
            base_url=base_url,
            headers={"User-Agent": USER_AGENT, "Accept": "application/json", **(headers or {})},
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        headers: Mapping[str, str] | None = None,
        auth: tuple[str, str] | None = None,
    ) -> httpx.Response:
        """
        Send a request and return the response.

        Raises:
            ProviderAPIError: For any 4xx/5xx response
            httpx.HTTPError: For transport failures
        """
        logger.debug(f"{self.provider_name}: {method} {path}")
        response = self._client.request(method, path, json=json, headers=headers, auth=auth)
        if response.is_error:
            raise self._error(response)
        return response

    def get(self, path: str, **kwargs) -> Any:
        return _decode(self.request("GET", path, **kwargs))

    def post(self, path: str, json: Any = None, **kwargs) -> Any:
        return _decode(self.request("POST", path, json=json, **kwargs))

    def put(self, path: str, json: Any = None, **kwargs) -> Any:
        return _decode(self.request("PUT", path, json=json, **kwargs))

    def patch(self, path: str, json: Any = None, **kwargs) -> Any:
        return _decode(self.request("PATCH", path, json=json, **kwargs))

    def create(
        self,
        path: str,
        json: Any,
        key: str,
        is_conflict: Callable[[httpx.Response], bool],
        method: str = "POST",
    ) -> CreateResult:
        """
        Create a resource, reporting the outcome as a value.

        Args:
            path: Request path
            json: Request body
            key: Identifier of the resource, reported back on conflicts
            is_conflict: Decides whether an error response means "already exists"
            method: HTTP method (default: POST)

        Returns:
            Created with the decoded body, AlreadyExists, or Failed
        """
        try:
            response = self._client.request(method, path, json=json)
        except httpx.HTTPError as e:
            return Failed(e)

        if not response.is_error:
            return Created(_decode(response))
        if is_conflict(response):
            logger.debug(f"{self.provider_name}: {key} already exists")
            return AlreadyExists(key)
        return Failed(self._error(response))

    def _error(self, response: httpx.Response) -> ProviderAPIError:
        body = redact_sensitive(response.text)
        if len(body) > MAX_ERROR_BODY:
            body = body[:MAX_ERROR_BODY] + "..."
        return ProviderAPIError(
            self.provider_name,
            response.request.method,
            str(response.request.url),
            response.status_code,
            body,
        )


def _decode(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    return response.json()


def error_entries(response: httpx.Response) -> list[dict[str, Any]]:
    """Return the ``errors`` array GitHub and Buildkite put in 422 responses."""
    try:
        payload = response.json()
    except ValueError:
        return []
    if not isinstance(payload, dict):
        return []
    errors = payload.get("errors")
    if not isinstance(errors, list):
        return []
    return [error for error in errors if isinstance(error, dict)]
