"""
Tests for the provider adapters, against a faked HTTP transport.
"""

import base64
import json

import httpx
import pytest
from nacl import encoding, public

from create_package.exceptions import (
    MissingProviderFieldError,
    ProviderAPIError,
    RegistryTokenError,
)
from create_package.providers.buildkite import BuildkiteClient, create_buildkite_api
from create_package.providers.codecov import CodecovClient, create_codecov_api
from create_package.providers.github import GitHubClient, create_github_api, seal_secret
from create_package.providers.http import ApiClient
from create_package.providers.npm import NpmRegistry, create_npm_api
from create_package.providers.result import AlreadyExists, Created, Failed
from create_package.providers.travis import TravisClient, create_travis_api

GITHUB = "https://api.github.com"
CODECOV = "https://codecov.io/api"
BUILDKITE = "https://api.buildkite.com/v2"
TRAVIS = "https://api.travis-ci.org"
NPM = "https://registry.npmjs.org"


@pytest.fixture
def github(fake_api, settings):
    return GitHubClient(create_github_api("gh-token", settings, fake_api.transport), settings)


class TestApiClient:
    """Tests for the shared HTTP client."""

    def test_error_response_raises_with_redacted_body(self, fake_api):
        fake_api.add("GET", "https://example.com/thing", (500, {"token": "super-secret"}))
        api = ApiClient("Example", "https://example.com/", transport=fake_api.transport)

        with pytest.raises(ProviderAPIError) as exc_info:
            api.get("thing")

        assert exc_info.value.status_code == 500
        assert "super-secret" not in exc_info.value.message
        assert "GET https://example.com/thing returned 500" in exc_info.value.message

    def test_empty_response_decodes_to_none(self, fake_api):
        fake_api.add("PUT", "https://example.com/thing", (204, None))
        api = ApiClient("Example", "https://example.com/", transport=fake_api.transport)

        assert api.put("thing", json={}) is None

    def test_create_reports_transport_failure(self):
        def refuse(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = ApiClient("Example", "https://example.com/", transport=httpx.MockTransport(refuse))
        result = api.create("things", json={}, key="x", is_conflict=lambda r: False)

        assert isinstance(result, Failed)
        assert isinstance(result.cause, httpx.ConnectError)

    def test_sends_user_agent(self, fake_api):
        fake_api.add("GET", "https://example.com/thing", (200, {}))
        ApiClient("Example", "https://example.com/", transport=fake_api.transport).get("thing")

        assert fake_api.requests[0].headers["User-Agent"] == "create-package"


class TestGitHubClient:
    """Tests for the GitHub adapter."""

    def test_create_repository(self, github, fake_api):
        fake_api.add("POST", f"{GITHUB}/orgs/sourcegraph/repos", (201, {"name": "widget"}))

        result = github.create_repository("widget", private=True, description="A widget")

        assert isinstance(result, Created)
        body = json.loads(fake_api.requests[0].content)
        assert body["name"] == "widget"
        assert body["private"] is True
        assert body["allow_merge_commit"] is False
        assert fake_api.requests[0].headers["Authorization"] == "Bearer gh-token"

    def test_create_repository_already_exists(self, github, fake_api):
        fake_api.add(
            "POST",
            f"{GITHUB}/orgs/sourcegraph/repos",
            (
                422,
                {
                    "message": "Repository creation failed.",
                    "errors": [
                        {
                            "resource": "Repository",
                            "code": "custom",
                            "field": "name",
                            "message": "name already exists on this account",
                        }
                    ],
                },
            ),
        )

        result = github.create_repository("widget", private=False, description="A widget")

        assert result == AlreadyExists("widget")

    def test_other_validation_error_fails(self, github, fake_api):
        fake_api.add(
            "POST",
            f"{GITHUB}/orgs/sourcegraph/repos",
            (422, {"errors": [{"resource": "Repository", "field": "description", "code": "invalid"}]}),
        )

        result = github.create_repository("widget", private=False, description="x" * 1000)

        assert isinstance(result, Failed)
        assert isinstance(result.cause, ProviderAPIError)
        assert result.cause.status_code == 422

    def test_grant_team_permission(self, github, fake_api):
        fake_api.add("PUT", f"{GITHUB}/teams/626894/repos/sourcegraph/widget", (204, None))

        github.grant_team_permission(626894, "widget", "admin")

        assert json.loads(fake_api.requests[0].content) == {"permission": "admin"}

    def test_get_license_text(self, github, fake_api):
        fake_api.add("GET", f"{GITHUB}/licenses/Apache-2.0", (200, {"body": "Copyright [year] [fullname]"}))
        assert github.get_license_text("Apache-2.0") == "Copyright [year] [fullname]"

    def test_get_license_text_without_body(self, github, fake_api):
        fake_api.add("GET", f"{GITHUB}/licenses/Apache-2.0", (200, {"key": "apache-2.0"}))
        with pytest.raises(MissingProviderFieldError):
            github.get_license_text("Apache-2.0")

    def test_webhook_already_exists(self, github, fake_api):
        fake_api.add(
            "POST",
            f"{GITHUB}/repos/sourcegraph/widget/hooks",
            (422, {"errors": [{"resource": "Hook", "code": "custom", "message": "Hook already exists on this repository"}]}),
        )

        result = github.create_webhook("widget", "https://webhook.example/x", ["push"])

        assert isinstance(result, AlreadyExists)

    def test_secret_exists(self, github, fake_api):
        fake_api.add("GET", f"{GITHUB}/repos/sourcegraph/widget/actions/secrets/NPM_TOKEN", (200, {"name": "NPM_TOKEN"}))

        assert github.secret_exists("widget", "NPM_TOKEN") is True
        # Unrouted paths answer 404
        assert github.secret_exists("widget", "CODECOV_TOKEN") is False

    def test_secret_exists_propagates_other_errors(self, github, fake_api):
        fake_api.add("GET", f"{GITHUB}/repos/sourcegraph/widget/actions/secrets/NPM_TOKEN", (500, {}))
        with pytest.raises(ProviderAPIError):
            github.secret_exists("widget", "NPM_TOKEN")

    def test_create_secret_seals_value(self, github, fake_api):
        private_key = public.PrivateKey.generate()
        public_key = private_key.public_key.encode(encoding.Base64Encoder).decode()
        fake_api.add(
            "GET",
            f"{GITHUB}/repos/sourcegraph/widget/actions/secrets/public-key",
            (200, {"key": public_key, "key_id": "key-1"}),
        )
        fake_api.add("PUT", f"{GITHUB}/repos/sourcegraph/widget/actions/secrets/NPM_TOKEN", (201, None))

        github.create_secret("widget", "NPM_TOKEN", "npm-secret")

        body = json.loads(fake_api.calls("PUT", f"{GITHUB}/repos/sourcegraph/widget/actions/secrets/NPM_TOKEN")[0].content)
        assert body["key_id"] == "key-1"
        decrypted = public.SealedBox(private_key).decrypt(base64.b64decode(body["encrypted_value"]))
        assert decrypted == b"npm-secret"

    def test_seal_secret_is_not_plaintext(self):
        key = public.PrivateKey.generate().public_key.encode(encoding.Base64Encoder).decode()
        assert "npm-secret" not in seal_secret(key, "npm-secret")

    def test_create_bot_token(self, github, fake_api, make_prompter):
        fake_api.add("POST", f"{GITHUB}/authorizations", (201, {"token": "bot-gh-token"}))
        prompter = make_prompter({"github_bot_password": "hunter2", "github_bot_otp": "123456"})

        assert github.create_bot_token("widget", prompter) == "bot-gh-token"

        request = fake_api.requests[0]
        assert request.headers["X-GitHub-OTP"] == "123456"
        expected = base64.b64encode(b"sourcegraph-bot:hunter2").decode()
        assert request.headers["Authorization"] == f"Basic {expected}"


class TestCodecovClient:
    """Tests for the Codecov adapter."""

    @pytest.fixture
    def codecov(self, fake_api, settings):
        return CodecovClient(create_codecov_api("codecov-token", settings, fake_api.transport), settings)

    def test_get_tokens(self, codecov, fake_api):
        fake_api.add(
            "GET",
            f"{CODECOV}/gh/sourcegraph/widget",
            (200, {"repo": {"upload_token": "upload-tok", "image_token": "image-tok"}}),
        )

        tokens = codecov.get_tokens("widget")

        assert tokens.upload_token == "upload-tok"
        assert tokens.image_token == "image-tok"
        assert fake_api.requests[0].headers["Authorization"] == "token codecov-token"

    def test_missing_upload_token(self, codecov, fake_api):
        fake_api.add("GET", f"{CODECOV}/gh/sourcegraph/widget", (200, {"repo": {"image_token": "image-tok"}}))

        with pytest.raises(MissingProviderFieldError) as exc_info:
            codecov.get_tokens("widget")

        assert exc_info.value.message == (
            "No upload token returned by Codecov for https://codecov.io/gh/sourcegraph/widget"
        )

    def test_missing_image_token(self, codecov, fake_api):
        fake_api.add("GET", f"{CODECOV}/gh/sourcegraph/widget", (200, {"repo": {"upload_token": "upload-tok"}}))

        with pytest.raises(MissingProviderFieldError) as exc_info:
            codecov.get_tokens("widget")
        assert "graphing image token" in exc_info.value.message

    def test_missing_repo(self, codecov, fake_api):
        fake_api.add("GET", f"{CODECOV}/gh/sourcegraph/widget", (200, {}))
        with pytest.raises(MissingProviderFieldError):
            codecov.get_tokens("widget")

    def test_badge(self, codecov):
        assert codecov.badge("widget", "image-tok") == (
            "[![codecov](https://codecov.io/gh/sourcegraph/widget/branch/master/graph/badge.svg?token=image-tok)]"
            "(https://codecov.io/gh/sourcegraph/widget)"
        )


class TestNpmRegistry:
    """Tests for the npm registry adapter."""

    URL = f"{NPM}/-/user/org.couchdb.user:sourcegraph-bot"

    def registry(self, fake_api, settings, console, make_prompter):
        prompter = make_prompter({"npm_bot_password": "hunter2", "npm_bot_otp": "654321"})
        return NpmRegistry(create_npm_api(settings, fake_api.transport), settings, prompter, console)

    def test_create_bot_token(self, fake_api, settings, console, make_prompter):
        fake_api.add("PUT", self.URL, (201, {"ok": True, "token": "npm-tok"}))

        token = self.registry(fake_api, settings, console, make_prompter).create_bot_token()

        assert token == "npm-tok"
        request = fake_api.requests[0]
        assert request.headers["npm-otp"] == "654321"
        body = json.loads(request.content)
        assert body["name"] == "sourcegraph-bot"
        assert body["password"] == "hunter2"
        assert body["_id"] == "org.couchdb.user:sourcegraph-bot"
        assert "password manager" in console.file.getvalue()

    def test_missing_token(self, fake_api, settings, console, make_prompter):
        fake_api.add("PUT", self.URL, (201, {"ok": True}))

        with pytest.raises(RegistryTokenError):
            self.registry(fake_api, settings, console, make_prompter).create_bot_token()


class TestBuildkiteClient:
    """Tests for the Buildkite client."""

    @pytest.fixture
    def buildkite(self, fake_api, settings):
        return BuildkiteClient(create_buildkite_api("bk-token", settings, fake_api.transport), settings)

    def test_pipeline_already_exists(self, buildkite, fake_api):
        fake_api.add(
            "POST",
            f"{BUILDKITE}/organizations/sourcegraph/pipelines",
            (422, {"message": "Validation Failed", "errors": [{"field": "name", "code": "already_exists"}]}),
        )

        assert buildkite.create_pipeline({"name": "widget"}) == AlreadyExists("widget")

    def test_other_pipeline_error(self, buildkite, fake_api):
        fake_api.add(
            "POST",
            f"{BUILDKITE}/organizations/sourcegraph/pipelines",
            (422, {"errors": [{"field": "repository", "code": "invalid"}]}),
        )

        assert isinstance(buildkite.create_pipeline({"name": "widget"}), Failed)

    def test_update_pipeline_env(self, buildkite, fake_api):
        fake_api.add("PATCH", f"{BUILDKITE}/organizations/sourcegraph/pipelines/widget", (200, {"slug": "widget"}))

        buildkite.update_pipeline_env("widget", {"NPM_TOKEN": "npm-tok"})

        assert json.loads(fake_api.requests[0].content) == {"env": {"NPM_TOKEN": "npm-tok"}}
        assert fake_api.requests[0].headers["Authorization"] == "Bearer bk-token"


class TestTravisClient:
    """Tests for the Travis CI client."""

    @pytest.fixture
    def travis(self, fake_api, settings):
        return TravisClient(create_travis_api("travis-token", settings, fake_api.transport), settings)

    def test_repo_slug_is_url_encoded(self, travis):
        assert travis.repo_slug("widget") == "sourcegraph%2Fwidget"

    def test_env_var_names(self, travis, fake_api):
        fake_api.add(
            "GET",
            f"{TRAVIS}/repo/sourcegraph/widget/env_vars",
            (200, {"env_vars": [{"name": "NPM_TOKEN", "public": False}]}),
        )

        assert travis.env_var_names("widget") == {"NPM_TOKEN"}
        request = fake_api.requests[0]
        assert request.headers["Travis-API-Version"] == "3"
        assert b"sourcegraph%2Fwidget" in request.url.raw_path

    def test_create_env_var(self, travis, fake_api):
        fake_api.add("POST", f"{TRAVIS}/repo/sourcegraph/widget/env_vars", (201, {}))

        travis.create_env_var("widget", "NPM_TOKEN", "npm-tok")

        assert json.loads(fake_api.requests[0].content) == {
            "env_var.name": "NPM_TOKEN",
            "env_var.value": "npm-tok",
            "env_var.public": False,
        }
