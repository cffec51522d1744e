"""
Configuration and credentials for create-package.

Settings come from ``DEFAULT_CONFIG`` deep-merged with an optional YAML file
and are validated against ``schema/config.schema.json``. Provider tokens are
only ever read from the environment.
"""

import copy
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validate

from create_package.exceptions import InvalidConfigError, MissingTokenError

logger = logging.getLogger(__name__)

SCHEMA_FILE = Path(__file__).parent / "schema" / "config.schema.json"

CONFIG_FILE_NAME = ".create-package.yaml"

PUBLIC_PROVIDERS = ("github-actions", "travis")

DEFAULT_CONFIG: dict[str, Any] = {
    "license_holder": "Sourcegraph",
    "templates_dir": None,
    "github": {
        "api_url": "https://api.github.com/",
        "org": "sourcegraph",
        # "Everyone" team, see https://api.github.com/orgs/sourcegraph/teams
        "admin_team_id": 626894,
        # "buildkite" team
        "ci_team_id": 2444623,
        "bot_username": "sourcegraph-bot",
    },
    "npm": {
        "registry_url": "https://registry.npmjs.org/",
        "scope": "@sourcegraph",
        "bot_username": "sourcegraph-bot",
        "credentials_hint": "The bot credentials are stored in the team password manager.",
    },
    "codecov": {
        "api_url": "https://codecov.io/api/",
    },
    "buildkite": {
        "api_url": "https://api.buildkite.com/v2/",
        "organization": "sourcegraph",
    },
    "travis": {
        "api_url": "https://api.travis-ci.org/",
    },
    "ci": {
        "public_provider": "github-actions",
        "poll_interval": 1.0,
        "poll_timeout": None,
    },
    "http": {
        "timeout": 30.0,
    },
}


@dataclass(frozen=True)
class Settings:
    """Effective configuration for one run."""

    license_holder: str
    templates_dir: Path | None
    github_api_url: str
    github_org: str
    admin_team_id: int
    ci_team_id: int
    github_bot_username: str
    npm_registry_url: str
    npm_scope: str
    npm_bot_username: str
    npm_credentials_hint: str | None
    codecov_api_url: str
    buildkite_api_url: str
    buildkite_organization: str
    travis_api_url: str
    public_ci_provider: str
    poll_interval: float
    poll_timeout: float | None
    http_timeout: float

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "Settings":
        github = config["github"]
        npm = config["npm"]
        ci = config["ci"]
        templates_dir = config.get("templates_dir")
        return cls(
            license_holder=config["license_holder"],
            templates_dir=Path(templates_dir).expanduser() if templates_dir else None,
            github_api_url=github["api_url"],
            github_org=github["org"],
            admin_team_id=github["admin_team_id"],
            ci_team_id=github["ci_team_id"],
            github_bot_username=github["bot_username"],
            npm_registry_url=npm["registry_url"],
            npm_scope=npm["scope"],
            npm_bot_username=npm["bot_username"],
            npm_credentials_hint=npm.get("credentials_hint"),
            codecov_api_url=config["codecov"]["api_url"],
            buildkite_api_url=config["buildkite"]["api_url"],
            buildkite_organization=config["buildkite"]["organization"],
            travis_api_url=config["travis"]["api_url"],
            public_ci_provider=ci["public_provider"],
            poll_interval=float(ci["poll_interval"]),
            poll_timeout=None if ci.get("poll_timeout") is None else float(ci["poll_timeout"]),
            http_timeout=float(config["http"]["timeout"]),
        )

    def with_public_ci_provider(self, provider: str) -> "Settings":
        if provider not in PUBLIC_PROVIDERS:
            raise InvalidConfigError(
                f"Unsupported public CI provider '{provider}'. "
                f"Must be one of: {', '.join(PUBLIC_PROVIDERS)}"
            )
        return replace(self, public_ci_provider=provider)


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config_dict(config_file: Path | None = None) -> dict[str, Any]:
    """
    Load the raw configuration mapping.

    Args:
        config_file: Optional YAML file overriding the defaults

    Returns:
        Defaults merged with the file contents, validated against the schema

    Raises:
        InvalidConfigError: If the file is unreadable or fails validation
    """
    overrides: dict[str, Any] = {}
    if config_file is not None:
        if not config_file.exists():
            raise InvalidConfigError(f"{config_file} does not exist")

        try:
            with open(config_file) as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise InvalidConfigError(f"{config_file} is not valid YAML: {e}") from e

        if loaded is None:
            logger.warning(f"Config file is empty: {config_file}")
        elif not isinstance(loaded, dict):
            raise InvalidConfigError(f"expected a mapping, got {type(loaded).__name__}")
        else:
            overrides = loaded
            logger.info(f"Loaded configuration from {config_file}")

    config = deep_merge(DEFAULT_CONFIG, overrides)
    _validate_config_schema(config)
    return config


def _validate_config_schema(config: dict) -> None:
    """Validate config against JSON schema."""
    schema = json.loads(SCHEMA_FILE.read_text())
    try:
        validate(instance=config, schema=schema)
    except ValidationError as e:
        raise InvalidConfigError(
            f"{e.message} (at {'.'.join(str(p) for p in e.path) or 'top level'})"
        ) from e


def load_settings(config_file: Path | None = None) -> Settings:
    return Settings.from_dict(load_config_dict(config_file))


def find_config_file(directory: Path) -> Path | None:
    """Return the project-local configuration file if there is one."""
    candidate = directory / CONFIG_FILE_NAME
    return candidate if candidate.exists() else None


@dataclass(frozen=True)
class Credentials:
    """Provider tokens for one run. Never written to disk."""

    github_token: str
    codecov_token: str
    buildkite_token: str
    travis_token: str | None = None

    def __repr__(self) -> str:
        return "Credentials(<redacted>)"

    @classmethod
    def from_env(cls, env: Mapping[str, str], settings: Settings) -> "Credentials":
        """
        Read provider tokens from the environment.

        ``TRAVIS_TOKEN`` is only required when Travis CI is the configured
        public provider.

        Raises:
            MissingTokenError: For the first required token that is unset
        """
        github_token = _require(env, "GITHUB_TOKEN", "https://github.com/settings/tokens")
        codecov_token = _require(
            env,
            "CODECOV_TOKEN",
            f"https://codecov.io/account/gh/{settings.github_org}/access",
        )
        buildkite_token = _require(
            env, "BUILDKITE_TOKEN", "https://buildkite.com/user/api-access-tokens/new"
        )
        travis_token = None
        if settings.public_ci_provider == "travis":
            travis_token = _require(env, "TRAVIS_TOKEN", "https://travis-ci.org/account/preferences")

        return cls(
            github_token=github_token,
            codecov_token=codecov_token,
            buildkite_token=buildkite_token,
            travis_token=travis_token,
        )


def _require(env: Mapping[str, str], name: str, create_url: str) -> str:
    value = (env.get(name) or "").strip()
    if not value:
        raise MissingTokenError(name, create_url)
    logger.info(f"Using {name} from env var")
    return value
