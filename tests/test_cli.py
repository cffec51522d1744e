"""
Tests for CLI commands.
"""

from unittest.mock import Mock, patch

import pytest
from typer.testing import CliRunner

from create_package import cli
from create_package.cli import app
from create_package.exceptions import MissingProviderFieldError, ProviderAPIError

runner = CliRunner()


@pytest.fixture(autouse=True)
def no_exit_delay(monkeypatch):
    monkeypatch.setattr(cli, "EXIT_DELAY", 0)


@pytest.fixture
def no_tokens(monkeypatch):
    for name in ["GITHUB_TOKEN", "CODECOV_TOKEN", "BUILDKITE_TOKEN", "TRAVIS_TOKEN"]:
        monkeypatch.delenv(name, raising=False)


class TestRun:
    """Tests for the run command."""

    def test_missing_token_exits_with_error(self, tmp_path, no_tokens):
        result = runner.invoke(app, ["run", "--directory", str(tmp_path)])

        assert result.exit_code == 1
        assert "No GITHUB_TOKEN env var set." in result.stdout
        assert "https://github.com/settings/tokens" in result.stdout
        # Nothing was created
        assert list(tmp_path.iterdir()) == []

    def test_missing_directory(self, tmp_path):
        result = runner.invoke(app, ["run", "-C", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "Directory not found" in result.stdout

    def test_invalid_public_ci(self, tmp_path):
        result = runner.invoke(app, ["run", "-C", str(tmp_path), "--public-ci", "jenkins"])

        assert result.exit_code == 1
        assert "jenkins" in result.stdout

    def test_invalid_config_file(self, tmp_path):
        (tmp_path / ".create-package.yaml").write_text("ci:\n  public_provider: jenkins\n")

        result = runner.invoke(app, ["run", "-C", str(tmp_path)])

        assert result.exit_code == 1
        assert "Invalid configuration file" in result.stdout

    def test_successful_run(self, tmp_path):
        orchestrator = Mock()
        orchestrator.run.return_value = 0

        with patch("create_package.cli.create_orchestrator", return_value=orchestrator) as create:
            result = runner.invoke(app, ["run", "-C", str(tmp_path)])

        assert result.exit_code == 0
        assert "Done" in result.stdout
        root, settings, env, answer_source, console = create.call_args.args
        assert root == tmp_path.resolve()
        assert settings.public_ci_provider == "github-actions"

    def test_answers_file_and_public_ci(self, tmp_path):
        answers = tmp_path / "answers.yaml"
        answers.write_text("visibility: Public\n")
        orchestrator = Mock()
        orchestrator.run.return_value = 0

        with patch("create_package.cli.create_orchestrator", return_value=orchestrator) as create:
            result = runner.invoke(
                app,
                ["run", "-C", str(tmp_path), "--answers", str(answers), "--public-ci", "travis"],
            )

        assert result.exit_code == 0
        _, settings, _, answer_source, _ = create.call_args.args
        assert settings.public_ci_provider == "travis"
        assert answer_source.answers == {"visibility": "Public"}

    def test_user_facing_error_has_no_traceback(self, tmp_path):
        orchestrator = Mock()
        orchestrator.run.side_effect = MissingProviderFieldError(
            "Codecov", "upload token", "https://codecov.io/gh/sourcegraph/widget"
        )

        with patch("create_package.cli.create_orchestrator", return_value=orchestrator):
            result = runner.invoke(app, ["run", "-C", str(tmp_path)])

        assert result.exit_code == 1
        assert "No upload token returned by Codecov" in result.stdout
        assert "Traceback" not in result.stdout

    def test_provider_error_shows_details(self, tmp_path):
        orchestrator = Mock()
        orchestrator.run.side_effect = ProviderAPIError(
            "GitHub", "PUT", "https://api.github.com/teams/626894/repos/sourcegraph/widget", 500
        )

        with patch("create_package.cli.create_orchestrator", return_value=orchestrator):
            result = runner.invoke(app, ["run", "-C", str(tmp_path)])

        assert result.exit_code == 1
        assert "GitHub API call failed" in result.stdout
        assert "Traceback" in result.stdout

    def test_unexpected_error(self, tmp_path):
        orchestrator = Mock()
        orchestrator.run.side_effect = RuntimeError("kaboom")

        with patch("create_package.cli.create_orchestrator", return_value=orchestrator):
            result = runner.invoke(app, ["run", "-C", str(tmp_path)])

        assert result.exit_code == 1
        assert "Unexpected error" in result.stdout
        assert "kaboom" in result.stdout


class TestShowConfig:
    """Tests for the show-config command."""

    def test_defaults(self, tmp_path):
        result = runner.invoke(app, ["show-config", "-C", str(tmp_path)])

        assert result.exit_code == 0
        assert "Built-in defaults" in result.stdout
        assert "org: sourcegraph" in result.stdout
        assert "admin_team_id: 626894" in result.stdout

    def test_project_config(self, tmp_path):
        (tmp_path / ".create-package.yaml").write_text("github:\n  org: acme\n")

        result = runner.invoke(app, ["show-config", "-C", str(tmp_path)])

        assert result.exit_code == 0
        assert "org: acme" in result.stdout
        assert "Loaded from" in result.stdout

    def test_never_prints_tokens(self, tmp_path, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "gh-secret-token")

        result = runner.invoke(app, ["show-config", "-C", str(tmp_path)])

        assert "gh-secret-token" not in result.stdout
