"""Tests for the CLI entry point."""

import json
import subprocess
from unittest.mock import MagicMock, patch

from click.testing import CliRunner

from reviewbuddy_cli.cli import main
from reviewbuddy_core.errors import ProviderError
from reviewbuddy_core.models import ChatReply
from reviewbuddy_core.reviewer import ReviewSummary

# Keep the runner's environment from leaking into option defaults.
CLEAN_ENV = {"GITHUB_REPOSITORY": None, "PR_NUMBER": None, "GITHUB_EVENT_NAME": None, "GITHUB_EVENT_PATH": None}


def _make_config(github_token="tok", adapter="gemini", model=None, tone="roast", gemini_key="g-key", adaptive=None):
    return {
        "adapter": adapter,
        "model": model,
        "tone": tone,
        "language": "hinglish",
        "trigger": "/buddy",
        "labels": True,
        "github_token": github_token,
        "gemini_api_key": gemini_key,
        "adaptive_api_token": adaptive,
        "repository": None,
        "pr_number": None,
    }


def _patch_common(mocker, config=None, token="tok"):
    """Patch load_config and resolve_github_token for most tests."""
    cfg = config or _make_config()
    load = mocker.patch("reviewbuddy_core.config.load_config", return_value=cfg)
    mocker.patch("reviewbuddy_cli.auth.resolve_github_token", return_value=token)
    return cfg, load


def _invoke(args, **kwargs):
    return CliRunner().invoke(main, args, env=CLEAN_ENV, **kwargs)


class TestCLIValidation:
    def test_missing_github_token(self, mocker):
        _patch_common(mocker, config=_make_config(github_token=None), token=None)
        mock_run = mocker.patch("reviewbuddy_cli.commands.review.run_review")

        result = _invoke(["review", "--repo", "owner/repo", "--pr", "1"])

        assert result.exit_code != 0
        assert "GITHUB_TOKEN" in result.output
        mock_run.assert_not_called()

    def test_gh_cli_token_satisfies_github_token(self, mocker):
        _patch_common(mocker, config=_make_config(github_token=None), token="gh-token")
        mock_run = mocker.patch("reviewbuddy_cli.commands.review.run_review", return_value=None)

        result = _invoke(["review", "--repo", "owner/repo", "--pr", "1"])

        assert result.exit_code == 0
        assert mock_run.call_args.kwargs["config"]["github_token"] == "gh-token"

    def test_missing_gemini_key(self, mocker):
        _patch_common(mocker, config=_make_config(gemini_key=None))

        result = _invoke(["review", "--repo", "owner/repo", "--pr", "1"])

        assert result.exit_code != 0
        assert "GEMINI_API_KEY" in result.output

    def test_openrouter_without_model(self, mocker):
        _patch_common(mocker, config=_make_config(adapter="openrouter", adaptive="a-tok"))

        result = _invoke(["review", "--repo", "owner/repo", "--pr", "1"])

        assert result.exit_code != 0
        assert "requires a model" in result.output

    def test_unknown_tone_from_config(self, mocker):
        _patch_common(mocker, config=_make_config(tone="sarcastic"))

        result = _invoke(["review", "--repo", "owner/repo", "--pr", "1"])

        assert result.exit_code != 0
        assert "Unknown tone" in result.output

    def test_missing_repo(self, mocker):
        _patch_common(mocker)

        result = _invoke(["review", "--pr", "1"])

        assert result.exit_code != 0
        assert "GITHUB_REPOSITORY" in result.output

    def test_unknown_adapter_option_rejected(self, mocker):
        _patch_common(mocker)

        result = _invoke(["review", "--repo", "owner/repo", "--pr", "1", "--adapter", "claude"])

        assert result.exit_code != 0


class TestCLIReview:
    def test_calls_run_review_with_correct_args(self, mocker):
        cfg, _ = _patch_common(mocker)
        mock_run = mocker.patch("reviewbuddy_cli.commands.review.run_review", return_value=None)

        _invoke(["review", "--repo", "owner/repo", "--pr", "42"])

        mock_run.assert_called_once()
        kwargs = mock_run.call_args.kwargs
        assert kwargs["repo"] == "owner/repo"
        assert kwargs["pr_number"] == 42
        assert kwargs["config"] is cfg

    def test_options_become_overrides(self, mocker):
        _, load = _patch_common(mocker)
        mocker.patch("reviewbuddy_cli.commands.review.run_review", return_value=None)

        _invoke(["review", "--repo", "o/r", "--pr", "1", "--adapter", "GitHub-Models", "--tone", "funny"])

        overrides = load.call_args.kwargs["cli_overrides"]
        assert overrides["adapter"] == "github-models"
        assert overrides["tone"] == "funny"
        assert overrides["model"] is None

    def test_config_path_passed_through(self, mocker):
        _, load = _patch_common(mocker)
        mocker.patch("reviewbuddy_cli.commands.review.run_review", return_value=None)

        _invoke(["--config", "custom.yml", "review", "--repo", "o/r", "--pr", "1"])

        assert load.call_args.args[0] == "custom.yml"

    def test_prints_summary(self, mocker):
        _patch_common(mocker)
        summary = ReviewSummary(
            repo="owner/repo",
            pr_number=1,
            status="APPROVE",
            quality_score=8,
            maintainability_score=85,
            sections_posted=["review", "security"],
            labels=["bug"],
        )
        mocker.patch("reviewbuddy_cli.commands.review.run_review", return_value=summary)

        result = _invoke(["review", "--repo", "owner/repo", "--pr", "1"])

        assert result.exit_code == 0
        assert "APPROVE" in result.output
        assert "review, security" in result.output
        assert "bug" in result.output

    def test_provider_error_exits_non_zero(self, mocker):
        _patch_common(mocker)
        mocker.patch(
            "reviewbuddy_cli.commands.review.run_review",
            side_effect=ProviderError("Failed to get a response from Gemini."),
        )

        result = _invoke(["review", "--repo", "owner/repo", "--pr", "1"])

        assert result.exit_code == 1
        assert "Failed to get a response from Gemini." in result.output


class TestCLIReply:
    def test_calls_run_reply(self, mocker):
        _patch_common(mocker)
        mock_run = mocker.patch("reviewbuddy_cli.commands.reply.run_reply", return_value=ChatReply(reply="ok"))

        result = _invoke(
            [
                "reply",
                "--repo",
                "owner/repo",
                "--pr",
                "5",
                "--comment",
                "/buddy why?",
                "--author",
                "bob",
                "--comment-id",
                "77",
            ]
        )

        assert result.exit_code == 0
        kwargs = mock_run.call_args.kwargs
        assert kwargs["pr_number"] == 5
        assert kwargs["comment_body"] == "/buddy why?"
        assert kwargs["comment_author"] == "bob"
        assert kwargs["comment_id"] == 77


class TestCLIAction:
    def _event(self, tmp_path, payload):
        path = tmp_path / "event.json"
        path.write_text(json.dumps(payload))
        return str(path)

    def test_pull_request_event_runs_review(self, mocker, tmp_path):
        _patch_common(mocker)
        mock_run = mocker.patch("reviewbuddy_cli.commands.action.run_review", return_value=None)
        event = self._event(tmp_path, {"pull_request": {"number": 9}})

        result = _invoke(
            ["action", "--event-name", "pull_request", "--event-path", event, "--repo", "owner/repo"]
        )

        assert result.exit_code == 0
        assert mock_run.call_args.kwargs["pr_number"] == 9
        assert mock_run.call_args.kwargs["repo"] == "owner/repo"

    def test_pull_request_without_number(self, mocker, tmp_path):
        _patch_common(mocker)
        mock_run = mocker.patch("reviewbuddy_cli.commands.action.run_review")
        event = self._event(tmp_path, {})

        result = _invoke(["action", "--event-name", "pull_request", "--event-path", event, "--repo", "o/r"])

        assert result.exit_code != 0
        mock_run.assert_not_called()

    def test_triggered_comment_runs_reply(self, mocker, tmp_path):
        _patch_common(mocker)
        mock_run = mocker.patch("reviewbuddy_cli.commands.action.run_reply", return_value=ChatReply(reply="ok"))
        event = self._event(
            tmp_path,
            {
                "issue": {"number": 4, "pull_request": {"url": "https://api.github.com/x"}},
                "comment": {"id": 123, "body": "/Buddy explain this", "user": {"login": "bob"}},
            },
        )

        result = _invoke(["action", "--event-name", "issue_comment", "--event-path", event, "--repo", "o/r"])

        assert result.exit_code == 0
        kwargs = mock_run.call_args.kwargs
        assert kwargs["pr_number"] == 4
        assert kwargs["comment_id"] == 123
        assert kwargs["comment_author"] == "bob"

    def test_comment_without_trigger_is_skipped(self, mocker, tmp_path):
        _patch_common(mocker, config=_make_config(github_token=None, gemini_key=None), token=None)
        mock_run = mocker.patch("reviewbuddy_cli.commands.action.run_reply")
        event = self._event(
            tmp_path,
            {"issue": {"number": 4, "pull_request": {}}, "comment": {"id": 1, "body": "LGTM", "user": {"login": "b"}}},
        )

        result = _invoke(["action", "--event-name", "issue_comment", "--event-path", event, "--repo", "o/r"])

        assert result.exit_code == 0
        mock_run.assert_not_called()

    def test_comment_on_plain_issue_is_skipped(self, mocker, tmp_path):
        _patch_common(mocker)
        mock_run = mocker.patch("reviewbuddy_cli.commands.action.run_reply")
        event = self._event(
            tmp_path,
            {"issue": {"number": 4}, "comment": {"id": 1, "body": "/buddy hi", "user": {"login": "b"}}},
        )

        result = _invoke(["action", "--event-name", "issue_comment", "--event-path", event, "--repo", "o/r"])

        assert result.exit_code == 0
        assert "not on a pull request" in result.output
        mock_run.assert_not_called()

    def test_unsupported_event(self, mocker):
        _patch_common(mocker)

        result = _invoke(["action", "--event-name", "push"])

        assert result.exit_code == 0
        assert "Unsupported event" in result.output

    def test_missing_event_file(self, mocker, tmp_path):
        _patch_common(mocker)

        result = _invoke(
            ["action", "--event-name", "issue_comment", "--event-path", str(tmp_path / "nope.json"), "--repo", "o/r"]
        )

        assert result.exit_code == 1
        assert "Event payload not found" in result.output


# ---------------------------------------------------------------------------
# auth.py
# ---------------------------------------------------------------------------


class TestResolveGithubToken:
    def test_returns_env_var_when_set(self, monkeypatch):
        from reviewbuddy_cli.auth import resolve_github_token

        monkeypatch.setenv("GITHUB_TOKEN", "env-token")
        assert resolve_github_token() == "env-token"

    def test_action_input_token(self, monkeypatch):
        from reviewbuddy_cli.auth import resolve_github_token

        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.setenv("INPUT_GITHUB_TOKEN", "input-token")
        assert resolve_github_token() == "input-token"

    def test_falls_back_to_gh_cli(self, monkeypatch):
        from reviewbuddy_cli.auth import resolve_github_token

        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("INPUT_GITHUB_TOKEN", raising=False)
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=0, stdout="gh-token\n")
            result = resolve_github_token()
        assert result == "gh-token"

    def test_returns_none_when_gh_not_installed(self, monkeypatch):
        from reviewbuddy_cli.auth import resolve_github_token

        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("INPUT_GITHUB_TOKEN", raising=False)
        with patch("subprocess.run", side_effect=FileNotFoundError):
            result = resolve_github_token()
        assert result is None

    def test_returns_none_when_gh_times_out(self, monkeypatch):
        from reviewbuddy_cli.auth import resolve_github_token

        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("INPUT_GITHUB_TOKEN", raising=False)
        with patch("subprocess.run", side_effect=subprocess.TimeoutExpired(cmd="gh", timeout=5)):
            result = resolve_github_token()
        assert result is None

    def test_returns_none_when_gh_returns_error(self, monkeypatch):
        from reviewbuddy_cli.auth import resolve_github_token

        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        monkeypatch.delenv("INPUT_GITHUB_TOKEN", raising=False)
        with patch("subprocess.run") as mock_run:
            mock_run.return_value = MagicMock(returncode=1, stdout="")
            result = resolve_github_token()
        assert result is None
