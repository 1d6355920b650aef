"""action command — GitHub Actions entry point.

Reads the triggering event from the runner environment and dispatches:
pull request events run a review, `/buddy` comments on a PR get a reply, and
everything else exits quietly with status 0.
"""

from __future__ import annotations

import json
from pathlib import Path

import click
from rich.console import Console

from reviewbuddy_cli.checks import load_run_config, require_repo, run_cycle
from reviewbuddy_cli.commands.review import print_summary
from reviewbuddy_core.chat import is_triggered, run_reply
from reviewbuddy_core.reviewer import run_review

console = Console()

REVIEW_EVENTS = ("pull_request", "pull_request_target")
COMMENT_EVENTS = ("issue_comment",)


def read_event(event_path: str | None) -> dict:
    if not event_path:
        return {}
    path = Path(event_path)
    if not path.exists():
        raise click.ClickException(f"Event payload not found at {event_path}")
    with open(path, encoding="utf-8") as f:
        return json.load(f) or {}


def _handle_pull_request(ctx, repo: str, payload: dict) -> None:
    config = load_run_config(ctx, {})
    pr_number = config.get("pr_number") or (payload.get("pull_request") or {}).get("number") or payload.get("number")
    if not pr_number:
        raise click.UsageError("Could not determine the pull request number. Set PR_NUMBER.")
    summary = run_cycle(run_review, repo=repo, pr_number=int(pr_number), config=config)
    if summary is not None:
        print_summary(summary)


def _handle_comment(ctx, repo: str, payload: dict) -> None:
    from reviewbuddy_core.config import load_config

    comment = payload.get("comment") or {}
    issue = payload.get("issue") or {}
    body = comment.get("body") or ""
    author = (comment.get("user") or {}).get("login") or ""

    if not issue.get("number"):
        console.print("[yellow]Could not find an issue number in the event payload. Skipping.[/yellow]")
        return
    if not issue.get("pull_request"):
        console.print("This comment is not on a pull request. Skipping.")
        return

    trigger = load_config((ctx.obj or {}).get("config_path", ".reviewbuddy.yml")).get("trigger", "/buddy")
    if not is_triggered(body, trigger):
        console.print(f"No '{trigger}' command found. Skipping.")
        return

    console.print(f"Command '{trigger}' detected in comment by @{author}.")
    config = load_run_config(ctx, {})
    run_cycle(
        run_reply,
        repo=repo,
        pr_number=int(issue["number"]),
        comment_body=body,
        comment_author=author,
        config=config,
        comment_id=comment.get("id"),
    )


@click.command("action")
@click.option("--event-name", envvar="GITHUB_EVENT_NAME", default=None, help="GitHub event that triggered the run.")
@click.option("--event-path", envvar="GITHUB_EVENT_PATH", default=None, help="Path to the event payload JSON.")
@click.option("--repo", envvar="GITHUB_REPOSITORY", default=None, help="GitHub repository in owner/name format.")
@click.pass_context
def action_cmd(ctx, event_name: str | None, event_path: str | None, repo: str | None):
    """Run Review Buddy for the GitHub Actions event that triggered the workflow."""
    console.print(f"GitHub event: {event_name or 'unknown'}")

    if event_name in REVIEW_EVENTS:
        _handle_pull_request(ctx, require_repo(repo), read_event(event_path))
    elif event_name in COMMENT_EVENTS:
        _handle_comment(ctx, require_repo(repo), read_event(event_path))
    else:
        console.print(f"[yellow]Unsupported event: {event_name}. Nothing to do.[/yellow]")
