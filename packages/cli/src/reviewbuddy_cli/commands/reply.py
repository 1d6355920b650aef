"""reply command — answer a PR comment as Review Buddy."""

from __future__ import annotations

import click
from rich.console import Console

from reviewbuddy_cli.checks import load_run_config, require_repo, run_cycle
from reviewbuddy_cli.options import llm_options, llm_overrides
from reviewbuddy_core.chat import run_reply

console = Console()


@click.command("reply")
@click.option("--repo", envvar="GITHUB_REPOSITORY", default=None, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", envvar="PR_NUMBER", type=int, required=True, help="Pull request number.")
@click.option("--comment", "comment_body", required=True, help="Text of the comment to answer.")
@click.option("--author", "comment_author", required=True, help="Login of the comment's author.")
@click.option("--comment-id", type=int, default=None, help="Id of the comment, excluded from the history.")
@llm_options
@click.pass_context
def reply_cmd(
    ctx,
    repo: str | None,
    pr_number: int,
    comment_body: str,
    comment_author: str,
    comment_id: int | None,
    adapter: str | None,
    model: str | None,
    tone: str | None,
    language: str | None,
):
    """Reply to a comment on a pull request, revising the verdict if warranted."""
    repo = require_repo(repo)
    config = load_run_config(ctx, llm_overrides(adapter, model, tone, language))

    reply = run_cycle(
        run_reply,
        repo=repo,
        pr_number=pr_number,
        comment_body=comment_body,
        comment_author=comment_author,
        config=config,
        comment_id=comment_id,
    )
    if reply.verdict_changed:
        console.print("[cyan]The model proposed a verdict change.[/cyan]")
