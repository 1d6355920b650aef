"""review command — run the full AI review cycle on a pull request."""

from __future__ import annotations

import click
from rich.console import Console

from reviewbuddy_cli.checks import load_run_config, require_repo, run_cycle
from reviewbuddy_cli.options import llm_options, llm_overrides
from reviewbuddy_core.reviewer import ReviewSummary, run_review

console = Console()


def print_summary(summary: ReviewSummary) -> None:
    console.print(
        f"[bold]{summary.repo}#{summary.pr_number}[/bold]: {summary.status} "
        f"(quality {summary.quality_score}/10, benchmark {summary.maintainability_score}/100)"
    )
    if summary.sections_posted:
        console.print(f"  Sections posted: {', '.join(summary.sections_posted)}")
    if summary.labels:
        console.print(f"  Labels: {', '.join(summary.labels)}")
    if summary.title_updated:
        console.print("  PR title updated.")
    if summary.description_updated:
        console.print("  PR description updated.")


@click.command("review")
@click.option("--repo", envvar="GITHUB_REPOSITORY", default=None, help="GitHub repository in owner/name format.")
@click.option("--pr", "pr_number", envvar="PR_NUMBER", type=int, required=True, help="Pull request number.")
@llm_options
@click.pass_context
def review_cmd(
    ctx,
    repo: str | None,
    pr_number: int,
    adapter: str | None,
    model: str | None,
    tone: str | None,
    language: str | None,
):
    """Review a pull request and post the analysis as PR comments.

    \b
    Required environment variables:
      GITHUB_TOKEN         GitHub token (or use the gh CLI session)
      GEMINI_API_KEY       Required when using --adapter gemini
      ADAPTIVE_API_TOKEN   Required for openrouter; optional for github-models
    """
    repo = require_repo(repo)
    config = load_run_config(ctx, llm_overrides(adapter, model, tone, language))

    summary = run_cycle(run_review, repo=repo, pr_number=pr_number, config=config)
    if summary is not None:
        print_summary(summary)
