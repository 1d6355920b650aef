"""Core PR review orchestration."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from github import GithubException
from rich.console import Console

from reviewbuddy_core.adapters.base import BaseAdapter
from reviewbuddy_core.adapters.registry import get_adapter
from reviewbuddy_core.comments import (
    BEST_PRACTICES_MARKER,
    PERFORMANCE_MARKER,
    REVIEW_MARKER,
    SECURITY_MARKER,
    build_footer,
    build_mentions,
    find_recommendation,
    render_quality,
    render_recommendation,
    render_section,
)
from reviewbuddy_core.errors import ProviderError
from reviewbuddy_core.gh.pull_request import (
    add_labels,
    get_diff_text,
    get_issue_comments,
    get_pull,
    get_repo,
    get_requested_reviewers,
    post_comment,
    update_comment,
    update_pull,
)
from reviewbuddy_core.models import ReviewContext
from reviewbuddy_core.normalizer import parse_analysis
from reviewbuddy_core.prompts import build_review_prompt
from reviewbuddy_core.utils.labels import determine_labels
from reviewbuddy_core.verdict import resolve_recommendation

console = Console()
logger = logging.getLogger(__name__)


@dataclass
class ReviewSummary:
    """What a completed review cycle did, for the CLI to report."""

    repo: str
    pr_number: int
    status: str  # "APPROVE" | "REQUEST CHANGES" | "REJECT"
    quality_score: int = 0
    maintainability_score: int = 0
    sections_posted: list[str] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)
    title_updated: bool = False
    description_updated: bool = False
    recommendation_updated_in_place: bool = False
    reviewed_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


def ask_model(adapter: BaseAdapter, credential: str, prompt_text: str, model: str | None = None) -> str:
    """Run one prompt through the adapter and return the generated text.

    Raises ProviderError for both "no response" and "empty text"; either one
    ends the cycle.
    """
    request = adapter.build_request(prompt_text, model)
    response = adapter.send_request(credential, request, model)
    if response is None:
        raise ProviderError(f"Failed to get a response from {adapter.NAME}.")
    text = adapter.extract_text(response)
    if not text:
        raise ProviderError(f"Empty response from {adapter.NAME}.")
    return text


def fetch_pull(this_repo, repo: str, pr_number: int):
    try:
        return get_pull(this_repo, pr_number)
    except GithubException:
        raise ValueError(f"PR #{pr_number} not found in {repo}.")


def run_review(repo: str, pr_number: int, config: dict, repo_obj=None) -> ReviewSummary | None:
    """Run the full review cycle on one pull request.

    Returns None when there is nothing to review (empty diff). Posting is
    sequential and not rolled back: if a later step raises, sections already
    posted remain on the PR.
    """
    adapter = get_adapter(config.get("adapter"))
    model = adapter.resolve_model(config.get("model"))
    credential = adapter.credential(config)
    tone = config.get("tone", "roast")
    language = config.get("language", "hinglish")

    this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])
    this_pr = fetch_pull(this_repo, repo, pr_number)

    current_title = this_pr.title or ""
    current_body = this_pr.body or ""
    pr_author = this_pr.user.login if this_pr.user else ""
    reviewers = get_requested_reviewers(this_pr)

    console.print(f"Analyzing PR #{pr_number}: [bold]{current_title}[/bold] (author: {pr_author})")
    console.print(f"[dim]Adapter: {adapter.NAME} | Model: {model} | Tone: {tone} | Language: {language}[/dim]")

    min_desc = config.get("min_description_length", 50)
    needs_description_update = len(current_body) < min_desc
    if needs_description_update:
        logger.warning("Description is too short (%d chars). Marking for update.", len(current_body))

    diff = get_diff_text(this_pr)
    if not diff:
        console.print("[yellow]Diff is empty. Nothing to review.[/yellow]")
        return None
    max_chars = config.get("max_diff_chars", 100000)
    if len(diff) > max_chars:
        diff = diff[:max_chars] + "\n... [diff truncated]"

    console.print("Generating analysis...")
    ctx = ReviewContext(
        diff_text=diff,
        pr_title=current_title,
        pr_author=pr_author,
        tone=tone,
        language=language,
        needs_description_update=needs_description_update,
    )
    text = ask_model(adapter, credential, build_review_prompt(ctx), model)
    analysis = parse_analysis(text, current_title)
    mscore = analysis.maintainability_score

    console.print(
        f"[green]Analysis complete. Quality Score: {analysis.quality_score}/10 | "
        f"Overall Benchmark: {mscore}/100[/green]"
    )

    summary = ReviewSummary(
        repo=repo,
        pr_number=pr_number,
        status="",
        quality_score=analysis.quality_score,
        maintainability_score=mscore,
    )

    console.print("Step 1: Updating PR title and description...")
    payload = {}
    if analysis.new_title:
        console.print(f"  Suggesting new title: {analysis.new_title}")
        payload["title"] = analysis.new_title
    if analysis.new_description:
        payload["body"] = analysis.new_description
    if update_pull(this_pr, payload):
        summary.title_updated = "title" in payload
        summary.description_updated = "body" in payload

    mentions = build_mentions(pr_author, reviewers)
    footer = build_footer(tone, language)

    sections = [
        ("review", REVIEW_MARKER, "🤖 Review Buddy - General Code Review", analysis.review_comment),
        ("performance", PERFORMANCE_MARKER, "⚡ Review Buddy - Performance Analysis", analysis.performance_analysis),
        ("security", SECURITY_MARKER, "🔐 Review Buddy - Security Audit", analysis.security_analysis),
        ("quality", None, None, analysis.quality_analysis),
        ("best_practices", BEST_PRACTICES_MARKER, "💡 Review Buddy - Best Practices", analysis.best_practices),
    ]
    for step, (name, marker, heading, content) in enumerate(sections, start=2):
        console.print(f"Step {step}: Posting {name.replace('_', ' ')} section...")
        if not content:
            console.print(f"  [dim]No {name.replace('_', ' ')} content; skipped.[/dim]")
            continue
        if marker is None:
            body = render_quality(content, mscore, mentions, footer)
        else:
            body = render_section(marker, heading, content, mentions, footer)
        if post_comment(this_pr, body) is not None:
            summary.sections_posted.append(name)

    console.print("Step 7: Adding smart labels...")
    if config.get("labels", True):
        final_title = payload.get("title") or current_title
        labels = determine_labels(final_title, mscore, analysis.security_analysis, analysis.performance_analysis)
        if labels and add_labels(this_pr, labels):
            summary.labels = labels
        elif not labels:
            console.print("  [dim]No labels to add.[/dim]")

    console.print("Step 8: Posting final recommendation...")
    rec = resolve_recommendation(mscore, analysis.security_analysis, analysis.verdict, tone, language)
    summary.status = rec.status
    rec_body = render_recommendation(rec, mentions, footer)
    previous = find_recommendation(get_issue_comments(this_pr))
    if previous is not None:
        summary.recommendation_updated_in_place = update_comment(this_pr, previous.comment_id, rec_body)
    if not summary.recommendation_updated_in_place:
        if previous is not None:
            logger.warning("Could not update recommendation comment %s; posting a new one.", previous.comment_id)
        post_comment(this_pr, rec_body)

    console.print(f"\n[green]Review posted: {rec.status}.[/green]")
    return summary
