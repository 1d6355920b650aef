"""Reply flow: answer a `/buddy` comment and, if warranted, revise the verdict.

The previously posted recommendation is the only record of the current
verdict. It is recovered from the PR comments once per run and passed
explicitly to the prompt and to the reconciliation step.
"""

from __future__ import annotations

import logging
import re

from rich.console import Console

from reviewbuddy_core.adapters.registry import get_adapter
from reviewbuddy_core.comments import (
    build_footer,
    build_mentions,
    find_recommendation,
    render_recommendation,
    render_reply,
)
from reviewbuddy_core.gh.pull_request import (
    get_diff_text,
    get_issue_comments,
    get_repo,
    get_requested_reviewers,
    post_comment,
    update_comment,
)
from reviewbuddy_core.models import ChatContext, ChatReply, HistoryEntry
from reviewbuddy_core.normalizer import parse_chat_reply
from reviewbuddy_core.prompts import build_chat_prompt
from reviewbuddy_core.reviewer import ask_model, fetch_pull
from reviewbuddy_core.verdict import reconcile_verdict

console = Console()
logger = logging.getLogger(__name__)

NO_DIFF = "No diff available."


def is_triggered(comment_body: str | None, trigger: str = "/buddy") -> bool:
    """True when the comment contains the trigger command, in any case."""
    if not comment_body or not trigger:
        return False
    return re.search(re.escape(trigger), comment_body, re.IGNORECASE) is not None


def build_history(
    comments, exclude_id: int | None = None, limit: int = 20, body_chars: int = 3000
) -> tuple[HistoryEntry, ...]:
    """Turn PR comments into prompt history, oldest first.

    Keeps the most recent ``limit`` comments and caps each body so a few long
    analysis comments cannot crowd out the diff.
    """
    entries = []
    for comment in comments:
        if exclude_id is not None and comment.id == exclude_id:
            continue
        body = (comment.body or "").strip()
        if not body:
            continue
        if len(body) > body_chars:
            body = body[:body_chars] + "\n... [truncated]"
        author = comment.user.login if comment.user else "unknown"
        entries.append(HistoryEntry(author=author, body=body))
    if limit and len(entries) > limit:
        entries = entries[-limit:]
    return tuple(entries)


def run_reply(
    repo: str,
    pr_number: int,
    comment_body: str,
    comment_author: str,
    config: dict,
    comment_id: int | None = None,
    repo_obj=None,
) -> ChatReply:
    adapter = get_adapter(config.get("adapter"))
    model = adapter.resolve_model(config.get("model"))
    credential = adapter.credential(config)
    tone = config.get("tone", "roast")
    language = config.get("language", "hinglish")

    this_repo = repo_obj if repo_obj is not None else get_repo(repo, token=config["github_token"])
    this_pr = fetch_pull(this_repo, repo, pr_number)
    pr_author = this_pr.user.login if this_pr.user else ""

    console.print(f"Replying to @{comment_author} on PR #{pr_number}")

    diff = get_diff_text(this_pr)
    if not diff:
        logger.warning("Diff is empty. Proceeding without diff context.")
        diff = NO_DIFF
    max_chars = config.get("max_chat_diff_chars", 50000)
    if len(diff) > max_chars:
        diff = diff[:max_chars] + "\n... [diff truncated]"

    comments = get_issue_comments(this_pr)
    previous = find_recommendation(comments)
    history = build_history(
        comments,
        exclude_id=comment_id,
        limit=config.get("history_limit", 20),
        body_chars=config.get("history_body_chars", 3000),
    )
    if previous is not None:
        console.print(f"[dim]Current verdict: {previous.status}[/dim]")

    ctx = ChatContext(
        diff_text=diff,
        pr_title=this_pr.title or "",
        pr_author=pr_author,
        comment_body=comment_body,
        comment_author=comment_author,
        tone=tone,
        language=language,
        conversation_history=history,
        current_verdict=previous,
    )
    console.print("Generating reply...")
    text = ask_model(adapter, credential, build_chat_prompt(ctx), model)
    reply = parse_chat_reply(text)

    updated = reconcile_verdict(previous, reply.verdict_changed, reply.updated_verdict, tone, language)
    footer = build_footer(tone, language)

    post_comment(this_pr, render_reply(comment_author, reply.reply, footer, updated))
    console.print("[green]Replied to user comment.[/green]")

    if updated is not None:
        mentions = build_mentions(pr_author, get_requested_reviewers(this_pr))
        if update_comment(this_pr, previous.comment_id, render_recommendation(updated, mentions, footer)):
            console.print(f"[green]Recommendation updated: {previous.status} → {updated.status}[/green]")

    return reply
