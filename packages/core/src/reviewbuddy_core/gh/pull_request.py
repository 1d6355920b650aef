"""Thin wrappers over PyGithub for the handful of calls a review cycle makes.

Reads that the cycle cannot do without (the PR itself) raise; writes log
their failure and return, because posting is best-effort and not
transactional. A partially posted review stays posted.
"""

from __future__ import annotations

import logging

from github import Github, GithubException

logger = logging.getLogger(__name__)


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_requested_reviewers(pr) -> list[str]:
    return [user.login for user in (pr.requested_reviewers or []) if getattr(user, "login", None)]


def _file_diff(file) -> str:
    old_path = file.previous_filename or file.filename
    old = "/dev/null" if file.status == "added" else f"a/{old_path}"
    new = "/dev/null" if file.status == "removed" else f"b/{file.filename}"
    header = f"diff --git a/{old_path} b/{file.filename}\n--- {old}\n+++ {new}"
    if not file.patch:
        return f"{header}\nBinary or unchanged content; no patch available."
    return f"{header}\n{file.patch}"


def get_diff_text(pr) -> str:
    """Return the PR's changes as unified diff text.

    A missing PR diff (404) is "no diff", not an error; any other failure is
    logged and also treated as empty so the caller decides what to do.
    """
    try:
        files = list(pr.get_files())
    except GithubException as e:
        if e.status != 404:
            logger.error("Failed to fetch PR diff: %s", e)
        return ""
    return "\n".join(_file_diff(f) for f in files)


def get_issue_comments(pr) -> list:
    return list(pr.get_issue_comments())


def post_comment(pr, body: str):
    """Create an issue comment on the PR; empty bodies are skipped."""
    if not body:
        return None
    try:
        return pr.create_issue_comment(body)
    except GithubException as e:
        logger.error("Failed to post comment on PR #%s: %s", pr.number, e)
        return None


def update_comment(pr, comment_id: int, body: str) -> bool:
    """Overwrite an existing issue comment in place."""
    try:
        pr.get_issue_comment(comment_id).edit(body)
    except GithubException as e:
        logger.error("Failed to update comment %s: %s", comment_id, e)
        return False
    return True


def update_pull(pr, payload: dict) -> bool:
    """Patch the PR title and/or body; an empty payload is a no-op."""
    if not payload:
        return False
    try:
        pr.edit(**payload)
    except GithubException as e:
        logger.error("Failed to update PR #%s: %s", pr.number, e)
        return False
    return True


def add_labels(pr, labels: list[str]) -> bool:
    if not labels:
        return False
    try:
        pr.add_to_labels(*labels)
    except GithubException as e:
        logger.warning("Failed to add labels (%s). Labels may not exist in the repository.", e)
        return False
    return True
