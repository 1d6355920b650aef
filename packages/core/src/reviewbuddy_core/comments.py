"""Markdown bodies of the comments Review Buddy posts, and re-parsing them.

The recommendation comment doubles as the only record of the current verdict:
its hidden marker is how a later run finds it again, and its status/reasoning
lines are parsed back into a RecommendationRecord.
"""

from __future__ import annotations

import re
from typing import Iterable

from reviewbuddy_core.models import STATUSES, Recommendation, RecommendationRecord

REVIEW_MARKER = "<!-- Review Buddy Start -->"
PERFORMANCE_MARKER = "<!-- Review Buddy Performance -->"
SECURITY_MARKER = "<!-- Review Buddy Security -->"
QUALITY_MARKER = "<!-- Review Buddy Quality -->"
BEST_PRACTICES_MARKER = "<!-- Review Buddy Best Practices -->"
RECOMMENDATION_MARKER = "<!-- Review Buddy Recommendation -->"

PROJECT_URL = "https://github.com/nexoral/ReviewBuddy"

_STATUS_LINE_RE = re.compile(r"^### Recommendation: \*\*(.+?)\*\*\s*$", re.MULTILINE)
_REASONING_RE = re.compile(r"^### Reasoning:\s*\n(.*?)(?:\n\s*---\s*\n|\Z)", re.DOTALL | re.MULTILINE)

_CHECKLIST = """### 📋 Review Checklist for Reviewers:
- [ ] Code changes align with the PR description
- [ ] No security vulnerabilities introduced
- [ ] Performance considerations addressed
- [ ] Code follows project conventions
- [ ] Tests are adequate (if applicable)
- [ ] Documentation updated (if needed)"""


def build_mentions(author: str, reviewers: Iterable[str] = ()) -> str:
    names = [author] if author else []
    names.extend(r for r in reviewers if r and r != author)
    return " ".join(f"@{name}" for name in names)


def build_footer(tone: str, language: str) -> str:
    return f"\n---\n*Generated by [Review Buddy]({PROJECT_URL}) | Tone: {tone} | Language: {language}*"


def score_label(maintainability_score: int) -> str:
    if maintainability_score >= 90:
        return "Excellent"
    if maintainability_score >= 70:
        return "Good"
    if maintainability_score >= 50:
        return "Needs Improvement"
    return "Poor"


def render_section(marker: str, heading: str, content: str, mentions: str, footer: str) -> str:
    attention = f"> 👥 **Attention:** {mentions}\n\n" if mentions else ""
    return f"{marker}\n## {heading}\n{attention}{content}\n{footer}"


def render_quality(content: str, maintainability_score: int, mentions: str, footer: str) -> str:
    label = score_label(maintainability_score)
    body = f"### 🎯 Overall Benchmark: **{maintainability_score}/100** ({label})\n\n{content}"
    heading = "📊 Review Buddy - Code Quality & Maintainability Analysis"
    return render_section(QUALITY_MARKER, heading, body, mentions, footer)


def render_recommendation(rec: Recommendation, mentions: str, footer: str) -> str:
    body = f"""### Recommendation: **{rec.status}**

{rec.message}

### Reasoning:
{rec.reasoning}

---

{_CHECKLIST}

### 🎯 Next Steps:
{rec.next_step}"""
    heading = f"{rec.icon} Review Buddy - Final Recommendation"
    return render_section(RECOMMENDATION_MARKER, heading, body, mentions, footer)


def render_reply(comment_author: str, reply: str, footer: str, updated: Recommendation | None = None) -> str:
    body = f"@{comment_author} {reply}" if comment_author else reply
    if updated is not None:
        note = f"{updated.icon} **Verdict updated to {updated.status}.** The final recommendation has been revised."
        body += f"\n\n{note}"
    return body + "\n" + footer


def parse_recommendation(comment_id: int, body: str) -> RecommendationRecord | None:
    """Recover status and reasoning from a posted recommendation comment."""
    if not body or RECOMMENDATION_MARKER not in body:
        return None
    match = _STATUS_LINE_RE.search(body)
    if not match or match.group(1).strip() not in STATUSES:
        return None
    reasoning_match = _REASONING_RE.search(body)
    reasoning = reasoning_match.group(1).strip() if reasoning_match else ""
    return RecommendationRecord(comment_id=comment_id, status=match.group(1).strip(), reasoning=reasoning)


def find_recommendation(comments: Iterable) -> RecommendationRecord | None:
    """Return the most recent recommendation comment among ``comments``, if any."""
    found = None
    for comment in comments:
        record = parse_recommendation(comment.id, comment.body or "")
        if record is not None:
            found = record
    return found
