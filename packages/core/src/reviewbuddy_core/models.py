"""Request-scoped data passed between the prompt, normaliser and verdict layers.

Nothing here is persisted. Contexts are frozen so a prompt always reflects
exactly what the orchestrator collected for the current event.
"""

from __future__ import annotations

from dataclasses import dataclass, field

APPROVE = "APPROVE"
REQUEST_CHANGES = "REQUEST CHANGES"
REJECT = "REJECT"

STATUSES = (APPROVE, REQUEST_CHANGES, REJECT)


@dataclass(frozen=True)
class HistoryEntry:
    """One prior PR comment, as shown to the model in the reply flow."""

    author: str
    body: str


@dataclass(frozen=True)
class RecommendationRecord:
    """The single final-recommendation comment already posted on a PR.

    Recovered by re-parsing the comment body; the comment id is what a changed
    verdict overwrites.
    """

    comment_id: int
    status: str
    reasoning: str


@dataclass(frozen=True)
class ReviewContext:
    diff_text: str
    pr_title: str
    pr_author: str
    tone: str
    language: str
    needs_description_update: bool


@dataclass(frozen=True)
class ChatContext:
    diff_text: str
    pr_title: str
    pr_author: str
    comment_body: str
    comment_author: str
    tone: str
    language: str
    conversation_history: tuple[HistoryEntry, ...] = ()
    current_verdict: RecommendationRecord | None = None


@dataclass
class Verdict:
    """Structured verdict as returned by the model in a review cycle."""

    status: str
    reasoning: list[str] = field(default_factory=list)
    has_critical_security: bool = False
    has_high_security: bool = False
    change_type: str = ""


@dataclass
class UpdatedVerdict:
    """Verdict proposed by the model after a follow-up conversation turn."""

    status: str
    reasoning: list[str] = field(default_factory=list)


@dataclass
class AnalysisResult:
    """Normalised output of one review cycle.

    Markdown-bearing fields are always a string or None, never a nested
    structure, regardless of what the model actually returned.
    """

    review_comment: str | None = None
    performance_analysis: str | None = None
    security_analysis: str | None = None
    quality_analysis: str | None = None
    best_practices: str | None = None
    new_title: str | None = None
    new_description: str | None = None
    quality_score: int = 0
    maintainability_score: int = 0
    verdict: Verdict | None = None


@dataclass
class ChatReply:
    reply: str
    verdict_changed: bool = False
    updated_verdict: UpdatedVerdict | None = None


@dataclass
class Recommendation:
    """A resolved verdict plus the tone-specific text used to render it."""

    status: str
    icon: str
    message: str
    reasoning: str
    next_step: str
