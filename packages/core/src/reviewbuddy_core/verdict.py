"""Final recommendation: resolve it, render its tone-specific text, reconcile changes.

A structured verdict from the model is authoritative. Heuristics over the
maintainability score and the security narrative are only consulted when the
model did not supply one, and every path ends in one of the three statuses.
"""

from __future__ import annotations

import logging
import re
from typing import Sequence

from reviewbuddy_core.models import (
    APPROVE,
    REJECT,
    REQUEST_CHANGES,
    Recommendation,
    RecommendationRecord,
    UpdatedVerdict,
    Verdict,
)

logger = logging.getLogger(__name__)

REJECT_BELOW = 40
REQUEST_CHANGES_BELOW = 60

_STATUS_ALIASES = {
    "APPROVE": APPROVE,
    "APPROVED": APPROVE,
    "REQUEST CHANGES": REQUEST_CHANGES,
    "REQUEST CHANGE": REQUEST_CHANGES,
    "CHANGES REQUESTED": REQUEST_CHANGES,
    "REJECT": REJECT,
    "REJECTED": REJECT,
}


def _severity_re(level: str) -> re.Pattern:
    # Matches "Severity: High", "**Severity**: High", "**Severity:** High" and
    # "Severity: **High**", but not prose that merely says "high".
    return re.compile(rf"\bSeverity\s*(?:\*\*)?\s*:\s*(?:\*\*)?\s*{level}\b", re.IGNORECASE)


_CRITICAL_RE = _severity_re("Critical")
_HIGH_RE = _severity_re("High")

_ICONS = {APPROVE: "✅", REQUEST_CHANGES: "⚠️", REJECT: "🚫"}

# Keyed by (status, tone, language); "*" is a wildcard. Every status has a
# (status, "*", "*") entry so lookups never come back empty.
_MESSAGES = {
    (REJECT, "roast", "hinglish"): "**Arre bhai bhai bhai!** Ye PR toh reject karna padega!",
    (REJECT, "professional", "*"): "This PR should be **REJECTED**.",
    (REJECT, "funny", "*"): "🛑 **STOP RIGHT THERE!** This PR needs major work!",
    (REJECT, "*", "*"): "This PR should be **REJECTED**.",
    (REQUEST_CHANGES, "roast", "hinglish"): "**Changes chahiye, bhai!** Abhi approve nahi kar sakte.",
    (REQUEST_CHANGES, "professional", "*"): "**REQUEST CHANGES** - This PR needs improvements before approval.",
    (REQUEST_CHANGES, "funny", "*"): "🔧 **Almost there, but not quite!** Time for some tweaks!",
    (REQUEST_CHANGES, "*", "*"): "**REQUEST CHANGES** - Improvements needed before approval.",
    (APPROVE, "roast", "hinglish"): "**Shabash beta!** Ye PR approve karne layak hai.",
    (APPROVE, "professional", "*"): "**APPROVE** - This PR meets quality standards and is ready for merge.",
    (APPROVE, "funny", "*"): "🎉 **LGTM! (Looks Good To Merge!)** Ship it! 🚀",
    (APPROVE, "*", "*"): "**APPROVE** - This PR is ready for merge.",
}

_NEXT_STEPS = {
    (APPROVE, "roast", "hinglish"): "✅ **Agar tum satisfied ho, toh approve kar do aur merge kar do!**",
    (APPROVE, "funny", "*"): "✅ **If you're happy with it, smash that approve button! 👍**",
    (APPROVE, "*", "*"): "✅ **If all reviewers are satisfied, please approve and merge this PR.**",
    (REQUEST_CHANGES, "roast", "hinglish"): "⚠️ **Pehle suggestions address karo, phir approve karna.**",
    (REQUEST_CHANGES, "funny", "*"): (
        "⚠️ **Fix the issues mentioned above, then we'll give this the thumbs up! 👍**"
    ),
    (REQUEST_CHANGES, "*", "*"): (
        "⚠️ **Please address the suggestions above, then request re-review for approval.**"
    ),
    (REJECT, "roast", "hinglish"): (
        "🚫 **Critical issues hai - is PR ko reject karo aur major fixes ke baad dobara submit karo.**"
    ),
    (REJECT, "funny", "*"): (
        "🚫 **This needs major work - please close this PR and submit a new one after fixes! 🔧**"
    ),
    (REJECT, "*", "*"): (
        "🚫 **This PR should be rejected. Please close and resubmit after addressing critical issues.**"
    ),
}


def lookup(table: dict, status: str, tone: str, language: str) -> str:
    tone = (tone or "").lower()
    language = (language or "").lower()
    for key in ((status, tone, language), (status, tone, "*"), (status, "*", "*")):
        if key in table:
            return table[key]
    raise KeyError(f"No default entry for status {status!r}")


def normalize_status(raw: str | None) -> str | None:
    """Map a model-supplied status onto APPROVE / REQUEST CHANGES / REJECT, or None."""
    if not raw:
        return None
    key = " ".join(re.split(r"[\s_\-]+", str(raw).strip().upper()))
    return _STATUS_ALIASES.get(key)


def has_critical_severity(security_analysis: str | None) -> bool:
    return bool(security_analysis and _CRITICAL_RE.search(security_analysis))


def has_high_severity(security_analysis: str | None) -> bool:
    return bool(security_analysis and _HIGH_RE.search(security_analysis))


def heuristic_status(maintainability_score: int, security_analysis: str | None) -> str:
    if has_critical_severity(security_analysis) or maintainability_score < REJECT_BELOW:
        return REJECT
    if has_high_severity(security_analysis) or maintainability_score < REQUEST_CHANGES_BELOW:
        return REQUEST_CHANGES
    return APPROVE


def render_reasoning(items: Sequence[str]) -> str:
    return "\n".join(f"- {item}" for item in items if item)


def _default_reasoning(status: str, score: int) -> str:
    if status == REJECT:
        return (
            f"- Overall Benchmark Score: **{score}/100**\n"
            "- Significant issues need to be resolved before this can be merged."
        )
    if status == REQUEST_CHANGES:
        return "- Some issues need to be addressed.\n- Please review feedback and make improvements."
    return f"- Quality score: **{score}/100**\n- No critical issues found.\n- Ready for approval."


def build_recommendation(status: str, reasoning: str, tone: str, language: str) -> Recommendation:
    return Recommendation(
        status=status,
        icon=_ICONS[status],
        message=lookup(_MESSAGES, status, tone, language),
        reasoning=reasoning,
        next_step=lookup(_NEXT_STEPS, status, tone, language),
    )


def resolve_recommendation(
    maintainability_score: int,
    security_analysis: str | None,
    verdict: Verdict | None,
    tone: str,
    language: str,
) -> Recommendation:
    """Decide the final recommendation for a review cycle."""
    status = normalize_status(verdict.status) if verdict is not None else None
    if status is not None:
        reasoning = render_reasoning(verdict.reasoning) or _default_reasoning(status, maintainability_score)
        return build_recommendation(status, reasoning, tone, language)

    if verdict is not None:
        logger.warning("Ignoring unrecognised verdict status %r; falling back to heuristics.", verdict.status)
    status = heuristic_status(maintainability_score, security_analysis)
    return build_recommendation(status, _default_reasoning(status, maintainability_score), tone, language)


def reconcile_verdict(
    previous: RecommendationRecord | None,
    verdict_changed: bool,
    updated_verdict: UpdatedVerdict | None,
    tone: str,
    language: str,
) -> Recommendation | None:
    """Return the recommendation that should replace ``previous``, if any.

    None means the posted recommendation stays as it is: either nothing
    changed, or the change cannot be applied.
    """
    if not verdict_changed:
        return None
    if updated_verdict is None:
        logger.warning("Model reported a verdict change without an updated verdict; ignoring.")
        return None
    status = normalize_status(updated_verdict.status)
    if status is None:
        logger.warning("Model proposed unrecognised verdict status %r; ignoring.", updated_verdict.status)
        return None
    if previous is None:
        logger.warning("Verdict changed to %s but no recommendation comment was found to update.", status)
        return None
    reasoning = render_reasoning(updated_verdict.reasoning) or previous.reasoning
    logger.info("Verdict changed: %s -> %s", previous.status, status)
    return build_recommendation(status, reasoning, tone, language)
