"""Turn free-form model text into typed results.

Models asked for "only JSON" still wrap it in code fences, add a sentence of
prose around it, or return a field as a list of bullet objects instead of a
markdown string. Extraction here is an ordered, total function and field
coercion never fails; only a top-level payload that does not parse at all is
fatal for a review cycle.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from reviewbuddy_core.errors import ResponseShapeError
from reviewbuddy_core.models import AnalysisResult, ChatReply, UpdatedVerdict, Verdict

logger = logging.getLogger(__name__)

# Fences are only honoured at the start of a line. JSON string values cannot
# contain raw newlines, so a ``` embedded in a field never matches.
_JSON_FENCE_RE = re.compile(r"^```json[ \t]*\r?\n(.*?)\r?\n[ \t]*```[ \t]*$", re.DOTALL | re.MULTILINE | re.IGNORECASE)
_ANY_FENCE_RE = re.compile(r"^```[\w+-]*[ \t]*\r?\n(.*?)\r?\n[ \t]*```[ \t]*$", re.DOTALL | re.MULTILINE)

MARKDOWN_FIELDS = (
    "review_comment",
    "performance_analysis",
    "security_analysis",
    "quality_analysis",
    "best_practices",
    "new_description",
)


def extract_json(text: str) -> str:
    """Return the most plausible JSON candidate inside ``text``.

    Tried in order: a ```json fence, any fence, the span from the first ``{``
    to the last ``}``, and finally the text unchanged.
    """
    match = _JSON_FENCE_RE.search(text) or _ANY_FENCE_RE.search(text)
    if match:
        return match.group(1)
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last > first:
        return text[first : last + 1]
    return text


def load_json(text: str) -> tuple[Any | None, str]:
    """Parse the extracted candidate; returns (value or None, candidate)."""
    candidate = extract_json(text)
    try:
        return json.loads(candidate), candidate
    except json.JSONDecodeError:
        return None, candidate


def _as_markdown(value: Any) -> str:
    # Non-ASCII text (emoji, accents) stays literal.
    return json.dumps(value, indent=2, ensure_ascii=False)


def clean_field(value: Any, field_name: str = "field") -> str | None:
    """Coerce a markdown field the model returned as a list or object into a string."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, list):
        logger.warning("Model returned %s as an array; joining it into markdown.", field_name)
        paragraphs = [_as_markdown(item) if isinstance(item, (dict, list)) else str(item) for item in value]
        return "\n\n".join(paragraphs)
    if isinstance(value, dict):
        logger.warning("Model returned %s as an object; serialising it as markdown.", field_name)
        return _as_markdown(value)
    logger.warning("Model returned %s as %s; converting to text.", field_name, type(value).__name__)
    return str(value)


def is_null_value(value: Any) -> bool:
    """True for None, blank strings, and null serialised as text ("null", "NULL", ...)."""
    if value is None:
        return True
    if isinstance(value, str):
        stripped = value.strip()
        return not stripped or stripped.lower() == "null"
    return False


def should_update_title(new_title: Any, current_title: str) -> bool:
    if is_null_value(new_title):
        return False
    return str(new_title).strip() != (current_title or "").strip()


def _to_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return 0


def _reasoning_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [line.lstrip("-* ").strip() for line in value.splitlines() if line.strip()]
    if isinstance(value, list):
        return [clean_field(item, "reasoning item") or "" for item in value if item is not None]
    return [str(value)]


def _parse_verdict(value: Any) -> Verdict | None:
    if not isinstance(value, dict) or not value.get("status"):
        return None
    return Verdict(
        status=str(value["status"]),
        reasoning=_reasoning_list(value.get("reasoning")),
        has_critical_security=bool(value.get("has_critical_security", False)),
        has_high_security=bool(value.get("has_high_security", False)),
        change_type=str(value.get("change_type") or ""),
    )


def parse_analysis(text: str, current_title: str = "") -> AnalysisResult:
    """Normalise a review-cycle response into an AnalysisResult.

    Raises ResponseShapeError when the payload is not a JSON object; the raw
    text is logged first so the operator can see what the model produced.
    """
    data, candidate = load_json(text)
    if not isinstance(data, dict):
        logger.error("Failed to parse model response as a JSON object. Candidate: %s", candidate[:200])
        logger.error("Raw text: %s", text)
        raise ResponseShapeError("Model response is not a valid JSON object.", raw_text=text)

    fields = {name: clean_field(data.get(name), name) for name in MARKDOWN_FIELDS}

    new_title = data.get("new_title")
    title = str(new_title).strip() if should_update_title(new_title, current_title) else None
    description = None if is_null_value(fields["new_description"]) else fields["new_description"]

    return AnalysisResult(
        review_comment=fields["review_comment"],
        performance_analysis=fields["performance_analysis"],
        security_analysis=fields["security_analysis"],
        quality_analysis=fields["quality_analysis"],
        best_practices=fields["best_practices"],
        new_title=title,
        new_description=description,
        quality_score=_to_int(data.get("quality_score")),
        maintainability_score=_to_int(data.get("maintainability_score")),
        verdict=_parse_verdict(data.get("verdict")),
    )


def parse_chat_reply(text: str) -> ChatReply:
    """Normalise a reply-flow response.

    A reply that is not JSON is still useful to the commenter, so it is posted
    verbatim with no verdict change instead of failing the run.
    """
    data, _ = load_json(text)
    if not isinstance(data, dict) or "reply" not in data:
        logger.warning("Reply was not in the expected JSON format; posting it as plain text.")
        return ChatReply(reply=text.strip())

    changed = data.get("verdict_changed")
    if isinstance(changed, str):
        changed = changed.strip().lower() == "true"

    updated = None
    raw_verdict = data.get("updated_verdict")
    if isinstance(raw_verdict, dict) and raw_verdict.get("status"):
        updated = UpdatedVerdict(
            status=str(raw_verdict["status"]),
            reasoning=_reasoning_list(raw_verdict.get("reasoning")),
        )

    return ChatReply(
        reply=clean_field(data.get("reply"), "reply") or "",
        verdict_changed=changed is True,
        updated_verdict=updated,
    )
