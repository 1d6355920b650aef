from __future__ import annotations

import re

from reviewbuddy_core.verdict import has_critical_severity, has_high_severity

# Conventional Commit type → label. First match wins.
_TITLE_LABELS = [
    (re.compile(r"^(feat|feature)(\(.*\))?!?:"), "enhancement"),
    (re.compile(r"^(fix|bugfix)(\(.*\))?!?:"), "bug"),
    (re.compile(r"^(docs|doc)(\(.*\))?!?:"), "documentation"),
    (re.compile(r"^(refactor|perf|performance)(\(.*\))?!?:"), "enhancement"),
    (re.compile(r"^(test|tests)(\(.*\))?!?:"), "testing"),
    (re.compile(r"^(chore|ci|build)(\(.*\))?!?:"), "maintenance"),
]

_PERFORMANCE_HINTS = ("performance issue", "optimize", "slow")


def determine_labels(
    title: str,
    maintainability_score: int,
    security_analysis: str | None,
    performance_analysis: str | None,
) -> list[str]:
    labels: list[str] = []
    lower_title = (title or "").strip().lower()

    for pattern, label in _TITLE_LABELS:
        if pattern.match(lower_title):
            labels.append(label)
            break

    if maintainability_score >= 90:
        labels.append("good first review")
    elif maintainability_score < 50:
        labels.append("needs work")

    if has_critical_severity(security_analysis) or has_high_severity(security_analysis):
        labels.append("security")

    perf = (performance_analysis or "").lower()
    if any(hint in perf for hint in _PERFORMANCE_HINTS):
        labels.append("performance")

    return labels
