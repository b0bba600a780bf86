"""Urgency to priority-score mapping."""

from __future__ import annotations

from smartcity.core.types import Urgency

DEFAULT_PRIORITY_SCORE = 5

PRIORITY_BY_URGENCY: dict[Urgency, int] = {
    Urgency.LOW: 1,
    Urgency.MEDIUM: 5,
    Urgency.HIGH: 8,
    Urgency.URGENT: 10,
}


def derive_priority_score(urgency: Urgency | str | None) -> int:
    """Return the priority score for an urgency; unknown or missing means MEDIUM."""
    if urgency is None:
        return DEFAULT_PRIORITY_SCORE
    try:
        return PRIORITY_BY_URGENCY[Urgency(urgency)]
    except ValueError:
        return DEFAULT_PRIORITY_SCORE


def resolve_priority_score(
    urgency: Urgency | str | None,
    explicit_score: int | None = None,
) -> int:
    """An explicit score wins and is stored as-is; otherwise derive from urgency."""
    if explicit_score is not None:
        return explicit_score
    return derive_priority_score(urgency)
