"\"\"\"Read-side helpers for lists of scoring results.\"\"\""

from __future__ import annotations

from typing import Iterable

from .core import ScoringResult, ScoringStatus


def status_counts(results: Iterable[ScoringResult]) -> dict[str, int]:
    """Count results per status.

    ``under_review`` counts results flagged for human review; those results
    are also counted under their computed status.
    """
    counts = {status.value: 0 for status in ScoringStatus}
    for result in results:
        counts[result.status.value] += 1
        if result.review_required:
            counts[ScoringStatus.UNDER_REVIEW.value] += 1
    return counts


def filter_results(
    results: Iterable[ScoringResult],
    *,
    min_score: int | None = None,
    status: ScoringStatus | str | None = None,
    review_required: bool | None = None,
    job_id: str | None = None,
) -> list[ScoringResult]:
    wanted = ScoringStatus(status) if status is not None else None
    selected: list[ScoringResult] = []
    for result in results:
        if min_score is not None and result.overall_score < min_score:
            continue
        if job_id is not None and result.job_id != job_id:
            continue
        if review_required is not None and result.review_required is not review_required:
            continue
        if wanted is ScoringStatus.UNDER_REVIEW:
            if not result.review_required:
                continue
        elif wanted is not None and result.status is not wanted:
            continue
        selected.append(result)
    return selected


def rank(results: Iterable[ScoringResult]) -> list[ScoringResult]:
    """Best matches first: score, then confidence, then candidate id."""
    return sorted(
        results,
        key=lambda result: (-result.overall_score, -result.confidence, result.candidate_id),
    )
