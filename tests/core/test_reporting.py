from __future__ import annotations

from hrmatching.core import ScoringResult, ScoringStatus
from hrmatching.reporting import filter_results, rank, status_counts


def build_result(candidate_id: str, score: int, status: ScoringStatus, **kwargs) -> ScoringResult:
    defaults = dict(
        candidate_id=candidate_id,
        job_id="JD-001",
        overall_score=score,
        confidence=90,
        category_scores={},
        criterion_results=(),
        status=status,
        review_required=False,
        required_satisfied=True,
        strengths=(),
        concerns=(),
        red_flags=(),
        recommendations=(),
        computed_at="2026-01-01T00:00:00Z",
        criteria_set_version=1,
    )
    defaults.update(kwargs)
    return ScoringResult(**defaults)


RESULTS = [
    build_result("C-1", 92, ScoringStatus.QUALIFIED),
    build_result("C-2", 70, ScoringStatus.PARTIALLY_QUALIFIED, review_required=True),
    build_result("C-3", 40, ScoringStatus.NOT_QUALIFIED),
    build_result("C-4", 92, ScoringStatus.QUALIFIED, confidence=95),
]


def test_status_counts_include_review_bucket():
    assert status_counts(RESULTS) == {
        "qualified": 2,
        "partially_qualified": 1,
        "not_qualified": 1,
        "under_review": 1,
    }


def test_filter_by_score_and_status():
    assert [r.candidate_id for r in filter_results(RESULTS, min_score=60)] == ["C-1", "C-2", "C-4"]
    assert [r.candidate_id for r in filter_results(RESULTS, status="qualified")] == ["C-1", "C-4"]
    assert [r.candidate_id for r in filter_results(RESULTS, status=ScoringStatus.UNDER_REVIEW)] == ["C-2"]
    assert filter_results(RESULTS, job_id="JD-999") == []


def test_rank_orders_by_score_then_confidence():
    assert [r.candidate_id for r in rank(RESULTS)] == ["C-4", "C-1", "C-2", "C-3"]
