from __future__ import annotations

from typing import Any

import pendulum
import pytest

from hrmatching.core import ScoringEngine, ScoringStatus
from hrmatching.reporting import status_counts
from hrmatching.schemas import CandidateProfile, JobCriteriaSet

FIXED_NOW = pendulum.datetime(2026, 1, 15, 9, 30, tz="UTC")

EXPERIENCE_REQUIRED = {
    "id": "exp-min",
    "name": "Minimum experience",
    "kind": "required",
    "weight": 40,
    "category": "experience",
    "condition": {"op": "compare", "field": "experience_years", "value": 3, "target": 5},
}


def skill_criterion(cid: str, skill: str) -> dict[str, Any]:
    return {
        "id": cid,
        "name": skill,
        "kind": "preferred",
        "weight": 30,
        "category": "skills",
        "condition": {"op": "skill", "name": skill, "min_level": 70, "target_level": 90},
    }


def build_job(**kwargs: Any) -> JobCriteriaSet:
    defaults: dict[str, Any] = {
        "job_id": "JD-001",
        "criteria": [
            EXPERIENCE_REQUIRED,
            skill_criterion("skill-react", "React"),
            skill_criterion("skill-ts", "TypeScript"),
        ],
        "category_weights": {"experience": 40, "skills": 60},
    }
    defaults.update(kwargs)
    return JobCriteriaSet.model_validate(defaults)


def build_candidate(**kwargs: Any) -> CandidateProfile:
    defaults: dict[str, Any] = {
        "candidate_id": "C-001",
        "experience_years": 5,
        "skills": [{"name": "React", "level": 90}, {"name": "TypeScript", "level": 90}],
    }
    defaults.update(kwargs)
    return CandidateProfile(**defaults)


@pytest.fixture
def engine() -> ScoringEngine:
    return ScoringEngine(now_provider=lambda: FIXED_NOW)


def test_qualified_candidate_meets_required_and_preferred(engine: ScoringEngine):
    result = engine.evaluate(candidate=build_candidate(), job=build_job())

    assert result.result_for("exp-min").met is True
    assert result.category_scores["skills"] >= 95
    assert result.overall_score == 100
    assert result.required_satisfied is True
    assert result.status is ScoringStatus.QUALIFIED
    assert result.review_required is False
    assert result.confidence == 95
    assert result.criteria_set_version == 1
    assert result.computed_at.startswith("2026-01-15T09:30:00")


def test_failed_required_criterion_is_never_qualified(engine: ScoringEngine):
    result = engine.evaluate(candidate=build_candidate(experience_years=1), job=build_job())

    assert result.result_for("exp-min").met is False
    assert result.category_scores["skills"] == 100
    assert result.required_satisfied is False
    assert result.status is ScoringStatus.NOT_QUALIFIED
    assert result.metadata["failed_required"] == ["exp-min"]
    assert any(flag.startswith("Required criterion not met: Minimum experience") for flag in result.red_flags)


def test_disagreeing_confidences_flag_review(engine: ScoringEngine):
    job = build_job(
        criteria=[
            EXPERIENCE_REQUIRED,
            {
                "id": "soft-team",
                "name": "Teamwork",
                "weight": 10,
                "category": "cultural",
                "condition": {"op": "compare", "field": "soft_skills.teamwork", "value": 70},
            },
        ],
        category_weights={"experience": 80, "cultural": 20},
    )

    result = engine.evaluate(candidate=build_candidate(), job=job)

    assert result.result_for("exp-min").confidence == 95
    assert result.result_for("soft-team").confidence == 20
    assert result.review_required is True
    assert result.metadata["confidence_spread"] == 75
    assert result.status is ScoringStatus.QUALIFIED
    assert status_counts([result])["under_review"] == 1


def test_empty_category_does_not_depress_score(engine: ScoringEngine):
    job = build_job(category_weights={"experience": 45, "skills": 45, "location": 10})

    result = engine.evaluate(candidate=build_candidate(), job=job)

    assert result.category_scores["location"] == 100
    assert result.overall_score == 100


def test_score_is_monotonic_in_experience(engine: ScoringEngine):
    job = build_job()
    overall = [
        engine.evaluate(candidate=build_candidate(experience_years=years), job=job).overall_score
        for years in (0, 1, 2, 3, 4, 5, 8)
    ]

    assert overall == sorted(overall)
    assert overall[0] < overall[-1]


def test_score_is_monotonic_in_skill_level(engine: ScoringEngine):
    job = build_job()
    overall = []
    for level in (0, 35, 69, 70, 80, 90, 100):
        candidate = build_candidate(
            skills=[{"name": "React", "level": level}, {"name": "TypeScript", "level": 90}]
        )
        overall.append(engine.evaluate(candidate=candidate, job=job).overall_score)

    assert overall == sorted(overall)


def test_evaluation_is_idempotent_with_fixed_clock(engine: ScoringEngine):
    job = build_job()
    candidate = build_candidate(experience_years=4)

    assert engine.evaluate(candidate=candidate, job=job) == engine.evaluate(candidate=candidate, job=job)


def test_result_records_criteria_version_and_evaluator(engine: ScoringEngine):
    result = engine.evaluate(candidate=build_candidate(), job=build_job(version=3))

    assert result.criteria_set_version == 3
    assert result.metadata["evaluator"] == "rules"
    assert result.summary()["criteria_set_version"] == 3


def test_job_without_criteria_scores_neutral(engine: ScoringEngine):
    job = build_job(criteria=[], category_weights={"skills": 100})

    result = engine.evaluate(candidate=build_candidate(), job=job)

    assert result.overall_score == 100
    assert result.criterion_results == ()
    assert result.confidence == 0
