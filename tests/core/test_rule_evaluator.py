from __future__ import annotations

from typing import Any

import pytest

from hrmatching.core import CriterionEvaluator, RuleEvaluator, RuleEvaluatorConfig
from hrmatching.schemas import CandidateProfile, Criterion, JobCriteriaSet


def build_candidate(**kwargs: Any) -> CandidateProfile:
    defaults: dict[str, Any] = {"candidate_id": "C-001"}
    defaults.update(kwargs)
    return CandidateProfile(**defaults)


def build_criterion(condition: dict[str, Any], **kwargs: Any) -> Criterion:
    payload: dict[str, Any] = {
        "id": "c-1",
        "name": "Criterion",
        "weight": 10,
        "category": "skills",
        "condition": condition,
    }
    payload.update(kwargs)
    return Criterion.model_validate(payload)


def build_job(**kwargs: Any) -> JobCriteriaSet:
    defaults: dict[str, Any] = {"job_id": "JD-001", "category_weights": {"skills": 100}}
    defaults.update(kwargs)
    return JobCriteriaSet(**defaults)


@pytest.fixture
def evaluator() -> RuleEvaluator:
    return RuleEvaluator()


def test_rule_evaluator_satisfies_protocol(evaluator: RuleEvaluator):
    assert isinstance(evaluator, CriterionEvaluator)


def test_compare_met_without_target_scores_full(evaluator: RuleEvaluator):
    criterion = build_criterion({"op": "compare", "field": "experience_years", "value": 3})
    result = evaluator.evaluate(criterion, build_candidate(experience_years=5), build_job())

    assert result.criterion_id == "c-1"
    assert result.met is True
    assert result.score == 100
    assert result.confidence == 95


def test_compare_between_threshold_and_target_is_linear(evaluator: RuleEvaluator):
    criterion = build_criterion(
        {"op": "compare", "field": "experience_years", "value": 3, "target": 5}
    )
    result = evaluator.evaluate(criterion, build_candidate(experience_years=4), build_job())

    assert result.met is True
    assert result.score == 80


def test_compare_shortfall_is_proportional(evaluator: RuleEvaluator):
    criterion = build_criterion({"op": "compare", "field": "experience_years", "value": 3})
    result = evaluator.evaluate(criterion, build_candidate(experience_years=1.5), build_job())

    assert result.met is False
    assert result.score == 30
    assert "misses the minimum" in result.reasoning


def test_compare_lower_is_better(evaluator: RuleEvaluator):
    criterion = build_criterion(
        {"op": "compare", "field": "experience_years", "comparator": "lte", "value": 10}
    )
    job = build_job()

    within = evaluator.evaluate(criterion, build_candidate(experience_years=5), job)
    over = evaluator.evaluate(criterion, build_candidate(experience_years=20), job)

    assert within.met is True and within.score == 100
    assert over.met is False and over.score == 30


def test_compare_equality_is_binary(evaluator: RuleEvaluator):
    criterion = build_criterion(
        {"op": "compare", "field": "location", "comparator": "eq", "value": "paris"}
    )
    job = build_job()

    hit = evaluator.evaluate(criterion, build_candidate(location="Paris"), job)
    miss = evaluator.evaluate(criterion, build_candidate(location="Lyon"), job)

    assert (hit.met, hit.score) == (True, 100)
    assert (miss.met, miss.score) == (False, 0)


def test_missing_field_yields_low_confidence_instead_of_raising(evaluator: RuleEvaluator):
    criterion = build_criterion({"op": "compare", "field": "soft_skills.teamwork", "value": 70})
    result = evaluator.evaluate(criterion, build_candidate(), build_job())

    assert result.met is False
    assert result.score == 0
    assert result.confidence == 20
    assert "soft_skills.teamwork" in result.reasoning


def test_unknown_field_is_reported_as_missing(evaluator: RuleEvaluator):
    criterion = build_criterion({"op": "compare", "field": "salary", "value": 1})
    result = evaluator.evaluate(criterion, build_candidate(experience_years=3), build_job())

    assert result.met is False
    assert result.confidence == 20
    assert "salary" in result.reasoning


def test_skill_level_is_graded(evaluator: RuleEvaluator):
    criterion = build_criterion(
        {"op": "skill", "name": "React", "min_level": 70, "target_level": 85}
    )
    job = build_job()

    strong = evaluator.evaluate(
        criterion, build_candidate(skills=[{"name": "react", "level": 90}]), job
    )
    partial = evaluator.evaluate(
        criterion, build_candidate(skills=[{"name": "React", "level": 75}]), job
    )
    weak = evaluator.evaluate(
        criterion, build_candidate(skills=[{"name": "React", "level": 35}]), job
    )

    assert (strong.met, strong.score, strong.confidence) == (True, 100, 95)
    assert (partial.met, partial.score) == (True, 73)
    assert (weak.met, weak.score) == (False, 30)


def test_skill_fuzzy_match_is_inferred(evaluator: RuleEvaluator):
    criterion = build_criterion({"op": "skill", "name": "React"})
    candidate = build_candidate(skills=[{"name": "React Native", "level": 80}])

    result = evaluator.evaluate(criterion, candidate, build_job())

    assert result.met is True
    assert result.score == 100
    assert result.confidence == 70
    assert "React Native" in result.reasoning


def test_skill_absent_is_direct_miss(evaluator: RuleEvaluator):
    criterion = build_criterion({"op": "skill", "name": "React"})
    candidate = build_candidate(skills=[{"name": "Python", "level": 90}])

    result = evaluator.evaluate(criterion, candidate, build_job())

    assert (result.met, result.score, result.confidence) == (False, 0, 95)


def test_skill_without_any_listed_skills_is_missing(evaluator: RuleEvaluator):
    criterion = build_criterion({"op": "skill", "name": "React"})
    result = evaluator.evaluate(criterion, build_candidate(), build_job())

    assert result.confidence == 20
    assert result.met is False


def test_membership_uses_job_attributes(evaluator: RuleEvaluator):
    criterion = build_criterion(
        {"op": "membership", "field": "location", "job_field": "locations"},
        category="location",
    )
    job = build_job(attributes={"locations": ["Lyon", "Paris"]})

    hit = evaluator.evaluate(criterion, build_candidate(location=" paris "), job)
    near = evaluator.evaluate(criterion, build_candidate(location="Paris 11e"), job)
    miss = evaluator.evaluate(criterion, build_candidate(location="Brest"), job)

    assert (hit.met, hit.score, hit.confidence) == (True, 100, 95)
    assert (near.met, near.score, near.confidence) == (True, 100, 70)
    assert "approximately matches 'Paris'" in near.reasoning
    assert (miss.met, miss.score, miss.confidence) == (False, 0, 95)


def test_membership_without_job_values_is_missing(evaluator: RuleEvaluator):
    criterion = build_criterion(
        {"op": "membership", "field": "location", "job_field": "locations"},
        category="location",
    )
    result = evaluator.evaluate(criterion, build_candidate(location="Paris"), build_job())

    assert result.confidence == 20
    assert "job.locations" in result.reasoning


def test_membership_typo_is_fuzzy(evaluator: RuleEvaluator):
    criterion = build_criterion(
        {"op": "membership", "field": "location", "values": ["Marseille"]},
        category="location",
    )
    result = evaluator.evaluate(criterion, build_candidate(location="Marseile"), build_job())

    assert result.met is True
    assert result.confidence == 70


def test_membership_substring_is_not_a_match(evaluator: RuleEvaluator):
    location = build_criterion(
        {"op": "membership", "field": "location", "values": ["Nice"]},
        category="location",
    )
    skills = build_criterion({"op": "membership", "field": "skills", "values": ["Java"]})
    job = build_job()

    city = evaluator.evaluate(location, build_candidate(location="Venice"), job)
    language = evaluator.evaluate(
        skills, build_candidate(skills=[{"name": "JavaScript", "level": 80}]), job
    )

    assert (city.met, city.score, city.confidence) == (False, 0, 95)
    assert (language.met, language.score, language.confidence) == (False, 0, 95)


def test_mentions_searches_free_text(evaluator: RuleEvaluator):
    criterion = build_criterion({"op": "mentions", "terms": ["WCAG", "a11y"]})
    job = build_job()

    hit = evaluator.evaluate(
        criterion, build_candidate(summary="Ran WCAG audits for public websites"), job
    )
    miss = evaluator.evaluate(criterion, build_candidate(summary="Backend engineer"), job)
    empty = evaluator.evaluate(criterion, build_candidate(), job)

    assert (hit.met, hit.score, hit.confidence) == (True, 100, 70)
    assert (miss.met, miss.score) == (False, 0)
    assert empty.confidence == 20


def test_short_mention_terms_need_a_whole_word(evaluator: RuleEvaluator):
    criterion = build_criterion({"op": "mentions", "terms": ["UX", "go"]})
    job = build_job()

    inside_words = evaluator.evaluate(
        criterion, build_candidate(summary="Linux kernel developer, good at algorithms"), job
    )
    whole_word = evaluator.evaluate(criterion, build_candidate(summary="Led UX research for mobile apps"), job)

    assert (inside_words.met, inside_words.score) == (False, 0)
    assert (whole_word.met, whole_word.score, whole_word.confidence) == (True, 100, 70)
    assert "'UX'" in whole_word.reasoning


def test_all_takes_weakest_child(evaluator: RuleEvaluator):
    criterion = build_criterion(
        {
            "op": "all",
            "conditions": [
                {"op": "compare", "field": "experience_years", "value": 3},
                {"op": "membership", "field": "sectors", "values": ["Marketing"]},
            ],
        }
    )
    job = build_job()

    both = evaluator.evaluate(
        criterion, build_candidate(experience_years=4, sectors=["Marketing"]), job
    )
    one_missing = evaluator.evaluate(criterion, build_candidate(experience_years=4), job)

    assert (both.met, both.score, both.confidence) == (True, 100, 95)
    assert one_missing.met is False
    assert one_missing.score == 0
    assert one_missing.confidence == 20


def test_any_takes_best_child(evaluator: RuleEvaluator):
    criterion = build_criterion(
        {
            "op": "any",
            "conditions": [
                {"op": "skill", "name": "Social Media"},
                {"op": "skill", "name": "LinkedIn"},
            ],
        }
    )
    candidate = build_candidate(skills=[{"name": "LinkedIn", "level": 60}])

    result = evaluator.evaluate(criterion, candidate, build_job())

    assert (result.met, result.score, result.confidence) == (True, 100, 95)


def test_config_overrides_confidence_levels():
    evaluator = RuleEvaluator(config=RuleEvaluatorConfig(missing_confidence=10))
    criterion = build_criterion({"op": "compare", "field": "experience_years", "value": 3})

    result = evaluator.evaluate(criterion, build_candidate(), build_job())

    assert result.confidence == 10
