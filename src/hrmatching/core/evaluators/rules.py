"\"\"\"Rule evaluator interpreting data-only criterion conditions.\"\"\""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable

from rapidfuzz import fuzz

from ...errors import DataIncomplete
from ...schemas import (
    AllNode,
    AnyNode,
    CandidateProfile,
    CompareNode,
    Criterion,
    JobCriteriaSet,
    MembershipNode,
    MentionsNode,
    SkillNode,
)
from ..numeric import clamp, to_percent
from ..results import CriterionResult

# Closed field table: conditions can only reach what is listed here.
_CANDIDATE_FIELDS: dict[str, Callable[[CandidateProfile], Any]] = {
    "experience_years": lambda p: p.experience_years,
    "location": lambda p: p.location,
    "education": lambda p: p.education,
    "sectors": lambda p: p.sectors,
    "languages": lambda p: p.languages,
    "preferred_locations": lambda p: p.preferred_locations,
    "work_modes": lambda p: p.work_modes,
    "skills": lambda p: [skill.name for skill in p.skills],
    "soft_skills.communication": lambda p: p.soft_skills.communication,
    "soft_skills.adaptation": lambda p: p.soft_skills.adaptation,
    "soft_skills.teamwork": lambda p: p.soft_skills.teamwork,
    "soft_skills.leadership": lambda p: p.soft_skills.leadership,
    "accessibility.needs_accommodation": lambda p: p.accessibility.needs_accommodation,
    "accessibility.accommodations": lambda p: p.accessibility.accommodations,
}

KNOWN_FIELDS = frozenset(_CANDIDATE_FIELDS)

_WORD = re.compile(r"\w+")


@dataclass
class RuleEvaluatorConfig:
    """Confidence levels and matching thresholds for rule evaluation."""

    direct_confidence: int = 95
    inferred_confidence: int = 70
    missing_confidence: int = 20
    min_similarity: float = 85.0
    min_fuzzy_term_length: int = 4
    passing_floor: float = 60.0


@dataclass(frozen=True)
class _Verdict:
    met: bool
    score: float
    confidence: int
    reasoning: str


class RuleEvaluator:
    """Evaluate one criterion condition against a candidate and job."""

    method = "rules"

    def __init__(self, *, config: RuleEvaluatorConfig | None = None) -> None:
        self._config = config or RuleEvaluatorConfig()

    def evaluate(
        self,
        criterion: Criterion,
        candidate: CandidateProfile,
        job: JobCriteriaSet,
    ) -> CriterionResult:
        verdict = self._safe(criterion.condition, candidate, job)
        return CriterionResult(
            criterion_id=criterion.id,
            met=verdict.met,
            score=to_percent(verdict.score),
            confidence=to_percent(verdict.confidence),
            reasoning=verdict.reasoning,
        )

    def _safe(self, node: Any, candidate: CandidateProfile, job: JobCriteriaSet) -> _Verdict:
        try:
            return self._dispatch(node, candidate, job)
        except DataIncomplete as exc:
            return _Verdict(
                met=False,
                score=0.0,
                confidence=self._config.missing_confidence,
                reasoning=f"data missing: {exc}",
            )

    def _dispatch(self, node: Any, candidate: CandidateProfile, job: JobCriteriaSet) -> _Verdict:
        if isinstance(node, CompareNode):
            return self._compare(node, candidate)
        if isinstance(node, SkillNode):
            return self._skill(node, candidate)
        if isinstance(node, MembershipNode):
            return self._membership(node, candidate, job)
        if isinstance(node, MentionsNode):
            return self._mentions(node, candidate)
        if isinstance(node, AllNode):
            return self._all([self._safe(child, candidate, job) for child in node.conditions])
        if isinstance(node, AnyNode):
            return self._any([self._safe(child, candidate, job) for child in node.conditions])
        raise DataIncomplete(type(node).__name__, f"unsupported condition node {type(node).__name__}")

    def _compare(self, node: CompareNode, candidate: CandidateProfile) -> _Verdict:
        actual = _resolve(candidate, node.field)
        direct = self._config.direct_confidence

        if node.comparator in ("eq", "ne"):
            equal = _equals(actual, node.value)
            met = equal if node.comparator == "eq" else not equal
            relation = "matches" if equal else "does not match"
            return _Verdict(met, 100.0 if met else 0.0, direct, f"{node.field} {relation} {node.value}")

        numeric = _as_number(actual, node.field)
        threshold = float(node.value)
        if node.comparator == "gte":
            met = numeric >= threshold
        elif node.comparator == "gt":
            met = numeric > threshold
        elif node.comparator == "lte":
            met = numeric <= threshold
        else:
            met = numeric < threshold

        higher_is_better = node.comparator in ("gte", "gt")
        score = self._graded(numeric, threshold, node.target, met=met, higher_is_better=higher_is_better)
        bound = "minimum" if higher_is_better else "maximum"
        state = "meets" if met else "misses"
        return _Verdict(
            met,
            score,
            direct,
            f"{node.field} is {numeric:g}, {state} the {bound} of {threshold:g}",
        )

    def _skill(self, node: SkillNode, candidate: CandidateProfile) -> _Verdict:
        if not candidate.skills:
            raise DataIncomplete("skills", "candidate lists no skills")

        confidence = self._config.direct_confidence
        level = candidate.skill_level(node.name)
        matched_name = node.name
        if level is None:
            best = self._best_fuzzy(node.name, [skill.name for skill in candidate.skills])
            if best is None:
                return _Verdict(
                    False,
                    0.0,
                    confidence,
                    f"{node.name} not among the {len(candidate.skills)} listed skills",
                )
            matched_name = best
            level = candidate.skill_level(best) or 0
            confidence = self._config.inferred_confidence

        if node.min_level == 0 and node.target_level is None:
            return _Verdict(True, 100.0, confidence, f"{node.name} listed as '{matched_name}'")

        met = level >= node.min_level
        score = self._graded(level, node.min_level, node.target_level, met=met, higher_is_better=True)
        state = "meets" if met else "is below"
        return _Verdict(
            met,
            score,
            confidence,
            f"{matched_name} at {level}% {state} the {node.min_level}% minimum",
        )

    def _membership(
        self,
        node: MembershipNode,
        candidate: CandidateProfile,
        job: JobCriteriaSet,
    ) -> _Verdict:
        accepted = list(node.values)
        if node.job_field:
            job_values = job.attributes.get(node.job_field)
            if job_values:
                accepted.extend(_as_strings(job_values))
            elif not accepted:
                raise DataIncomplete(f"job.{node.job_field}")

        candidate_values = _as_strings(_resolve(candidate, node.field))
        direct_hit = _first_direct_match(candidate_values, accepted)
        if direct_hit is not None:
            return _Verdict(
                True,
                100.0,
                self._config.direct_confidence,
                f"{node.field} '{direct_hit}' is accepted",
            )

        for value in candidate_values:
            best = self._best_fuzzy(value, accepted)
            if best is not None:
                return _Verdict(
                    True,
                    100.0,
                    self._config.inferred_confidence,
                    f"{node.field} '{value}' approximately matches '{best}'",
                )

        return _Verdict(
            False,
            0.0,
            self._config.direct_confidence,
            f"{node.field} {candidate_values} outside accepted {accepted}",
        )

    def _mentions(self, node: MentionsNode, candidate: CandidateProfile) -> _Verdict:
        corpus = candidate.free_text()
        if not corpus:
            raise DataIncomplete("profile text")
        inferred = self._config.inferred_confidence
        for term in node.terms:
            if any(self._text_mentions(term.lower(), text) for text in corpus):
                return _Verdict(True, 100.0, inferred, f"profile mentions '{term}'")
        return _Verdict(False, 0.0, inferred, f"profile does not mention {', '.join(node.terms)}")

    @staticmethod
    def _all(verdicts: list[_Verdict]) -> _Verdict:
        return _Verdict(
            met=all(v.met for v in verdicts),
            score=min(v.score for v in verdicts),
            confidence=min(v.confidence for v in verdicts),
            reasoning="; ".join(v.reasoning for v in verdicts),
        )

    @staticmethod
    def _any(verdicts: list[_Verdict]) -> _Verdict:
        return max(verdicts, key=lambda v: (v.met, v.score, v.confidence))

    def _graded(
        self,
        actual: float,
        threshold: float,
        target: float | None,
        *,
        met: bool,
        higher_is_better: bool,
    ) -> float:
        """Score on one curve: shortfall below the floor, a linear band up to target."""
        floor = self._config.passing_floor
        if higher_is_better:
            if not met:
                if threshold <= 0:
                    return 0.0
                return clamp(floor * max(actual, 0.0) / threshold, 0.0, floor)
            goal = threshold if target is None or target <= threshold else target
            if actual >= goal:
                return 100.0
            return floor + (100.0 - floor) * (actual - threshold) / (goal - threshold)

        if not met:
            if actual <= 0:
                return 0.0
            return clamp(floor * max(threshold, 0.0) / actual, 0.0, floor)
        goal = threshold if target is None or target >= threshold else target
        if actual <= goal:
            return 100.0
        return floor + (100.0 - floor) * (threshold - actual) / (threshold - goal)

    def _text_mentions(self, needle: str, text: str) -> bool:
        # short terms ("ux", "go") only count as whole words
        if len(needle) < self._config.min_fuzzy_term_length:
            words = _WORD.findall(needle)
            tokens = _WORD.findall(text)
            return bool(words) and any(
                tokens[start : start + len(words)] == words for start in range(len(tokens) - len(words) + 1)
            )
        return needle in text or fuzz.partial_ratio(needle, text) >= self._config.min_similarity

    def _best_fuzzy(self, needle: str, candidates: Iterable[str]) -> str | None:
        best_name: str | None = None
        best_score = 0.0
        for name in candidates:
            score = fuzz.token_set_ratio(needle.lower(), name.lower())
            if score >= self._config.min_similarity and score > best_score:
                best_name, best_score = name, score
        return best_name


def _resolve(candidate: CandidateProfile, field: str) -> Any:
    getter = _CANDIDATE_FIELDS.get(field)
    if getter is None:
        raise DataIncomplete(field, f"unknown field '{field}'")
    value = getter(candidate)
    if value is None or (isinstance(value, list) and not value):
        raise DataIncomplete(field)
    return value


def _as_number(value: Any, field: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise DataIncomplete(field, f"'{field}' is not numeric")
    return float(value)


def _as_strings(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value if item is not None and str(item)]
    return [str(value)]


def _equals(actual: Any, expected: float | str) -> bool:
    if isinstance(actual, list):
        return any(_equals(item, expected) for item in actual)
    if isinstance(actual, str) or isinstance(expected, str):
        return str(actual).strip().lower() == str(expected).strip().lower()
    if isinstance(actual, (int, float)):
        return float(actual) == float(expected)
    return False


def _first_direct_match(values: list[str], accepted: list[str]) -> str | None:
    accepted_lower = {item.strip().lower() for item in accepted}
    for value in values:
        if value.strip().lower() in accepted_lower:
            return value
    return None
