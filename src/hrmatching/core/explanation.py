"\"\"\"Strengths, concerns, red flags and recommendations for a scored pair.\"\"\""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable, Mapping

from ..config import ConfigManager, load_yaml
from ..schemas import Category, Criterion, CriterionKind
from .results import Classification, CriterionResult, Explanation

WILDCARD = "*"
REVIEW_KEY = "review"


@dataclass
class ExplanationConfig:
    """Thresholds and lookup table for explanation building."""

    strengths_top_n: int = 5
    strength_min_score: int = 85
    concern_min_score: int = 60
    risk_tags: tuple[str, ...] = ("compliance", "discrimination")
    recommendations_path: str | None = None
    recommendations: dict[str, dict[str, list[str]]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.risk_tags = tuple(tag.lower() for tag in self.risk_tags)


class RecommendationTable:
    """Lookup of ``status -> weakest category -> [recommendation, ...]``.

    ``*`` is the per-status fallback when the weakest category has no entry;
    ``review`` holds the entries added when a human must confirm the result.
    """

    def __init__(self, entries: Mapping[str, Mapping[str, Iterable[str]]]):
        self._entries = {
            str(status): {str(key): list(values or []) for key, values in (table or {}).items()}
            for status, table in entries.items()
        }

    @classmethod
    def load(cls, path: str | Path | None = None) -> "RecommendationTable":
        if path is None:
            return cls(ConfigManager().load("recommendations"))
        return cls(load_yaml(path))

    def lookup(self, status: str, category: str | None) -> list[str]:
        table = self._entries.get(status, {})
        if category is not None and category in table:
            return list(table[category])
        return list(table.get(WILDCARD, []))

    def merged(self, overrides: Mapping[str, Mapping[str, Iterable[str]]]) -> "RecommendationTable":
        entries: dict[str, dict[str, Any]] = {status: dict(table) for status, table in self._entries.items()}
        for status, table in overrides.items():
            entries.setdefault(status, {}).update({key: list(values) for key, values in table.items()})
        return RecommendationTable(entries)


class ExplanationBuilder:
    """Derive human-readable rationale from per-criterion results."""

    def __init__(
        self,
        *,
        config: ExplanationConfig | None = None,
        table: RecommendationTable | None = None,
    ) -> None:
        self._config = config or ExplanationConfig()
        base = table or RecommendationTable.load(self._config.recommendations_path)
        if self._config.recommendations:
            base = base.merged(self._config.recommendations)
        self._table = base

    def explain(
        self,
        criteria: Iterable[Criterion],
        results: Iterable[CriterionResult],
        classification: Classification,
        category_scores: Mapping[Category, int],
        category_weights: Mapping[str, float],
    ) -> Explanation:
        criteria = list(criteria)
        by_id = {result.criterion_id: result for result in results}
        pairs = [(criterion, by_id[criterion.id]) for criterion in criteria if criterion.id in by_id]

        strengths = sorted(
            (
                (criterion, result)
                for criterion, result in pairs
                if result.met and result.score >= self._config.strength_min_score
            ),
            key=lambda pair: pair[0].weight * pair[1].score,
            reverse=True,
        )[: self._config.strengths_top_n]

        concerns = [
            f"{criterion.name}: partially satisfied ({result.score}%)"
            for criterion, result in pairs
            if result.met and self._config.concern_min_score <= result.score < self._config.strength_min_score
        ]

        red_flags: list[str] = []
        for criterion, result in pairs:
            if criterion.kind is CriterionKind.REQUIRED and not result.met:
                red_flags.append(f"Required criterion not met: {criterion.name} ({result.reasoning})")
            if self._is_risky(criterion):
                red_flags.append(f"Compliance review needed for '{criterion.name}'")

        weakest = self._weakest_category(criteria, category_scores, category_weights)
        recommendations = self._table.lookup(
            classification.status.value,
            weakest.value if weakest else None,
        )
        if classification.review_required:
            recommendations.extend(self._table.lookup(REVIEW_KEY, weakest.value if weakest else None))

        return Explanation(
            strengths=tuple(f"{criterion.name}: {result.reasoning}" for criterion, result in strengths),
            concerns=tuple(concerns),
            red_flags=tuple(red_flags),
            recommendations=tuple(_unique(recommendations)),
        )

    def _is_risky(self, criterion: Criterion) -> bool:
        return any(tag.lower() in self._config.risk_tags for tag in criterion.tags)

    @staticmethod
    def _weakest_category(
        criteria: list[Criterion],
        category_scores: Mapping[Category, int],
        category_weights: Mapping[str, float],
    ) -> Category | None:
        scored = {criterion.category for criterion in criteria}
        ranked = [
            (category_scores[category], -category_weights.get(category.value, 0.0), index, category)
            for index, category in enumerate(Category)
            if category in scored
            and category in category_scores
            and category_weights.get(category.value, 0.0) > 0
        ]
        if not ranked:
            return None
        return min(ranked)[3]


def _unique(items: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered
