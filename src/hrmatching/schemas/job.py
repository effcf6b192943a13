from __future__ import annotations

import math
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from ..errors import InvalidCriteriaSet
from .predicate import Predicate

WEIGHT_TOTAL = 100.0
_WEIGHT_TOLERANCE = 1e-6

# Names used by older criteria documents.
CATEGORY_ALIASES: dict[str, str] = {
    "soft_skills": "cultural",
    "soft": "cultural",
    "technical": "skills",
}


class Category(str, Enum):
    SKILLS = "skills"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    LOCATION = "location"
    ACCESSIBILITY = "accessibility"
    CULTURAL = "cultural"

    @classmethod
    def parse(cls, value: "str | Category") -> "Category":
        if isinstance(value, Category):
            return value
        key = str(value).strip().lower()
        return cls(CATEGORY_ALIASES.get(key, key))


class CriterionKind(str, Enum):
    REQUIRED = "required"
    PREFERRED = "preferred"
    BONUS = "bonus"


class Criterion(BaseModel):
    """Single testable rule contributing to a category score."""

    id: str
    name: str
    kind: CriterionKind = CriterionKind.PREFERRED
    weight: float = Field(ge=0, le=100)
    category: Category
    condition: Predicate
    description: str = ""
    tags: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("category", mode="before")
    @classmethod
    def _alias_category(cls, value: Any) -> Any:
        if isinstance(value, str):
            return CATEGORY_ALIASES.get(value.strip().lower(), value.strip().lower())
        return value

    @property
    def is_required(self) -> bool:
        return self.kind is CriterionKind.REQUIRED


class JobCriteriaSet(BaseModel):
    """Ordered criteria for one job plus the category weighting."""

    job_id: str
    title: str | None = None
    version: int = Field(default=1, ge=1)
    criteria: list[Criterion] = Field(default_factory=list)
    category_weights: dict[str, float]
    attributes: dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @field_validator("category_weights", mode="before")
    @classmethod
    def _alias_weights(cls, value: Any) -> Any:
        if not isinstance(value, dict):
            return value
        merged: dict[str, Any] = {}
        for key, weight in value.items():
            name = str(getattr(key, "value", key)).strip().lower()
            name = CATEGORY_ALIASES.get(name, name)
            if name in merged and isinstance(weight, (int, float)):
                merged[name] = merged[name] + weight
            else:
                merged[name] = weight
        return merged

    @model_validator(mode="after")
    def _check_structure(self) -> "JobCriteriaSet":
        problems: list[str] = []
        known = {category.value for category in Category}
        for key, weight in self.category_weights.items():
            if key not in known:
                problems.append(f"unknown category '{key}' in category_weights")
            if not math.isfinite(weight):
                problems.append(f"non-finite weight for category '{key}'")
            elif weight < 0:
                problems.append(f"negative weight for category '{key}'")

        total = sum(self.category_weights.values())
        if math.isfinite(total) and abs(total - WEIGHT_TOTAL) > _WEIGHT_TOLERANCE:
            problems.append(f"category weights sum to {total:g}, expected {WEIGHT_TOTAL:g}")

        seen: set[str] = set()
        for criterion in self.criteria:
            if criterion.id in seen:
                problems.append(f"duplicate criterion id '{criterion.id}'")
            seen.add(criterion.id)

        if problems:
            raise InvalidCriteriaSet(
                f"invalid criteria set for job '{self.job_id}': {'; '.join(problems)}",
                job_id=self.job_id,
                problems=problems,
            )
        return self

    def weight_for(self, category: Category) -> float:
        return self.category_weights.get(category.value, 0.0)

    def criteria_for(self, category: Category) -> list[Criterion]:
        return [criterion for criterion in self.criteria if criterion.category is category]

    def get_criterion(self, criterion_id: str) -> Criterion | None:
        for criterion in self.criteria:
            if criterion.id == criterion_id:
                return criterion
        return None


def load_criteria_set(raw: Any) -> JobCriteriaSet:
    """Validate raw data into a criteria set, reporting every failure as InvalidCriteriaSet."""
    if not isinstance(raw, dict):
        raise InvalidCriteriaSet("criteria set must be a mapping")
    try:
        return JobCriteriaSet.model_validate(raw)
    except ValidationError as exc:
        problems = [
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        ]
        raise InvalidCriteriaSet(
            f"invalid criteria set for job '{raw.get('job_id')}': {'; '.join(problems)}",
            job_id=raw.get("job_id"),
            problems=problems,
        ) from exc
