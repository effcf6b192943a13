"""Data-only predicate tree used as criterion conditions.

Conditions are plain data interpreted by the rule evaluator; nothing here is
ever executed. Nodes are discriminated by ``op``.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Comparator = Literal["gte", "gt", "lte", "lt", "eq", "ne"]


class _Node(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class CompareNode(_Node):
    """``field <comparator> value``; ordered comparators are graded."""

    op: Literal["compare"] = "compare"
    field: str
    comparator: Comparator = "gte"
    value: float | str
    target: float | None = None

    @model_validator(mode="after")
    def _check_graded(self) -> "CompareNode":
        if self.comparator not in ("eq", "ne") and isinstance(self.value, str):
            raise ValueError(f"comparator '{self.comparator}' needs a numeric value")
        return self


class SkillNode(_Node):
    """Skill presence, optionally at or above a proficiency level."""

    op: Literal["skill"] = "skill"
    name: str
    min_level: int = Field(default=0, ge=0, le=100)
    target_level: int | None = Field(default=None, ge=0, le=100)


class MembershipNode(_Node):
    """Candidate field value(s) intersect an accepted set."""

    op: Literal["membership"] = "membership"
    field: str
    values: list[str] = Field(default_factory=list)
    job_field: str | None = None

    @model_validator(mode="after")
    def _check_source(self) -> "MembershipNode":
        if not self.values and not self.job_field:
            raise ValueError("membership needs 'values' or 'job_field'")
        return self


class MentionsNode(_Node):
    """Any term appears in the candidate's free text."""

    op: Literal["mentions"] = "mentions"
    terms: list[str] = Field(min_length=1)


class AllNode(_Node):
    op: Literal["all"] = "all"
    conditions: list["Predicate"] = Field(min_length=1)


class AnyNode(_Node):
    op: Literal["any"] = "any"
    conditions: list["Predicate"] = Field(min_length=1)


Predicate = Annotated[
    Union[CompareNode, SkillNode, MembershipNode, MentionsNode, AllNode, AnyNode],
    Field(discriminator="op"),
]

AllNode.model_rebuild()
AnyNode.model_rebuild()


def describe(predicate: Predicate) -> str:
    """Render a predicate as a short human-readable expression."""
    if isinstance(predicate, CompareNode):
        symbols = {"gte": ">=", "gt": ">", "lte": "<=", "lt": "<", "eq": "==", "ne": "!="}
        return f"{predicate.field} {symbols[predicate.comparator]} {predicate.value}"
    if isinstance(predicate, SkillNode):
        if predicate.min_level:
            return f"skill {predicate.name} >= {predicate.min_level}%"
        return f"skill {predicate.name}"
    if isinstance(predicate, MembershipNode):
        accepted = list(predicate.values)
        if predicate.job_field:
            accepted.append(f"job.{predicate.job_field}")
        return f"{predicate.field} in [{', '.join(accepted)}]"
    if isinstance(predicate, MentionsNode):
        return f"mentions {' | '.join(predicate.terms)}"
    joiner = " and " if isinstance(predicate, AllNode) else " or "
    return "(" + joiner.join(describe(child) for child in predicate.conditions) + ")"


def referenced_fields(predicate: Predicate) -> set[str]:
    """Candidate fields a predicate reads."""
    if isinstance(predicate, (CompareNode, MembershipNode)):
        return {predicate.field}
    if isinstance(predicate, SkillNode):
        return {"skills"}
    if isinstance(predicate, (AllNode, AnyNode)):
        fields: set[str] = set()
        for child in predicate.conditions:
            fields |= referenced_fields(child)
        return fields
    return set()
