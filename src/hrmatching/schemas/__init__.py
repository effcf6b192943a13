"\"\"\"Pydantic schema definitions for candidates, criteria and predicates.\"\"\""

from __future__ import annotations

from .candidate import AccessibilityInfo, CandidateProfile, SkillEntry, SoftSkills
from .config import AppConfig, load_config
from .job import (
    Category,
    Criterion,
    CriterionKind,
    JobCriteriaSet,
    load_criteria_set,
)
from .predicate import (
    AllNode,
    AnyNode,
    CompareNode,
    MembershipNode,
    MentionsNode,
    Predicate,
    SkillNode,
    describe,
    referenced_fields,
)

__all__ = [
    "AccessibilityInfo",
    "CandidateProfile",
    "SkillEntry",
    "SoftSkills",
    "AppConfig",
    "load_config",
    "Category",
    "Criterion",
    "CriterionKind",
    "JobCriteriaSet",
    "load_criteria_set",
    "Predicate",
    "CompareNode",
    "SkillNode",
    "MembershipNode",
    "MentionsNode",
    "AllNode",
    "AnyNode",
    "describe",
    "referenced_fields",
]
