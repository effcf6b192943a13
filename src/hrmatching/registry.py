"\"\"\"Criteria templates and the versioned per-job criteria store.\"\"\""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import ConfigManager, load_yaml
from .errors import InvalidCriteriaSet, UnknownJob
from .schemas import Category, Criterion, JobCriteriaSet, load_criteria_set


class CriteriaTemplate(BaseModel):
    """Reusable, named group of criteria with a default category weighting."""

    id: str
    name: str
    description: str = ""
    job_type: str | None = None
    category_weights: dict[str, float]
    criteria: list[Criterion] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)


class CriterionRegistry:
    """Holds criteria templates grouped by category."""

    def __init__(self, templates: Iterable[CriteriaTemplate] = ()):
        self._templates: dict[str, CriteriaTemplate] = {}
        for template in templates:
            self.register(template)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "CriterionRegistry":
        raw_templates = data.get("templates") or []
        try:
            templates = [CriteriaTemplate.model_validate(item) for item in raw_templates]
        except ValidationError as exc:
            raise InvalidCriteriaSet(f"invalid criteria template: {exc}") from exc
        return cls(templates)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "CriterionRegistry":
        return cls.from_mapping(load_yaml(path))

    @classmethod
    def builtin(cls) -> "CriterionRegistry":
        return cls.from_mapping(ConfigManager().load("templates"))

    def register(self, template: CriteriaTemplate) -> None:
        # validate the template's weighting the same way a job's set is validated
        JobCriteriaSet(
            job_id=f"template:{template.id}",
            criteria=template.criteria,
            category_weights=template.category_weights,
        )
        self._templates[template.id] = template

    def get(self, template_id: str) -> CriteriaTemplate:
        try:
            return self._templates[template_id]
        except KeyError as exc:
            raise KeyError(f"Unknown criteria template: {template_id!r}") from exc

    def templates(self) -> list[CriteriaTemplate]:
        return list(self._templates.values())

    def by_category(self, template_id: str) -> dict[Category, list[Criterion]]:
        template = self.get(template_id)
        grouped: dict[Category, list[Criterion]] = {category: [] for category in Category}
        for criterion in template.criteria:
            grouped[criterion.category].append(criterion)
        return grouped

    def instantiate(
        self,
        template_id: str,
        job_id: str,
        *,
        title: str | None = None,
        category_weights: Mapping[str, float] | None = None,
        attributes: Mapping[str, Any] | None = None,
    ) -> JobCriteriaSet:
        template = self.get(template_id)
        return JobCriteriaSet(
            job_id=job_id,
            title=title or template.name,
            criteria=list(template.criteria),
            category_weights=dict(category_weights or template.category_weights),
            attributes=dict(attributes or {}),
        )


CriteriaListener = Callable[[JobCriteriaSet], None]


class CriteriaSetStore:
    """Criteria sets per job with CRUD that bumps the version on every change.

    A version bump is the only invalidation signal for cached results;
    listeners registered with :meth:`subscribe` are told about every new
    version. Rejected changes leave the stored set untouched.
    """

    def __init__(self, sets: Iterable[JobCriteriaSet] = ()):
        self._sets: dict[str, JobCriteriaSet] = {}
        self._listeners: list[CriteriaListener] = []
        self._lock = threading.RLock()
        self._logger = structlog.get_logger(__name__)
        for criteria_set in sets:
            self._sets[criteria_set.job_id] = criteria_set

    def subscribe(self, listener: CriteriaListener) -> None:
        self._listeners.append(listener)

    def get(self, job_id: str) -> JobCriteriaSet:
        try:
            return self._sets[job_id]
        except KeyError as exc:
            raise UnknownJob(job_id) from exc

    def job_ids(self) -> list[str]:
        return list(self._sets)

    def put(self, criteria_set: JobCriteriaSet | Mapping[str, Any]) -> JobCriteriaSet:
        """Store a criteria set; replacing an existing one bumps its version.

        Putting a set whose content matches the stored one (ignoring the
        version) keeps the stored set and notifies nobody.
        """
        if not isinstance(criteria_set, JobCriteriaSet):
            criteria_set = load_criteria_set(dict(criteria_set))
        with self._lock:
            current = self._sets.get(criteria_set.job_id)
            if current is None:
                self._sets[criteria_set.job_id] = criteria_set
                return criteria_set
            payload = criteria_set.model_dump(mode="python")
            if payload | {"version": current.version} == current.model_dump(mode="python"):
                return current
            payload["version"] = max(current.version, criteria_set.version) + 1
            return self._commit(current.job_id, payload, change="replace")

    def add_criterion(self, job_id: str, criterion: Criterion | Mapping[str, Any]) -> JobCriteriaSet:
        with self._lock:
            payload = self.get(job_id).model_dump(mode="python")
            payload["criteria"].append(_criterion_payload(criterion))
            return self._bump(job_id, payload, change="add_criterion")

    def update_criterion(
        self,
        job_id: str,
        criterion_id: str,
        changes: Mapping[str, Any],
    ) -> JobCriteriaSet:
        with self._lock:
            payload = self.get(job_id).model_dump(mode="python")
            for index, item in enumerate(payload["criteria"]):
                if item["id"] == criterion_id:
                    updated = dict(item)
                    updated.update(changes)
                    payload["criteria"][index] = updated
                    break
            else:
                raise InvalidCriteriaSet(
                    f"criterion '{criterion_id}' not found in job '{job_id}'",
                    job_id=job_id,
                )
            return self._bump(job_id, payload, change="update_criterion")

    def remove_criterion(self, job_id: str, criterion_id: str) -> JobCriteriaSet:
        with self._lock:
            payload = self.get(job_id).model_dump(mode="python")
            remaining = [item for item in payload["criteria"] if item["id"] != criterion_id]
            if len(remaining) == len(payload["criteria"]):
                raise InvalidCriteriaSet(
                    f"criterion '{criterion_id}' not found in job '{job_id}'",
                    job_id=job_id,
                )
            payload["criteria"] = remaining
            return self._bump(job_id, payload, change="remove_criterion")

    def set_category_weights(self, job_id: str, weights: Mapping[str, float]) -> JobCriteriaSet:
        with self._lock:
            payload = self.get(job_id).model_dump(mode="python")
            payload["category_weights"] = dict(weights)
            return self._bump(job_id, payload, change="set_category_weights")

    def _bump(self, job_id: str, payload: dict[str, Any], *, change: str) -> JobCriteriaSet:
        payload["version"] = payload["version"] + 1
        return self._commit(job_id, payload, change=change)

    def _commit(self, job_id: str, payload: dict[str, Any], *, change: str) -> JobCriteriaSet:
        updated = load_criteria_set(payload)
        self._sets[job_id] = updated
        self._logger.info("criteria.updated", job_id=job_id, version=updated.version, change=change)
        for listener in list(self._listeners):
            listener(updated)
        return updated


def _criterion_payload(criterion: Criterion | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(criterion, Criterion):
        return criterion.model_dump(mode="python")
    return dict(criterion)
