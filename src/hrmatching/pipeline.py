"\"\"\"File-based scoring pipeline assembly and execution.\"\"\""

from __future__ import annotations

import json
import threading
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Any

import pendulum
import structlog
import yaml
from pydantic import ValidationError

from . import __version__
from .cache import ResultCache
from .core import ScoringEngine, ScoringResult
from .errors import InvalidCriteriaSet, UnknownCandidate
from .registry import CriteriaSetStore, CriterionRegistry
from .reporting import status_counts
from .schemas import CandidateProfile, JobCriteriaSet, load_criteria_set
from .service import InMemoryCandidateRepository, MatchingService


class CandidateLoadError(ValueError):
    """Raised when candidate loading encounters invalid records."""

    def __init__(self, errors: list[str], partial: list[CandidateProfile]):
        super().__init__("Candidate loading failed")
        self.errors = errors
        self.partial = partial

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Candidate loading failed: {self.errors}"


class CandidateLoader:
    """Load candidate profiles from JSON lines."""

    def load(self, path: Path) -> list[CandidateProfile]:
        candidates: list[CandidateProfile] = []
        errors: list[str] = []
        seen: set[str] = set()
        with path.open("r", encoding="utf-8") as handle:
            for idx, line in enumerate(handle, start=1):
                raw = line.strip()
                if not raw:
                    continue
                try:
                    record = json.loads(raw)
                except json.JSONDecodeError as exc:
                    errors.append(f"line {idx}: invalid JSON ({exc})")
                    continue
                if not isinstance(record, dict):
                    errors.append(f"line {idx}: expected a JSON object")
                    continue
                payload = record.get("payload", record)
                try:
                    candidate = CandidateProfile.model_validate(payload)
                except ValidationError as exc:
                    errors.append(f"line {idx}: {exc.error_count()} validation error(s): {exc.errors()[0]['msg']}")
                    continue
                if candidate.candidate_id in seen:
                    errors.append(f"line {idx}: duplicate candidate_id '{candidate.candidate_id}'")
                    continue
                seen.add(candidate.candidate_id)
                candidates.append(candidate)
        if errors:
            raise CandidateLoadError(errors, candidates)
        return candidates


class CriteriaLoader:
    """Load a job criteria set from JSON or YAML.

    A document may instead reference a registry template:
    ``{"job_id": ..., "template": "dev-fullstack", "attributes": {...}}``.
    """

    def __init__(self, registry: CriterionRegistry | None = None):
        self._registry = registry

    def load(self, path: Path) -> JobCriteriaSet:
        with path.open("r", encoding="utf-8") as handle:
            try:
                if path.suffix.lower() in (".yaml", ".yml"):
                    data = yaml.safe_load(handle)
                else:
                    data = json.load(handle)
            except (json.JSONDecodeError, yaml.YAMLError) as exc:
                raise InvalidCriteriaSet(f"Invalid criteria file {path.name}: {exc}") from exc

        if isinstance(data, dict) and "template" in data:
            registry = self._registry or CriterionRegistry.builtin()
            try:
                return registry.instantiate(
                    data["template"],
                    data.get("job_id") or data["template"],
                    title=data.get("title"),
                    category_weights=data.get("category_weights"),
                    attributes=data.get("attributes"),
                )
            except KeyError as exc:
                raise InvalidCriteriaSet(str(exc)) from exc
        return load_criteria_set(data)


class OutputWriter:
    """Persist scoring results."""

    def write(self, path: Path, payload: dict | list[dict]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps(payload, ensure_ascii=False, indent=2, default=_json_default),
            encoding="utf-8",
        )


class ScoringPipeline:
    """End-to-end scoring orchestrator for file inputs.

    Criteria sets and profiles loaded by successive runs are kept, so a run
    whose criteria file changed scores against a bumped version and a
    changed profile has its cached results dropped before it is scored.
    """

    def __init__(
        self,
        *,
        engine: ScoringEngine,
        cache: ResultCache | None = None,
        candidate_loader: CandidateLoader | None = None,
        criteria_loader: CriteriaLoader | None = None,
        writer: OutputWriter | None = None,
        max_workers: int | None = None,
    ) -> None:
        self._cache = cache or ResultCache()
        self._candidates = candidate_loader or CandidateLoader()
        self._criteria = criteria_loader or CriteriaLoader()
        self._writer = writer or OutputWriter()
        self._store = CriteriaSetStore()
        self._repository = InMemoryCandidateRepository()
        self._service = MatchingService(
            engine=engine,
            cache=self._cache,
            candidates=self._repository,
            criteria=self._store,
            max_workers=max_workers,
        )
        self._logger = structlog.get_logger(__name__)

    def run(
        self,
        *,
        candidates_path: Path,
        criteria_path: Path,
        output_path: Path,
        audit_logger: "AuditLogger | None" = None,
        cancel_event: threading.Event | None = None,
    ) -> list[dict]:
        loaded = self._criteria.load(criteria_path)
        load_errors: list[str] = []
        try:
            candidates = self._candidates.load(candidates_path)
        except CandidateLoadError as exc:
            candidates = exc.partial
            load_errors.extend(exc.errors)
            self._logger.warning("candidates.partial_load", errors=exc.errors)

        job = self._register_job(loaded)
        for candidate in candidates:
            self._register_candidate(candidate)

        results = self._service.evaluate_batch(
            [candidate.candidate_id for candidate in candidates],
            job.job_id,
            cancel_event=cancel_event,
        )

        serialized_results: list[dict] = []
        for result in results:
            serialized_results.append(serialize_result(result))
            if audit_logger:
                audit_logger.append(result.summary() | {"red_flags": list(result.red_flags)})

        metadata = {
            "job_id": job.job_id,
            "criteria_set_version": job.version,
            "candidate_count": len(candidates),
            "scored_count": len(results),
            "status_counts": status_counts(results),
            "errors": load_errors,
            "timestamp": pendulum.now().to_iso8601_string(),
            "app_version": __version__,
        }
        self._writer.write(output_path, {"metadata": metadata, "results": serialized_results})
        return serialized_results

    def _register_job(self, loaded: JobCriteriaSet) -> JobCriteriaSet:
        if loaded.job_id not in self._store.job_ids():
            # the cache may be shared with pipelines that stored another set under this id
            self._cache.invalidate(job_id=loaded.job_id)
        return self._store.put(loaded)

    def _register_candidate(self, candidate: CandidateProfile) -> None:
        try:
            previous = self._repository.get(candidate.candidate_id)
        except UnknownCandidate:
            previous = None
        if previous is not None and previous != candidate:
            self._service.invalidate_candidate(candidate.candidate_id)
        self._repository.put(candidate)


def serialize_result(result: ScoringResult) -> dict[str, Any]:
    return json.loads(json.dumps(asdict(result), default=_json_default, ensure_ascii=False))


def _json_default(value):  # type: ignore[override]
    if isinstance(value, pendulum.DateTime):
        return value.to_iso8601_string()
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class AuditLogger:
    """Append-only audit logger writing JSON lines."""

    def __init__(self, path: Path):
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def append(self, record: dict) -> None:
        line = json.dumps(record, ensure_ascii=False, default=_json_default)
        with self._lock, self._path.open("a", encoding="utf-8") as handle:
            handle.write(line)
            handle.write("\n")
