"\"\"\"Library-facing scoring service: single, batch and cached-only reads.\"\"\""

from __future__ import annotations

import os
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Iterable, Mapping, Protocol, runtime_checkable

import structlog

from .cache import ResultCache
from .core import Explanation, ScoringEngine, ScoringResult
from .errors import UnknownCandidate
from .registry import CriteriaSetStore
from .schemas import CandidateProfile, JobCriteriaSet


@runtime_checkable
class CandidateRepository(Protocol):
    """Source of fully loaded candidate profiles."""

    def get(self, candidate_id: str) -> CandidateProfile:
        """Return the profile or raise ``UnknownCandidate``."""


class InMemoryCandidateRepository:
    """Dict-backed candidate repository."""

    def __init__(self, candidates: Iterable[CandidateProfile] = ()):
        self._candidates = {candidate.candidate_id: candidate for candidate in candidates}

    def get(self, candidate_id: str) -> CandidateProfile:
        try:
            return self._candidates[candidate_id]
        except KeyError as exc:
            raise UnknownCandidate(candidate_id) from exc

    def put(self, candidate: CandidateProfile) -> None:
        self._candidates[candidate.candidate_id] = candidate

    def ids(self) -> list[str]:
        return list(self._candidates)


def default_max_workers() -> int:
    return os.cpu_count() or 1


class MatchingService:
    """Scores candidates against jobs through the shared result cache."""

    def __init__(
        self,
        *,
        engine: ScoringEngine,
        cache: ResultCache,
        candidates: CandidateRepository,
        criteria: CriteriaSetStore,
        max_workers: int | None = None,
    ) -> None:
        self._engine = engine
        self._cache = cache
        self._candidates = candidates
        self._criteria = criteria
        self._max_workers = max_workers or default_max_workers()
        self._logger = structlog.get_logger(__name__)
        criteria.subscribe(self._on_criteria_changed)

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def evaluate_one(self, candidate_id: str, job_id: str) -> ScoringResult:
        job = self._criteria.get(job_id)
        candidate = self._candidates.get(candidate_id)
        return self._evaluate(candidate, job)

    def evaluate_batch(
        self,
        candidate_ids: Iterable[str],
        job_id: str,
        *,
        cancel_event: threading.Event | None = None,
    ) -> list[ScoringResult]:
        """Score many candidates for one job on a bounded worker pool.

        At most ``max_workers`` pairs are in flight. Once ``cancel_event`` is
        set no further pairs are submitted; pairs already running complete.
        Results follow the input order and cover every pair that ran.
        """
        job = self._criteria.get(job_id)
        candidates = [self._candidates.get(candidate_id) for candidate_id in candidate_ids]
        cancel_event = cancel_event or threading.Event()

        self._logger.info(
            "batch.started",
            job_id=job_id,
            criteria_set_version=job.version,
            candidate_count=len(candidates),
            max_workers=self._max_workers,
        )

        results: dict[int, ScoringResult] = {}
        pending: dict[Future, int] = {}
        queue = iter(enumerate(candidates))
        submitted = 0

        with ThreadPoolExecutor(max_workers=self._max_workers) as executor:

            def fill() -> None:
                nonlocal submitted
                while len(pending) < self._max_workers and not cancel_event.is_set():
                    try:
                        index, candidate = next(queue)
                    except StopIteration:
                        return
                    pending[executor.submit(self._evaluate, candidate, job)] = index
                    submitted += 1

            fill()
            while pending:
                done, _ = wait(list(pending), return_when=FIRST_COMPLETED)
                for future in done:
                    index = pending.pop(future)
                    results[index] = future.result()
                fill()

        if cancel_event.is_set() and submitted < len(candidates):
            self._logger.warning(
                "batch.cancelled",
                job_id=job_id,
                completed=len(results),
                skipped=len(candidates) - submitted,
            )
        self._logger.info("batch.completed", job_id=job_id, completed=len(results))
        return [results[index] for index in sorted(results)]

    def explain_only(self, candidate_id: str, job_id: str) -> Explanation | None:
        """Explanation of the cached result for the current criteria version, if any."""
        cached = self._cached(candidate_id, job_id)
        return cached.explanation if cached else None

    def summarize_only(self, candidate_id: str, job_id: str) -> Mapping[str, object] | None:
        """Summary of the cached result for the current criteria version, if any."""
        cached = self._cached(candidate_id, job_id)
        return cached.summary() if cached else None

    def invalidate_candidate(self, candidate_id: str) -> int:
        """Signal that a candidate profile changed; drops all its cached results."""
        return self._cache.invalidate(candidate_id=candidate_id)

    def _cached(self, candidate_id: str, job_id: str) -> ScoringResult | None:
        job = self._criteria.get(job_id)
        return self._cache.peek(candidate_id, job_id, job.version)

    def _evaluate(self, candidate: CandidateProfile, job: JobCriteriaSet) -> ScoringResult:
        result = self._cache.get_or_compute(
            candidate.candidate_id,
            job.job_id,
            job.version,
            lambda: self._engine.evaluate(candidate=candidate, job=job),
        )
        self._logger.info(
            "scoring.result",
            candidate_id=result.candidate_id,
            job_id=result.job_id,
            status=result.status.value,
            overall_score=result.overall_score,
            review_required=result.review_required,
            criteria_set_version=result.criteria_set_version,
        )
        return result

    def _on_criteria_changed(self, criteria_set: JobCriteriaSet) -> None:
        self._cache.invalidate(job_id=criteria_set.job_id)
