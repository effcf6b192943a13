"\"\"\"Memoization of scoring results per (candidate, job, criteria version).\"\"\""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable, NamedTuple

import structlog

from .core import ScoringResult


class CacheKey(NamedTuple):
    candidate_id: str
    job_id: str
    criteria_set_version: int


class ResultCache:
    """Thread-safe result cache with single-flight computation per key.

    Completed entries are read without taking the lock. The first caller for a
    missing key computes it; concurrent callers for the same key wait on that
    computation instead of starting their own. A failed computation is handed
    to every waiter and leaves nothing cached.
    """

    def __init__(self) -> None:
        self._results: dict[CacheKey, ScoringResult] = {}
        self._inflight: dict[CacheKey, Future] = {}
        self._lock = threading.Lock()
        self._logger = structlog.get_logger(__name__)

    def get_or_compute(
        self,
        candidate_id: str,
        job_id: str,
        criteria_set_version: int,
        compute_fn: Callable[[], ScoringResult],
    ) -> ScoringResult:
        key = CacheKey(candidate_id, job_id, criteria_set_version)
        cached = self._results.get(key)
        if cached is not None:
            return cached

        with self._lock:
            cached = self._results.get(key)
            if cached is not None:
                return cached
            pending = self._inflight.get(key)
            owner = pending is None
            if owner:
                pending = Future()
                self._inflight[key] = pending

        if not owner:
            return pending.result()

        try:
            result = compute_fn()
        except BaseException as exc:
            with self._lock:
                self._release(key, pending)
            pending.set_exception(exc)
            raise

        with self._lock:
            # an invalidation that raced this computation drops the in-flight
            # marker; in that case the result is returned but not stored
            if self._release(key, pending):
                self._results[key] = result
        pending.set_result(result)
        return result

    def _release(self, key: CacheKey, pending: Future) -> bool:
        # caller holds the lock; a newer owner's marker is left in place
        if self._inflight.get(key) is not pending:
            return False
        del self._inflight[key]
        return True

    def peek(self, candidate_id: str, job_id: str, criteria_set_version: int) -> ScoringResult | None:
        """Return a completed entry without computing anything."""
        return self._results.get(CacheKey(candidate_id, job_id, criteria_set_version))

    def latest(self, candidate_id: str, job_id: str) -> ScoringResult | None:
        """Return the cached entry with the highest criteria version for the pair."""
        with self._lock:
            matches = [
                (key.criteria_set_version, result)
                for key, result in self._results.items()
                if key.candidate_id == candidate_id and key.job_id == job_id
            ]
        if not matches:
            return None
        return max(matches, key=lambda item: item[0])[1]

    def invalidate(self, *, candidate_id: str | None = None, job_id: str | None = None) -> int:
        """Drop every entry involving the given candidate and/or job."""
        if candidate_id is None and job_id is None:
            raise ValueError("invalidate needs candidate_id or job_id")

        def involved(key: CacheKey) -> bool:
            return (candidate_id is not None and key.candidate_id == candidate_id) or (
                job_id is not None and key.job_id == job_id
            )

        with self._lock:
            stale = [key for key in self._results if involved(key)]
            for key in stale:
                del self._results[key]
            for key in [key for key in self._inflight if involved(key)]:
                del self._inflight[key]

        if stale:
            self._logger.info(
                "cache.invalidated",
                candidate_id=candidate_id,
                job_id=job_id,
                removed=len(stale),
            )
        return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._results.clear()
            self._inflight.clear()

    def __len__(self) -> int:
        return len(self._results)
