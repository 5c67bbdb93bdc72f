"""Routing orchestration service.

``RouteOrchestrator`` re-sequences a stop set, asks an estimator for
per-stop ETAs and merges them back. Every invocation takes a generation
token; when an older invocation finishes after a newer one started, its
result is discarded instead of replacing the published route.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from ...models.domain import Coordinate, Stop
from ..estimation.estimator import EstimationError, RouteEstimator
from .merge import clear_annotations, merge_annotations
from .models import RecomputePhase, RecomputeResult
from .sequencer import ensure_unique_ids, sequence_stops

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PublishedRoute:
    """Last result accepted by the orchestrator."""

    generation: int = 0
    stops: list[Stop] = field(default_factory=list)
    summary: Optional[str] = None


class RouteOrchestrator:
    """Single entry point for recomputing a route after any stop or depot change.

    Callers are expected to serialise mutations of the stop set relative to
    recompute triggers; the orchestrator only arbitrates between overlapping
    estimator round-trips.
    """

    def __init__(self) -> None:
        self._generations = itertools.count(1)
        self._latest_generation = 0
        self._phase = RecomputePhase.IDLE
        self._published = PublishedRoute()

    @property
    def in_progress(self) -> bool:
        return self._phase not in (RecomputePhase.IDLE, RecomputePhase.DONE)

    @property
    def phase(self) -> RecomputePhase:
        return self._phase

    @property
    def latest_generation(self) -> int:
        return self._latest_generation

    @property
    def published(self) -> PublishedRoute:
        return self._published

    def _next_generation(self) -> int:
        generation = next(self._generations)
        self._latest_generation = generation
        return generation

    def _is_current(self, generation: int) -> bool:
        return generation == self._latest_generation

    def _set_phase(self, generation: int, phase: RecomputePhase) -> None:
        if self._is_current(generation):
            self._phase = phase

    async def recompute(
        self,
        stops: Iterable[Stop],
        depot: Coordinate,
        start_time: str,
        estimator: RouteEstimator,
    ) -> RecomputeResult:
        """Sequence ``stops`` from ``depot`` and annotate them with estimator output."""

        generation = self._next_generation()
        self._set_phase(generation, RecomputePhase.SEQUENCING)
        try:
            ordered = sequence_stops(depot, stops)
        except Exception:
            self._set_phase(generation, RecomputePhase.IDLE)
            raise
        return await self._estimate_and_publish(generation, ordered, start_time, estimator)

    async def reorder(
        self,
        ordered_stops: Sequence[Stop],
        start_time: str,
        estimator: RouteEstimator,
    ) -> RecomputeResult:
        """Annotate a caller-supplied order (manual drag and drop) without re-sequencing."""

        generation = self._next_generation()
        try:
            ensure_unique_ids(ordered_stops)
        except ValueError:
            self._set_phase(generation, RecomputePhase.IDLE)
            raise
        return await self._estimate_and_publish(generation, list(ordered_stops), start_time, estimator)

    async def _estimate_and_publish(
        self,
        generation: int,
        ordered: list[Stop],
        start_time: str,
        estimator: RouteEstimator,
    ) -> RecomputeResult:
        baseline = clear_annotations(ordered)
        if not baseline:
            return self._publish(RecomputeResult(generation=generation, stops=[], summary=None, annotated=False))

        self._set_phase(generation, RecomputePhase.ESTIMATING)
        try:
            analysis = await estimator.analyze_route(baseline, start_time)
        except Exception as exc:
            # Every estimator failure degrades to the unannotated order.
            if isinstance(exc, EstimationError):
                logger.warning(f"Route estimation failed, keeping unannotated order: {exc}")
            else:
                logger.warning(f"Unexpected estimator error, keeping unannotated order: {exc!r}")
            return self._publish(
                RecomputeResult(generation=generation, stops=baseline, summary=None, annotated=False)
            )

        if not self._is_current(generation):
            return self._publish(
                RecomputeResult(generation=generation, stops=baseline, summary=None, annotated=False)
            )

        self._set_phase(generation, RecomputePhase.MERGING)
        merged = merge_annotations(baseline, analysis.etas)
        return self._publish(
            RecomputeResult(generation=generation, stops=merged, summary=analysis.summary, annotated=True)
        )

    def _publish(self, result: RecomputeResult) -> RecomputeResult:
        if not self._is_current(result.generation):
            logger.debug(
                f"Discarding stale route result generation={result.generation} "
                f"latest={self._latest_generation}"
            )
            result.stale = True
            return result
        self._published = PublishedRoute(
            generation=result.generation,
            stops=list(result.stops),
            summary=result.summary,
        )
        self._phase = RecomputePhase.DONE
        return result
