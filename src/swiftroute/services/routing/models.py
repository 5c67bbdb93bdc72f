"""Routing domain models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ...models.domain import Stop, TrafficCondition


@dataclass(frozen=True, slots=True)
class EtaAnnotation:
    stop_id: str
    eta: str
    traffic: TrafficCondition


@dataclass(slots=True)
class RouteAnalysis:
    summary: str
    etas: List[EtaAnnotation] = field(default_factory=list)


class RecomputePhase(str, Enum):
    IDLE = "idle"
    SEQUENCING = "sequencing"
    ESTIMATING = "estimating"
    MERGING = "merging"
    DONE = "done"


@dataclass(slots=True)
class RecomputeResult:
    generation: int
    stops: List[Stop]
    summary: Optional[str]
    annotated: bool
    stale: bool = False
