"""Attach estimator ETA/traffic annotations to a stop sequence."""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Sequence

from ...models.domain import Stop
from .models import EtaAnnotation


def merge_annotations(sequence: Sequence[Stop], annotations: Iterable[EtaAnnotation] | None) -> list[Stop]:
    """Return copies of ``sequence`` with matching annotations applied by stop id.

    Order and membership are unchanged. Stops without a matching annotation
    keep their current fields. When the same id appears more than once in
    ``annotations`` the last entry wins.
    """

    lookup = {annotation.stop_id: annotation for annotation in annotations or ()}
    merged: list[Stop] = []
    for stop in sequence:
        annotation = lookup.get(stop.stop_id)
        if annotation is None:
            merged.append(replace(stop))
            continue
        merged.append(replace(stop, estimated_time=annotation.eta, traffic_condition=annotation.traffic))
    return merged


def clear_annotations(sequence: Sequence[Stop]) -> list[Stop]:
    return [replace(stop, estimated_time=None, traffic_condition=None) for stop in sequence]
