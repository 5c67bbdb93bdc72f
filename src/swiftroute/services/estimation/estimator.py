"""Route ETA/traffic estimation collaborators."""

from __future__ import annotations

import json
import logging
from typing import Literal, Protocol, Sequence

from pydantic import ValidationError

from ...config import settings
from ...models.domain import Stop
from ...schemas.estimation import ROUTE_ANALYSIS_SCHEMA, RouteAnalysisPayload
from ..routing.models import EtaAnnotation, RouteAnalysis
from .gemini_client import GeminiClient, GeminiError

logger = logging.getLogger(__name__)

Language = Literal["en", "es", "de"]

LANGUAGE_NAMES: dict[str, str] = {
    "en": "English",
    "es": "Spanish",
    "de": "German",
}

SYSTEM_INSTRUCTION = (
    "You are an expert logistics coordinator and traffic analyst. "
    "Provide precise ETAs and realistic traffic assessments."
)


class EstimationError(RuntimeError):
    """Raised when no usable annotations could be obtained for a route."""


class RouteEstimator(Protocol):
    async def analyze_route(self, stops: Sequence[Stop], start_time: str) -> RouteAnalysis:
        ...


def build_manifest(stops: Sequence[Stop]) -> list[dict]:
    """Describe the ordered stops the way the estimator expects them (1-based index)."""

    return [
        {
            "id": stop.stop_id,
            "name": stop.customer_name,
            "address": stop.address,
            "priority": stop.priority.value,
            "index": position,
        }
        for position, stop in enumerate(stops, start=1)
    ]


def build_prompt(stops: Sequence[Stop], start_time: str, language: str) -> str:
    manifest = json.dumps(build_manifest(stops))
    language_name = LANGUAGE_NAMES.get(language, LANGUAGE_NAMES["en"])
    return (
        "Analyze this delivery route.\n"
        f"1. Calculate an Estimated Time of Arrival (ETA) for each stop starting from {start_time} at the Depot.\n"
        "2. Assign a traffic condition ('light', 'moderate', or 'heavy') for the leg leading to each stop "
        "based on simulated time-of-day traffic.\n"
        f"3. IMPORTANT: Provide the 'summary' text in the following language: {language_name}.\n\n"
        f"Route manifest:\n{manifest}"
    )


def parse_analysis(raw: object) -> RouteAnalysis:
    try:
        payload = RouteAnalysisPayload.model_validate(raw)
    except ValidationError as exc:
        raise EstimationError(f"Estimator returned a malformed analysis: {exc.error_count()} error(s)") from exc
    return RouteAnalysis(
        summary=payload.summary,
        etas=[EtaAnnotation(stop_id=item.id, eta=item.eta, traffic=item.traffic) for item in payload.etas],
    )


class GeminiRouteEstimator:
    """Asks a Gemini model for per-stop ETAs, traffic conditions and a route summary."""

    def __init__(
        self,
        client: GeminiClient | None = None,
        *,
        language: Language | None = None,
        temperature: float | None = None,
    ) -> None:
        self._client = client
        self.language = language or settings.default_language
        self.temperature = temperature if temperature is not None else settings.estimator_temperature

    @property
    def client(self) -> GeminiClient:
        if self._client is None:
            self._client = GeminiClient()
        return self._client

    async def analyze_route(self, stops: Sequence[Stop], start_time: str) -> RouteAnalysis:
        prompt = build_prompt(stops, start_time, self.language)
        logger.info(f"Requesting route analysis for {len(stops)} stop(s) starting {start_time}")
        try:
            raw = await self.client.generate_json(
                prompt,
                schema=ROUTE_ANALYSIS_SCHEMA,
                system_instruction=SYSTEM_INSTRUCTION,
                temperature=self.temperature,
            )
        except (GeminiError, ValueError) as exc:
            raise EstimationError(str(exc)) from exc
        return parse_analysis(raw)
