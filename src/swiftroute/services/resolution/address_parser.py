"""Free-text address resolution backed by a Gemini model."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from pydantic import TypeAdapter, ValidationError

from ...config import settings
from ...models.domain import Coordinate, Priority, Stop
from ...schemas.estimation import BULK_ADDRESS_SCHEMA, PARSED_ADDRESS_SCHEMA, ParsedAddressPayload
from ..estimation.gemini_client import GeminiClient, GeminiError

logger = logging.getLogger(__name__)

_BULK_ADAPTER = TypeAdapter(list[ParsedAddressPayload])


class AddressResolutionError(RuntimeError):
    """Raised when free text could not be turned into a stop location."""


@dataclass(frozen=True, slots=True)
class ResolvedAddress:
    customer_name: str
    address: str
    coords: Coordinate

    def to_stop(self, priority: Priority = Priority.MEDIUM) -> Stop:
        return Stop(
            customer_name=self.customer_name,
            address=self.address,
            coords=self.coords,
            priority=priority,
        )


class AddressResolver(Protocol):
    async def parse_address(self, text: str) -> ResolvedAddress:
        ...

    async def bulk_parse_addresses(self, text: str) -> list[ResolvedAddress]:
        ...


def _to_resolved(payload: ParsedAddressPayload) -> ResolvedAddress:
    return ResolvedAddress(
        customer_name=payload.customerName.strip(),
        address=payload.address.strip(),
        coords=Coordinate(payload.coords.lat, payload.coords.lng),
    )


class GeminiAddressResolver:
    def __init__(self, client: GeminiClient | None = None) -> None:
        self._client = client

    @property
    def client(self) -> GeminiClient:
        if self._client is None:
            self._client = GeminiClient()
        return self._client

    async def parse_address(self, text: str) -> ResolvedAddress:
        if not text or not text.strip():
            raise ValueError("Address input must not be empty.")
        prompt = f'Parse this delivery stop input and extract information.\nInput: "{text.strip()}"'
        try:
            raw = await self.client.generate_json(prompt, schema=PARSED_ADDRESS_SCHEMA)
            return _to_resolved(ParsedAddressPayload.model_validate(raw))
        except (GeminiError, ValidationError, ValueError) as exc:
            raise AddressResolutionError(f"Could not resolve address '{text.strip()}': {exc}") from exc

    async def bulk_parse_addresses(self, text: str) -> list[ResolvedAddress]:
        if not text or not text.strip():
            return []
        prompt = (
            "Parse unstructured address blocks into structured stops. GPS near Los Angeles.\n"
            f'Input Text: "{text.strip()}"'
        )
        try:
            raw = await self.client.generate_json(
                prompt,
                schema=BULK_ADDRESS_SCHEMA,
                temperature=settings.bulk_parse_temperature,
            )
            parsed = _BULK_ADAPTER.validate_python(raw)
            resolved = [_to_resolved(item) for item in parsed]
        except (GeminiError, ValidationError, ValueError) as exc:
            raise AddressResolutionError(f"Bulk address parsing failed: {exc}") from exc
        logger.info(f"Bulk parse resolved {len(resolved)} address(es)")
        return resolved
