"""HTTP client for the Gemini generative language API."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


class GeminiError(RuntimeError):
    """Raised for any transport, HTTP or payload failure talking to Gemini."""


class GeminiClient:
    """Requests structured JSON output from a Gemini model.

    Each call opens its own ``httpx.AsyncClient``; no connection is shared
    between calls.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key or settings.gemini_api_key
        if not self.api_key:
            raise ValueError("Gemini API key is not configured.")
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.model = model or settings.gemini_model
        self.timeout = timeout if timeout is not None else settings.estimator_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            transport=self._transport,
        )

    def _build_payload(
        self,
        prompt: str,
        schema: dict,
        system_instruction: str | None,
        temperature: float | None,
    ) -> dict:
        generation_config: dict[str, Any] = {
            "responseMimeType": "application/json",
            "responseSchema": schema,
        }
        if temperature is not None:
            generation_config["temperature"] = temperature
        payload: dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": generation_config,
        }
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        return payload

    @staticmethod
    def _extract_text(data: dict) -> str:
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise GeminiError("Gemini response did not contain any candidates.") from exc
        text = "".join(part.get("text", "") for part in parts if isinstance(part, dict))
        if not text.strip():
            raise GeminiError("Gemini response text was empty.")
        return text

    async def generate_json(
        self,
        prompt: str,
        *,
        schema: dict,
        system_instruction: str | None = None,
        temperature: float | None = None,
    ) -> Any:
        """Send ``prompt`` and return the decoded JSON document the model produced."""

        url = f"{self.base_url}/models/{self.model}:generateContent"
        payload = self._build_payload(prompt, schema, system_instruction, temperature)
        async with self._get_client() as client:
            try:
                response = await client.post(url, json=payload, headers={"x-goog-api-key": self.api_key})
                response.raise_for_status()
                data = response.json()
            except httpx.HTTPStatusError as exc:
                raise GeminiError(
                    f"Gemini request failed with status {exc.response.status_code}"
                ) from exc
            except httpx.TimeoutException as exc:
                raise GeminiError(f"Gemini request timed out after {self.timeout:.0f}s") from exc
            except httpx.HTTPError as exc:
                raise GeminiError(f"Failed to reach Gemini at {self.base_url}: {exc}") from exc
            except ValueError as exc:
                raise GeminiError("Gemini returned a non-JSON HTTP body.") from exc

        text = self._extract_text(data)
        try:
            return json.loads(text)
        except json.JSONDecodeError as exc:
            logger.debug(f"Unparseable Gemini output: {text[:200]!r}")
            raise GeminiError("Gemini output was not valid JSON.") from exc
