from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from .config import OLLAMA_MODEL, OLLAMA_TIMEOUT, OLLAMA_URL
from .decoding import decode_suggestions
from .errors import ProtocolError, TransportError
from .prompts import build_suggestion_prompt
from .schemas import AIProvider, SuggestionRequest, SuggestionResponse

logger = logging.getLogger(__name__)


class LocalProvider:
    """Suggestions from a local Ollama daemon over plain HTTP.

    The daemon is asked for JSON but gives no schema guarantee, so the text it
    returns goes through ``decode_suggestions`` (one fence-stripping repair,
    then validation). The network call itself is never retried.
    """

    name = AIProvider.LOCAL.value

    def __init__(
        self,
        base_url: str = OLLAMA_URL,
        model: str = OLLAMA_MODEL,
        timeout: float = OLLAMA_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.model = model
        self.timeout = httpx.Timeout(timeout, connect=5.0)
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/api/generate"

    async def generate(self, prompt: str) -> str:
        payload = {"model": self.model, "prompt": prompt, "format": "json", "stream": False}
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.post(self.endpoint, json=payload)
        except httpx.RequestError as exc:
            raise TransportError(
                f"Could not reach local model server at {self.base_url}: {exc}",
                provider=self.name,
            ) from exc

        if not resp.is_success:
            raise TransportError(
                f"Local model server returned HTTP {resp.status_code}",
                provider=self.name,
                status=resp.status_code,
                body=resp.text,
            )

        try:
            envelope: Any = resp.json()
        except ValueError as exc:
            raise ProtocolError(
                "Local model server returned a non-JSON envelope",
                provider=self.name,
            ) from exc
        text = envelope.get("response") if isinstance(envelope, dict) else None
        if not isinstance(text, str):
            raise ProtocolError(
                "Local model server response is missing the 'response' text field",
                provider=self.name,
            )
        return text

    async def fetch_suggestions(self, request: SuggestionRequest) -> SuggestionResponse:
        text = await self.generate(build_suggestion_prompt(request))
        logger.info("Local model %s returned %d characters", self.model, len(text))
        return decode_suggestions(text, provider=self.name)
