from __future__ import annotations

import logging
from typing import Any, Optional

import google.genai as genai
import httpx
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel

from .config import MODEL_NAME
from .decoding import decode_suggestions, validate_suggestions
from .errors import TransportError
from .genai_client import CLIENT_SETUP_ERRORS, get_client
from .prompts import build_suggestion_prompt
from .schemas import AIProvider, SuggestionRequest, SuggestionResponse, suggestion_response_schema

logger = logging.getLogger(__name__)


def response_text(response: Any) -> str:
    raw_text = getattr(response, "text", None)
    if not raw_text and getattr(response, "candidates", None):
        raw_chunks = []
        for candidate in response.candidates:
            content = getattr(candidate, "content", None)
            for part in getattr(content, "parts", None) or []:
                if getattr(part, "text", None):
                    raw_chunks.append(part.text)
        raw_text = "".join(raw_chunks)
    return raw_text or ""


class HostedProvider:
    """Suggestions from Gemini with schema-constrained JSON output."""

    name = AIProvider.HOSTED.value

    def __init__(self, model: str = MODEL_NAME, client: Optional[genai.Client] = None) -> None:
        self.model = model
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = get_client()
        return self._client

    async def fetch_suggestions(self, request: SuggestionRequest) -> SuggestionResponse:
        prompt = build_suggestion_prompt(request)
        try:
            client = self.client
            response = await client.aio.models.generate_content(
                model=self.model,
                contents=[types.Content(role="user", parts=[types.Part.from_text(text=prompt)])],
                config=types.GenerateContentConfig(
                    automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
                    temperature=0.7,
                    top_p=0.9,
                    max_output_tokens=4096,
                    response_mime_type="application/json",
                    response_schema=suggestion_response_schema(),
                ),
            )
        except genai_errors.APIError as exc:
            raise TransportError(
                f"Gemini model {self.model} request failed: {exc}",
                provider=self.name,
                status=getattr(exc, "code", None),
                body=getattr(exc, "message", None),
            ) from exc
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Could not reach Gemini: {exc}",
                provider=self.name,
            ) from exc
        except CLIENT_SETUP_ERRORS as exc:
            raise TransportError(
                f"Gemini client is not configured: {exc}",
                provider=self.name,
            ) from exc

        parsed = getattr(response, "parsed", None)
        if isinstance(parsed, BaseModel):
            parsed = parsed.model_dump()
        if isinstance(parsed, dict):
            if parsed.get("suggestions") is None:
                logger.warning("Gemini returned no suggestions for %s; returning empty list", self.model)
                return SuggestionResponse(suggestions=[])
            return validate_suggestions(parsed, provider=self.name)

        raw_text = response_text(response)
        if not raw_text.strip():
            logger.warning("Gemini returned an empty response for %s; returning empty list", self.model)
            return SuggestionResponse(suggestions=[])
        return decode_suggestions(raw_text, provider=self.name, empty_when_missing=True)
