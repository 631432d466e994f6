from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional, Protocol

from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse

from .config import API_PREFIX
from .errors import SuggestionError, TransportError
from .hosted_provider import HostedProvider
from .local_provider import LocalProvider
from .schemas import AIProvider, SuggestionRequest, SuggestionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


class SuggestionProvider(Protocol):
    name: str

    async def fetch_suggestions(self, request: SuggestionRequest) -> SuggestionResponse:
        ...


ProviderFactory = Callable[[], SuggestionProvider]

DEFAULT_PROVIDERS: dict[AIProvider, ProviderFactory] = {
    AIProvider.HOSTED: HostedProvider,
    AIProvider.LOCAL: LocalProvider,
}

PROVIDER_LABELS = {
    AIProvider.HOSTED: "Google AI",
    AIProvider.LOCAL: "Local AI (Ollama)",
}

PROVIDER_HINTS = {
    AIProvider.HOSTED: "Check your API credentials and network connection, then try again.",
    AIProvider.LOCAL: "Is the local server running? Start Ollama and make sure the model is pulled.",
}


async def get_suggestions(
    request: SuggestionRequest,
    providers: Optional[Mapping[AIProvider, ProviderFactory]] = None,
) -> SuggestionResponse:
    """Fetch suggestions from the provider the request selects.

    A failure in that provider propagates; there is no fallback to the other
    one. Zero suggestions is a normal result.
    """
    registry = providers or DEFAULT_PROVIDERS
    provider = registry[request.aiProvider]()
    logger.info(
        "Fetching suggestions from %s provider (mood=%s, time=%s)",
        request.aiProvider.value,
        request.mood,
        request.timeAvailable,
    )
    result = await provider.fetch_suggestions(request)
    logger.info("%s provider returned %d suggestions", request.aiProvider.value, len(result.suggestions))
    return SuggestionResponse(suggestions=list(result.suggestions))


def describe_error(exc: SuggestionError, provider: AIProvider) -> dict:
    payload = {
        "error": str(exc),
        "kind": exc.kind,
        "provider": provider.value,
        "providerLabel": PROVIDER_LABELS[provider],
    }
    if isinstance(exc, TransportError):
        payload["hint"] = PROVIDER_HINTS[provider]
        payload["status"] = exc.status
    return payload


@router.post(f"{API_PREFIX}/suggest-activities")
async def suggest_activities(request: SuggestionRequest = Body(...)):
    try:
        result = await get_suggestions(request)
    except SuggestionError as exc:
        logger.error("Suggestion fetch failed: %s", exc, exc_info=True)
        return JSONResponse(describe_error(exc, request.aiProvider), status_code=502)
    except Exception as exc:
        logger.error("Unexpected suggestion failure: %s", exc, exc_info=True)
        return JSONResponse(
            {
                "error": str(exc),
                "kind": "unexpected_error",
                "provider": request.aiProvider.value,
                "providerLabel": PROVIDER_LABELS[request.aiProvider],
            },
            status_code=502,
        )
    return JSONResponse(result.model_dump())
