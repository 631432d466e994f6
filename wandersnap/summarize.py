from __future__ import annotations

import logging
from typing import Optional

import google.genai as genai
import httpx
from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from google.genai import errors as genai_errors
from google.genai import types

from .config import API_PREFIX, MODEL_NAME
from .errors import ProtocolError, SuggestionError, TransportError
from .genai_client import CLIENT_SETUP_ERRORS, get_client
from .hosted_provider import response_text
from .prompts import build_summary_prompt
from .schemas import AIProvider, SummarizeActivityRequest, SummarizeActivityResponse

logger = logging.getLogger(__name__)

router = APIRouter()


async def summarize_activity(
    request: SummarizeActivityRequest,
    client: Optional[genai.Client] = None,
    model: str = MODEL_NAME,
) -> str:
    prompt = build_summary_prompt(
        request.activityDescription,
        request.mood,
        request.timeAvailable,
        request.preferences,
    )
    try:
        client = client or get_client()
        response = await client.aio.models.generate_content(
            model=model,
            contents=[types.Content(role="user", parts=[types.Part.from_text(text=prompt)])],
            config=types.GenerateContentConfig(
                automatic_function_calling=types.AutomaticFunctionCallingConfig(disable=True),
                temperature=0.7,
                top_p=0.9,
                max_output_tokens=512,
            ),
        )
    except (genai_errors.APIError, httpx.HTTPError) as exc:
        raise TransportError(
            f"Gemini summary request failed: {exc}",
            provider=AIProvider.HOSTED.value,
            status=getattr(exc, "code", None),
        ) from exc
    except CLIENT_SETUP_ERRORS as exc:
        raise TransportError(
            f"Gemini client is not configured: {exc}",
            provider=AIProvider.HOSTED.value,
        ) from exc

    summary = response_text(response).strip()
    if not summary:
        raise ProtocolError("Gemini returned an empty summary", provider=AIProvider.HOSTED.value)
    return summary


@router.post(f"{API_PREFIX}/summarize-activity")
async def summarize(request: SummarizeActivityRequest = Body(...)):
    try:
        summary = await summarize_activity(request)
    except SuggestionError as exc:
        logger.error("Activity summary failed: %s", exc, exc_info=True)
        return JSONResponse({"error": str(exc), "kind": exc.kind}, status_code=502)
    except Exception as exc:
        logger.error("Unexpected activity summary failure: %s", exc, exc_info=True)
        return JSONResponse({"error": str(exc), "kind": "unexpected_error"}, status_code=502)
    return JSONResponse(SummarizeActivityResponse(summary=summary).model_dump())
