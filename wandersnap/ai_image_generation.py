from __future__ import annotations

import base64
import logging
from io import BytesIO
from typing import Any, Optional

import google.genai as genai
from fastapi import APIRouter, Body
from fastapi.responses import JSONResponse
from google.genai import types
from PIL import Image

from .config import API_PREFIX, IMAGE_MODEL
from .genai_client import get_client
from .prompts import build_image_prompt
from .schemas import ImageGenerationRequest, ImageGenerationResponse

logger = logging.getLogger(__name__)

router = APIRouter()

SAFETY_SETTINGS = [
    types.SafetySetting(category="HARM_CATEGORY_HATE_SPEECH", threshold="BLOCK_MEDIUM_AND_ABOVE"),
    types.SafetySetting(category="HARM_CATEGORY_DANGEROUS_CONTENT", threshold="BLOCK_NONE"),
    types.SafetySetting(category="HARM_CATEGORY_HARASSMENT", threshold="BLOCK_MEDIUM_AND_ABOVE"),
    types.SafetySetting(category="HARM_CATEGORY_SEXUALLY_EXPLICIT", threshold="BLOCK_MEDIUM_AND_ABOVE"),
]


def _first_image(response: Any) -> Optional[bytes]:
    for candidate in getattr(response, "candidates", None) or []:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            inline = getattr(part, "inline_data", None)
            data = getattr(inline, "data", None) if inline else None
            if data:
                if isinstance(data, str):
                    data = base64.b64decode(data)
                return data
    return None


def _to_jpeg_data_url(image_bytes: bytes) -> str:
    img = Image.open(BytesIO(image_bytes))
    img = img.convert("RGB")
    if max(img.size) > 1024:
        img.thumbnail((1024, 1024))
    buf = BytesIO()
    img.save(buf, format="JPEG", quality=85)
    b64 = base64.b64encode(buf.getvalue()).decode("utf-8")
    return f"data:image/jpeg;base64,{b64}"


async def generate_activity_image(
    keywords: str,
    client: Optional[genai.Client] = None,
    model: str = IMAGE_MODEL,
) -> Optional[str]:
    """Return a JPEG data URI for ``keywords``, or None.

    Best effort: this never raises, since callers run it after the suggestion
    cards are already on screen.
    """
    if not keywords or not keywords.strip():
        logger.warning("Image generation skipped due to empty keywords.")
        return None
    try:
        client = client or get_client()
        logger.info("Generating image for keywords: %s", keywords)
        response = await client.aio.models.generate_content(
            model=model,
            contents=build_image_prompt(keywords),
            config=types.GenerateContentConfig(
                response_modalities=["TEXT", "IMAGE"],
                candidate_count=1,
                safety_settings=SAFETY_SETTINGS,
            ),
        )
        img_bytes = _first_image(response)
        if not img_bytes:
            logger.warning("Image generation returned no image for keywords: %s", keywords)
            return None
        return _to_jpeg_data_url(img_bytes)
    except Exception as exc:
        logger.error("Image generation failed for %r: %s", keywords, exc, exc_info=True)
        return None


@router.post(f"{API_PREFIX}/generate-activity-image")
async def generate_image(request: ImageGenerationRequest = Body(...)):
    data_uri = await generate_activity_image(request.keywords)
    return JSONResponse(ImageGenerationResponse(imageDataUri=data_uri).model_dump())
