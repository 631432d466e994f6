from io import BytesIO
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from PIL import Image


def make_genai_client(response=None, side_effect=None):
    """A stand-in for google.genai.Client exposing only aio.models.generate_content."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock(return_value=response, side_effect=side_effect)
    return client


def genai_response(parsed=None, text=None, candidates=None):
    return SimpleNamespace(parsed=parsed, text=text, candidates=candidates)


def image_candidate(data: bytes, mime_type: str = "image/png"):
    part = SimpleNamespace(text=None, inline_data=SimpleNamespace(data=data, mime_type=mime_type))
    return SimpleNamespace(content=SimpleNamespace(parts=[part]))


def png_bytes(size=(8, 8), color=(200, 120, 40)) -> bytes:
    buf = BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()
