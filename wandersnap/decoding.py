"""Turn untrusted model text into a validated SuggestionResponse.

Decoding runs as a small state machine so that every failure maps to exactly
one named error:

    PARSE --ok--> VALIDATE --ok--> DONE
      |                 \\--fail--> SchemaViolationError
      \\--fail--> REPAIR --> PARSE (once) --fail--> MalformedOutputError
"""
from __future__ import annotations

import json
import logging
import re
from enum import Enum
from typing import Any

from pydantic import ValidationError

from .errors import MalformedOutputError, SchemaViolationError
from .schemas import SuggestionResponse

logger = logging.getLogger(__name__)

_LEADING_FENCE = re.compile(r"^\s*```(?:json)?\s*", flags=re.IGNORECASE)
_TRAILING_FENCE = re.compile(r"\s*```\s*$")


class DecodeStage(str, Enum):
    PARSE = "parse"
    REPAIR = "repair"
    VALIDATE = "validate"
    DONE = "done"


def strip_code_fences(text: str) -> str:
    text = _LEADING_FENCE.sub("", text, count=1)
    return _TRAILING_FENCE.sub("", text, count=1).strip()


def _try_json(text: str) -> tuple[Any, str | None]:
    try:
        return json.loads(text), None
    except ValueError as exc:
        return None, str(exc)


def validate_suggestions(payload: Any, provider: str = "") -> SuggestionResponse:
    try:
        return SuggestionResponse.model_validate(payload)
    except ValidationError as exc:
        raise SchemaViolationError(
            f"Model output does not match the suggestion schema: {exc}",
            provider=provider,
        ) from exc


def decode_suggestions(
    text: str,
    provider: str = "",
    empty_when_missing: bool = False,
) -> SuggestionResponse:
    """Parse, optionally repair once, and validate a model's JSON text.

    With ``empty_when_missing`` a JSON object that carries no ``suggestions``
    value decodes to an empty response instead of a schema violation.
    """
    stage = DecodeStage.PARSE
    candidate = text
    repaired = False
    payload: Any = None
    result: SuggestionResponse | None = None

    while stage is not DecodeStage.DONE:
        if stage is DecodeStage.PARSE:
            payload, error = _try_json(candidate)
            if error is None:
                stage = DecodeStage.VALIDATE
            elif not repaired:
                logger.info("Model output is not valid JSON (%s); stripping code fences", error)
                stage = DecodeStage.REPAIR
            else:
                raise MalformedOutputError(
                    f"Model output is not valid JSON after cleanup: {error}",
                    provider=provider,
                )
        elif stage is DecodeStage.REPAIR:
            candidate = strip_code_fences(candidate)
            repaired = True
            stage = DecodeStage.PARSE
        elif stage is DecodeStage.VALIDATE:
            if empty_when_missing and isinstance(payload, dict) and payload.get("suggestions") is None:
                logger.warning("Model returned no suggestions key; treating as empty result")
                result = SuggestionResponse(suggestions=[])
            else:
                result = validate_suggestions(payload, provider)
            stage = DecodeStage.DONE

    return result
