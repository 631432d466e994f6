from __future__ import annotations


class SuggestionError(RuntimeError):
    """Base error for a failed suggestion fetch."""

    kind = "suggestion_error"

    def __init__(self, message: str, provider: str = "") -> None:
        super().__init__(message)
        self.provider = provider


class TransportError(SuggestionError):
    """Raised when a provider cannot be reached or answers with a non-2xx status."""

    kind = "transport_error"

    def __init__(
        self,
        message: str,
        provider: str = "",
        status: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message, provider)
        self.status = status
        self.body = body


class ProtocolError(SuggestionError):
    """Raised when a provider's response envelope lacks an expected field."""

    kind = "protocol_error"


class MalformedOutputError(SuggestionError):
    """Raised when the model output is not JSON, even after the cleanup pass."""

    kind = "malformed_output"


class SchemaViolationError(SuggestionError):
    """Raised when the model output is JSON but not a valid suggestion payload."""

    kind = "schema_violation"


class GeocodingError(RuntimeError):
    """Raised when the reverse-geocoding service fails.

    ``status`` is set when the service answered with a non-2xx response and
    left as ``None`` when it could not be reached or returned unreadable data.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status
