"""Custom exceptions for the analysis gateway."""

from typing import Any


class GatewayException(Exception):
    """Base class for gateway exceptions with HTTP status code.

    Every failure kind raised by the analysis pipeline inherits from this
    class, so callers can tell the kinds apart while the API layer renders
    them uniformly.
    """
    status_code: int = 500
    error_code: str = "gateway_error"

    def __init__(self, message: str = "Gateway error"):
        self.message = message
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        """Convert to the JSON error body returned to API callers."""
        return {"error": self.error_code, "message": self.message}


class InvalidInputError(GatewayException):
    """Raised when a required request field is missing or empty.

    Maps to HTTP 400 Bad Request.
    """
    status_code = 400
    error_code = "invalid_input"

    def __init__(self, field: str | None = None, message: str | None = None):
        self.field = field
        super().__init__(message or f"Missing or empty field: {field}")


class RateLimitExceededError(GatewayException):
    """Raised when the rate limiter denies admission.

    Maps to HTTP 429 Too Many Requests.
    """
    status_code = 429
    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        limit: int = 0,
        retry_after: int | None = None,
        message: str = "Rate limit exceeded. Please try again later.",
    ):
        self.limit = limit
        self.retry_after = retry_after
        super().__init__(message)

    def to_response(self) -> dict[str, Any]:
        response = super().to_response()
        response["retry_after"] = self.retry_after
        return response


class UpstreamUnavailableError(GatewayException):
    """Raised when the model provider cannot be reached or times out.

    Maps to HTTP 503 Service Unavailable.
    """
    status_code = 503
    error_code = "upstream_unavailable"

    def __init__(self, provider: str | None = None, message: str = "Model provider unavailable"):
        self.provider = provider
        super().__init__(message)


class MalformedResponseError(GatewayException):
    """Raised when no JSON payload can be extracted from the model output.

    Maps to HTTP 502 Bad Gateway.
    """
    status_code = 502
    error_code = "malformed_response"

    def __init__(self, message: str = "No valid JSON found in the model response"):
        super().__init__(message)


class SchemaViolationError(GatewayException):
    """Raised when the extracted payload fails structural or range checks.

    Maps to HTTP 502 Bad Gateway.
    """
    status_code = 502
    error_code = "schema_violation"

    def __init__(self, field: str | None = None, message: str = "Unexpected response structure from model"):
        self.field = field
        if field:
            message = f"{message}: {field}"
        super().__init__(message)
