"""
Error taxonomy for the summarization core.

Every error carries an HTTP status and a stable public message. The
public message is what callers see; the internal cause (backend error,
database error) only ever reaches server-side logs.
"""
from typing import Optional


class ScribeError(Exception):
    """Base class for all domain errors."""

    status_code: int = 500
    public_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.public_message)


class ValidationError(ScribeError):
    """Missing or empty input. Never retried."""

    status_code = 400
    public_message = "Invalid request"

    def __init__(self, message: str):
        super().__init__(message)
        # Validation messages describe the caller's own input, so they are safe to return
        self.public_message = message


class RateLimitExceeded(ScribeError):
    """Client exceeded its attempt budget for the current window."""

    status_code = 429
    public_message = "Rate limit exceeded"

    def __init__(self, client_id: str, retry_after_seconds: int, limit: int):
        super().__init__(f"Rate limit exceeded for {client_id}")
        self.client_id = client_id
        self.retry_after_seconds = retry_after_seconds
        self.limit = limit


class InvocationError(ScribeError):
    """AI backend call failed or timed out."""

    status_code = 500
    public_message = "Failed to generate summary"

    def __init__(self, model_id: str, cause: BaseException, processing_time_ms: int = 0):
        super().__init__(f"AI invocation failed for model {model_id}: {cause}")
        self.model_id = model_id
        self.cause = cause
        self.processing_time_ms = processing_time_ms


class AccessDenied(ScribeError):
    """Caller's plan does not include the requested feature."""

    status_code = 403
    public_message = "premium required"


class PersistenceError(ScribeError):
    """A write to the persistence boundary failed."""

    status_code = 500
    public_message = "Failed to save summary"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class SummaryNotFound(ScribeError):
    """Summary id does not exist."""

    status_code = 404
    public_message = "Summary not found"

    def __init__(self, summary_id: str):
        super().__init__(f"Summary {summary_id} not found")
        self.summary_id = summary_id


class CatalogError(ScribeError):
    """Model catalog is misconfigured (duplicate id, negative price, ...)."""


class UnknownModelError(CatalogError):
    """A mandatory model lookup used an id that is not in the catalog."""

    def __init__(self, model_id: str):
        super().__init__(f"Unknown AI model: {model_id}")
        self.model_id = model_id


class ClientDisconnected(ScribeError):
    """The HTTP client went away before the response was ready."""

    status_code = 499
    public_message = "Client closed request"
