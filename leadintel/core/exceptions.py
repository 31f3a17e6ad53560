"""
Error taxonomy for the analysis pipeline.

Every failure that can leave the service is an AnalysisError subclass carrying
a machine-readable ErrorKind, the HTTP status it maps to, and the message
shown to the caller. The FastAPI exception handler in leadintel.main renders
them as `{"error": public_message, "kind": kind}`.

The message passed to the constructor is internal detail for logs only.
Callers always see a fixed string: `generic_message` when the class sets one,
otherwise `default_message`, unless a fixed `public_message` is passed
explicitly. Ids, upstream error text and row contents never reach a response.
"""

from typing import Optional

from leadintel.models.enums import ErrorKind


MODEL_FAILURE_MESSAGE = "Failed to analyze content. Please try again."


class AnalysisError(Exception):
    """Base class for all normalized failures."""

    kind: ErrorKind = ErrorKind.INTERNAL
    status_code: int = 500
    default_message: str = "Failed to analyze content."
    # Overrides default_message as the text callers see.
    generic_message: Optional[str] = None

    def __init__(self, message: Optional[str] = None, *, public_message: Optional[str] = None):
        self.message = message or self.default_message
        self.public_message = public_message or self.generic_message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(AnalysisError):
    """No principal, or the bearer token was rejected by the identity provider."""
    kind = ErrorKind.UNAUTHENTICATED
    status_code = 401
    default_message = "Unauthorized: User not logged in"


class ForbiddenError(AnalysisError):
    """The principal lacks the admin role required by an administrative endpoint."""
    kind = ErrorKind.FORBIDDEN
    status_code = 403
    default_message = "Admin role required"


class QuotaExceededError(AnalysisError):
    """Admission denied: usage_count has reached usage_limit."""
    kind = ErrorKind.QUOTA_EXCEEDED
    status_code = 402
    default_message = "Quota Exceeded"


class InvalidInputError(AnalysisError):
    kind = ErrorKind.INVALID_INPUT
    status_code = 400
    default_message = "Input text is required"


class EmptyModelResponseError(AnalysisError):
    kind = ErrorKind.EMPTY_MODEL_RESPONSE
    generic_message = MODEL_FAILURE_MESSAGE
    default_message = "AI returned empty response"


class MalformedModelResponseError(AnalysisError):
    kind = ErrorKind.MALFORMED_MODEL_RESPONSE
    generic_message = MODEL_FAILURE_MESSAGE
    default_message = "AI returned a response that is not valid JSON"


class SchemaViolationError(AnalysisError):
    kind = ErrorKind.SCHEMA_VIOLATION
    generic_message = MODEL_FAILURE_MESSAGE
    default_message = "AI response did not match the analysis schema"


class ModelInvocationError(AnalysisError):
    """The generative backend rejected the request or failed upstream."""
    kind = ErrorKind.MODEL_INVOCATION_FAILED
    generic_message = MODEL_FAILURE_MESSAGE
    default_message = "Generative model request failed"


class BackendTimeoutError(AnalysisError):
    """A boundary call (identity, quota ledger, model) exceeded its timeout."""
    kind = ErrorKind.BACKEND_TIMEOUT
    default_message = "Upstream service timed out"


class ProfileNotFoundError(AnalysisError):
    """Authenticated principal with no profiles row: a provisioning defect."""
    kind = ErrorKind.PROFILE_NOT_FOUND
    default_message = "User profile not found. Please contact support."
