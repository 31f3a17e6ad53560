"""
Enumeration definitions for the Lead Intelligence backend.

All enums inherit from both `str` and `Enum` so that they serialize as plain
strings through Pydantic models and JSON error bodies.
"""

from enum import Enum


class Tier1Status(str, Enum):
    """
    Status values for Tier 1 (immediate executive search trigger) signals.

    - URGENT: at least one C-suite change, M&A/funding/IPO/activist event or
      leadership-affecting restructuring was found in the last 12 months
    - NONE: nothing relevant was found
    """
    URGENT = "Urgent/High-Priority"
    NONE = "No relevant signals identified"


class Tier2Status(str, Enum):
    """
    Status values for Tier 2 (strategic growth / future role) signals.

    - FUTURE_OPPORTUNITY: market entry, transformation, new regional HQ or
      senior "Head of"/"Global"/"President"/"GM" hiring was found
    - NONE: nothing relevant was found
    """
    FUTURE_OPPORTUNITY = "Future Opportunity"
    NONE = "No relevant signals identified"


class UserRole(str, Enum):
    """
    Role stored on a profile row.

    Gates the administrative quota endpoints only; the analysis path
    treats both roles identically.
    """
    USER = "user"
    ADMIN = "admin"


class ErrorKind(str, Enum):
    """
    Machine-readable failure kinds shared by the service and the client adapter.

    Every failure leaving the analysis endpoint carries exactly one of these
    in the `kind` field of its `{"error": ..., "kind": ...}` body.
    BACKEND_UNREACHABLE is only produced on the caller side.
    """
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    QUOTA_EXCEEDED = "quota_exceeded"
    INVALID_INPUT = "invalid_input"
    EMPTY_MODEL_RESPONSE = "empty_model_response"
    MALFORMED_MODEL_RESPONSE = "malformed_model_response"
    SCHEMA_VIOLATION = "schema_violation"
    MODEL_INVOCATION_FAILED = "model_invocation_failed"
    BACKEND_TIMEOUT = "backend_timeout"
    BACKEND_UNREACHABLE = "backend_unreachable"
    PROFILE_NOT_FOUND = "profile_not_found"
    INTERNAL = "internal"


class AnalysisState(str, Enum):
    """
    States of a single analysis request as it moves through the invoker.

    Any state may exit to FAILED; the failure kind is carried by the raised
    exception rather than by the state itself.
    """
    UNAUTHENTICATED = "unauthenticated"
    QUOTA_CHECKED = "quota_checked"
    MODEL_INVOKED = "model_invoked"
    RESULT_VALIDATED = "result_validated"
    COMPLETED = "completed"
    FAILED = "failed"
