"""
Core infrastructure package for the Lead Intelligence backend.

Provides:
- Configuration management via pydantic-settings
- Async PostgreSQL pool lifecycle via asyncpg
- The error taxonomy shared by services and the HTTP layer

Re-exports key components so other modules can write:

    from leadintel.core import get_settings, create_db_pool, AnalysisError

FastAPI dependencies live in leadintel.core.dependencies and are imported
from there directly, since they depend on the service layer.
"""

# =============================================================================
# Re-exports from leadintel.core.config
# =============================================================================
from leadintel.core.config import Settings, get_settings

# =============================================================================
# Re-exports from leadintel.core.database
# =============================================================================
from leadintel.core.database import create_db_pool, close_db_pool

# =============================================================================
# Re-exports from leadintel.core.exceptions
# =============================================================================
from leadintel.core.exceptions import (
    AnalysisError,
    UnauthenticatedError,
    ForbiddenError,
    QuotaExceededError,
    InvalidInputError,
    EmptyModelResponseError,
    MalformedModelResponseError,
    SchemaViolationError,
    ModelInvocationError,
    BackendTimeoutError,
    ProfileNotFoundError,
)


__all__ = [
    # Configuration management
    'Settings',
    'get_settings',
    # Database pool lifecycle
    'create_db_pool',
    'close_db_pool',
    # Error taxonomy
    'AnalysisError',
    'UnauthenticatedError',
    'ForbiddenError',
    'QuotaExceededError',
    'InvalidInputError',
    'EmptyModelResponseError',
    'MalformedModelResponseError',
    'SchemaViolationError',
    'ModelInvocationError',
    'BackendTimeoutError',
    'ProfileNotFoundError',
]
