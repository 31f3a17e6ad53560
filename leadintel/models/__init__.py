"""
Package initialization file for the Lead Intelligence models.

Re-exports the enums and Pydantic schemas so other modules can import them
from leadintel.models directly:

    from leadintel.models import AnalysisResult, QuotaRecord, ErrorKind
"""

# =============================================================================
# Enums
# =============================================================================

from leadintel.models.enums import (
    Tier1Status,
    Tier2Status,
    UserRole,
    ErrorKind,
    AnalysisState,
)

# =============================================================================
# Schemas
# =============================================================================

from leadintel.models.schemas import (
    # Structured-output contract
    Tier1Signals,
    Tier2Signals,
    Insight,
    AnalysisResult,
    # Quota / profile
    QuotaRecord,
    QuotaSummary,
    SetLimitRequest,
    ProfileListResponse,
    # HTTP bodies
    AnalyzeRequest,
    HealthResponse,
    ErrorResponse,
    # Client-local history
    HistoryItem,
)


__all__ = [
    'Tier1Status',
    'Tier2Status',
    'UserRole',
    'ErrorKind',
    'AnalysisState',
    'Tier1Signals',
    'Tier2Signals',
    'Insight',
    'AnalysisResult',
    'QuotaRecord',
    'QuotaSummary',
    'SetLimitRequest',
    'ProfileListResponse',
    'AnalyzeRequest',
    'HealthResponse',
    'ErrorResponse',
    'HistoryItem',
]
