"""
Caller-side package: the analysis client adapter, its health check and the
local history store that keeps past reports.

    from leadintel.client import AnalysisClient, AnalysisClientError, HistoryStore
"""

from leadintel.client.adapter import (
    AnalysisClient,
    AnalysisClientError,
    HealthStatus,
    normalize_error_response,
    unwrap_error_message,
)
from leadintel.client.history import (
    HistoryStore,
    JsonFileStorage,
    MAX_HISTORY_ITEMS,
    STORAGE_KEY,
)


__all__ = [
    'AnalysisClient',
    'AnalysisClientError',
    'HealthStatus',
    'normalize_error_response',
    'unwrap_error_message',
    'HistoryStore',
    'JsonFileStorage',
    'MAX_HISTORY_ITEMS',
    'STORAGE_KEY',
]
