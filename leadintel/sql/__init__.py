"""
SQL Query Module for the Lead Intelligence backend.

Keeps the statements run against the `profiles` table out of the service
layer so the quota ledger reads as business logic.

Example usage:
    from leadintel.sql import SELECT_PROFILE, INCREMENT_USAGE_IF_ADMITTED
"""

from leadintel.sql.quota_queries import (
    SELECT_PROFILE,
    INCREMENT_USAGE_IF_ADMITTED,
    RELEASE_USAGE,
    RESET_USAGE,
    SET_USAGE_LIMIT,
    LIST_PROFILES,
)


__all__ = [
    'SELECT_PROFILE',
    'INCREMENT_USAGE_IF_ADMITTED',
    'RELEASE_USAGE',
    'RESET_USAGE',
    'SET_USAGE_LIMIT',
    'LIST_PROFILES',
]
