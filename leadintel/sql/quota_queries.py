"""
Parameterized SQL for the `profiles` quota table.

Table shape (managed by the identity provider's provisioning trigger):

    profiles(
        id           uuid primary key,      -- principal id from the identity provider
        email        text,
        usage_count  integer not null default 0 check (usage_count >= 0),
        usage_limit  integer not null default 5 check (usage_limit > 0),
        role         text not null default 'user',
        created_at   timestamptz default now()
    )

Every statement that changes usage_count is a single conditional UPDATE so
that concurrent requests for the same principal are serialized by the row
lock, never by a read in application code.
"""

from typing import Final


SELECT_PROFILE: Final[str] = """
    SELECT id, email, usage_count, usage_limit, role
    FROM profiles
    WHERE id = $1
"""

# Admission and charge in one statement: no row returned means the
# principal has no remaining allowance (or no profile at all).
INCREMENT_USAGE_IF_ADMITTED: Final[str] = """
    UPDATE profiles
    SET usage_count = usage_count + 1
    WHERE id = $1 AND usage_count < usage_limit
    RETURNING usage_count
"""

# Refund of a unit whose analysis did not complete.
RELEASE_USAGE: Final[str] = """
    UPDATE profiles
    SET usage_count = usage_count - 1
    WHERE id = $1 AND usage_count > 0
    RETURNING usage_count
"""

RESET_USAGE: Final[str] = """
    UPDATE profiles
    SET usage_count = 0
    WHERE id = $1
    RETURNING id, email, usage_count, usage_limit, role
"""

SET_USAGE_LIMIT: Final[str] = """
    UPDATE profiles
    SET usage_limit = $2
    WHERE id = $1
    RETURNING id, email, usage_count, usage_limit, role
"""

# Heaviest users first, as the admin listing shows them.
LIST_PROFILES: Final[str] = """
    SELECT id, email, usage_count, usage_limit, role
    FROM profiles
    ORDER BY usage_count DESC, id
    LIMIT $1
"""
