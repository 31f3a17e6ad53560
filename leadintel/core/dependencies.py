"""
FastAPI dependency injection module for the Lead Intelligence backend.

The long-lived collaborators (quota ledger, identity verifier, analysis
invoker) are constructed once by the application lifespan and stored on
`app.state`. The dependencies below hand them to endpoint handlers, so tests
can swap any of them with `app.dependency_overrides` or by placing fakes on
`app.state`.

Key Dependencies Provided:
- get_settings_dependency / SettingsDep: cached Settings
- get_quota_ledger / QuotaLedgerDep: QuotaLedger bound to the pool
- get_identity_verifier / IdentityVerifierDep: bearer-token verifier
- get_invoker / InvokerDep: AnalysisInvoker
- get_current_principal / PrincipalDep: verified principal of the request
- require_admin / AdminDep: caller's profile, only when role == admin

Usage Example:
    @router.get("/me/quota")
    async def my_quota(principal: PrincipalDep, ledger: QuotaLedgerDep) -> QuotaSummary:
        record = await ledger.get_quota(principal.user_id)
        ...
"""

from typing import Annotated, Optional

from fastapi import Depends, Header, Request

from leadintel.core.config import Settings, get_settings
from leadintel.core.exceptions import ForbiddenError
from leadintel.models.enums import UserRole
from leadintel.models.schemas import QuotaRecord
from leadintel.services.analysis import AnalysisInvoker
from leadintel.services.identity import IdentityVerifier, Principal
from leadintel.services.quota_ledger import QuotaLedger


# =============================================================================
# Settings Dependency
# =============================================================================

def get_settings_dependency() -> Settings:
    """
    Return the Settings singleton instance.

    Thin wrapper around get_settings() so tests can override it:

        app.dependency_overrides[get_settings_dependency] = lambda: test_settings
    """
    return get_settings()


SettingsDep = Annotated[Settings, Depends(get_settings_dependency)]


# =============================================================================
# Collaborators held on app.state
# =============================================================================

def get_quota_ledger(request: Request) -> QuotaLedger:
    return request.app.state.quota_ledger


def get_identity_verifier(request: Request) -> IdentityVerifier:
    return request.app.state.identity_verifier


def get_invoker(request: Request) -> AnalysisInvoker:
    return request.app.state.invoker


QuotaLedgerDep = Annotated[QuotaLedger, Depends(get_quota_ledger)]
IdentityVerifierDep = Annotated[IdentityVerifier, Depends(get_identity_verifier)]
InvokerDep = Annotated[AnalysisInvoker, Depends(get_invoker)]


# =============================================================================
# Authentication Dependencies
# =============================================================================

async def get_current_principal(
    verifier: IdentityVerifierDep,
    authorization: Annotated[Optional[str], Header()] = None,
) -> Principal:
    """
    Verify the request's bearer token and return its principal.

    Raises:
        UnauthenticatedError: Missing or rejected token (rendered as 401).
    """
    return await verifier.verify(authorization)


PrincipalDep = Annotated[Principal, Depends(get_current_principal)]


async def require_admin(principal: PrincipalDep, ledger: QuotaLedgerDep) -> QuotaRecord:
    """
    Return the caller's profile if it carries the admin role.

    Raises:
        ForbiddenError: The caller is authenticated but not an admin.
        ProfileNotFoundError: The caller has no profile row.
    """
    record = await ledger.get_quota(principal.user_id)
    if record.role != UserRole.ADMIN:
        raise ForbiddenError(f"User {principal.user_id} is not an admin")
    return record


AdminDep = Annotated[QuotaRecord, Depends(require_admin)]
