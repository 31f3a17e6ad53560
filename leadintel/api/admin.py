"""
FastAPI router for administrative quota management.

Every endpoint requires a verified principal whose profile has role 'admin'
(403 otherwise). These are the operations the admin console calls; they are
not part of the analysis hot path.

Endpoints:
- GET /admin/profiles - list profiles, heaviest usage first, with totals
- POST /admin/profiles/{user_id}/reset - set usage_count back to 0
- PUT /admin/profiles/{user_id}/limit - set a new positive usage_limit
- POST /admin/profiles/{user_id}/vip - raise usage_limit to the VIP allowance
"""

import logging
from typing import Optional

from fastapi import APIRouter, Query

from leadintel.core.dependencies import AdminDep, QuotaLedgerDep, SettingsDep
from leadintel.models.schemas import ProfileListResponse, QuotaRecord, SetLimitRequest
from leadintel.services.quota_ledger import DEFAULT_LIST_LIMIT


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin")


@router.get("/profiles", response_model=ProfileListResponse)
async def list_profiles(
    admin: AdminDep,
    ledger: QuotaLedgerDep,
    limit: Optional[int] = Query(default=None, ge=1, le=DEFAULT_LIST_LIMIT),
) -> ProfileListResponse:
    profiles = await ledger.list_profiles(limit)
    return ProfileListResponse(
        profiles=profiles,
        totalUsers=len(profiles),
        totalUsage=sum(p.usageCount for p in profiles),
    )


@router.post("/profiles/{user_id}/reset", response_model=QuotaRecord)
async def reset_quota(user_id: str, admin: AdminDep, ledger: QuotaLedgerDep) -> QuotaRecord:
    logger.info(f"Admin {admin.userId} resetting quota for {user_id}")
    return await ledger.reset_quota(user_id)


@router.put("/profiles/{user_id}/limit", response_model=QuotaRecord)
async def set_limit(
    user_id: str,
    body: SetLimitRequest,
    admin: AdminDep,
    ledger: QuotaLedgerDep,
) -> QuotaRecord:
    logger.info(f"Admin {admin.userId} setting limit for {user_id} to {body.usageLimit}")
    return await ledger.set_limit(user_id, body.usageLimit)


@router.post("/profiles/{user_id}/vip", response_model=QuotaRecord)
async def grant_vip(
    user_id: str,
    admin: AdminDep,
    ledger: QuotaLedgerDep,
    settings: SettingsDep,
) -> QuotaRecord:
    logger.info(f"Admin {admin.userId} granting VIP limit to {user_id}")
    return await ledger.grant_vip(user_id, settings.vip_usage_limit)
