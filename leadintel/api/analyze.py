"""
FastAPI router for the analysis endpoint, its health check and the caller's
own quota.

Endpoints:
- POST /analyze - run one quota-gated analysis for the bearer principal
- GET /analyze - health check: {"status": "online", "timestamp", "model"}
- GET /me/quota - the caller's usage, limit and remaining allowance

Failures are raised as AnalysisError subclasses and rendered by the exception
handlers registered in leadintel.main as {"error": ..., "kind": ...}:
402 for quota, 401 for authentication, 400 for input, 500 otherwise.
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter

from leadintel.core.dependencies import InvokerDep, PrincipalDep, QuotaLedgerDep
from leadintel.models.schemas import (
    AnalysisResult,
    AnalyzeRequest,
    ErrorResponse,
    HealthResponse,
    QuotaSummary,
)


logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/analyze",
    response_model=AnalysisResult,
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        402: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def analyze_content(
    body: AnalyzeRequest,
    principal: PrincipalDep,
    invoker: InvokerDep,
) -> AnalysisResult:
    """
    Analyze merged company content into the three-part intelligence report.

    Example Request:
        POST /analyze
        Authorization: Bearer <token>
        {"text": "CFO departs Acme Corp, search underway"}
    """
    logger.info(f"Analysis requested by user {principal.user_id} ({len(body.text or '')} chars)")
    return await invoker.analyze(principal, body.text)


@router.get("/analyze", response_model=HealthResponse)
async def analysis_status(invoker: InvokerDep) -> HealthResponse:
    """
    Diagnostic endpoint used to check the backend is reachable and which model is active.
    """
    return HealthResponse(
        status="online",
        timestamp=datetime.now(timezone.utc),
        model=invoker.model,
    )


@router.get("/me/quota", response_model=QuotaSummary)
async def my_quota(principal: PrincipalDep, ledger: QuotaLedgerDep) -> QuotaSummary:
    """Return the caller's current usage so clients can show remaining credits."""
    record = await ledger.get_quota(principal.user_id)
    return QuotaSummary(
        usageCount=record.usageCount,
        usageLimit=record.usageLimit,
        remaining=record.remaining,
        role=record.role,
    )
