"""
Analysis invoker: the quota-gated pipeline behind POST /analyze.

State machine for one request:

    UNAUTHENTICATED -> QUOTA_CHECKED -> MODEL_INVOKED -> RESULT_VALIDATED -> COMPLETED

Any state may exit to FAILED(kind).

Steps:
1. Identity: a verified principal must be present. Nothing is read or charged
   for an anonymous request.
2. Quota admission: the principal's profile is loaded; an exhausted account
   fails with QuotaExceededError and the model is never called.
3. Input validation: content must be non-empty after trimming.
4. Charge: one unit is taken with the ledger's atomic conditional increment.
   If a concurrent request took the last unit first, this request fails with
   QuotaExceededError, again without calling the model.
5. Model invocation and parsing (fence stripping, JSON, schema).
6. If anything after the charge fails, or the request is cancelled, the unit
   is refunded. The refund is shielded from cancellation and is best-effort:
   a refund failure is logged and the original error is raised unchanged.
   The charge is taken before the model call rather than after a validated
   result, so that concurrent requests cannot overrun the limit. The cost is
   that a failed refund over-charges by one unit; nothing retries it, and an
   admin reset or limit change reconciles the row.
7. The validated AnalysisResult is returned.

The net effect is that a principal is charged exactly for validated results,
an exhausted account never reaches the model, and concurrent requests can
never be admitted beyond the remaining allowance. Nothing is retried here;
retrying is the caller's decision because every attempt costs a model call.
"""

import asyncio
import logging
from typing import Optional

from leadintel.core.exceptions import (
    AnalysisError,
    InvalidInputError,
    QuotaExceededError,
    UnauthenticatedError,
)
from leadintel.models.enums import AnalysisState
from leadintel.models.schemas import AnalysisResult
from leadintel.services.analysis_schema import parse_model_completion
from leadintel.services.generative import GeminiBackend
from leadintel.services.identity import Principal
from leadintel.services.quota_ledger import QuotaLedger, admit


logger = logging.getLogger(__name__)


class AnalysisInvoker:
    """
    Orchestrates one analysis per call to `analyze`.

    Args:
        ledger: Quota ledger accessor (asyncpg-backed in production).
        backend: Generative backend producing raw completions.
    """

    def __init__(self, ledger: QuotaLedger, backend: GeminiBackend):
        self._ledger = ledger
        self._backend = backend

    @property
    def model(self) -> str:
        return self._backend.model

    async def analyze(
        self,
        principal: Optional[Principal],
        content_text: Optional[str],
    ) -> AnalysisResult:
        """
        Run the full pipeline for one request.

        Raises:
            UnauthenticatedError, QuotaExceededError, InvalidInputError,
            ProfileNotFoundError, EmptyModelResponseError,
            MalformedModelResponseError, SchemaViolationError,
            ModelInvocationError, BackendTimeoutError
        """
        state = AnalysisState.UNAUTHENTICATED
        user_id = principal.user_id if principal is not None else None
        try:
            if not user_id:
                raise UnauthenticatedError()

            record = await self._ledger.get_quota(user_id)
            if not admit(record):
                logger.info(
                    f"Quota exceeded for user {user_id} "
                    f"({record.usageCount}/{record.usageLimit})"
                )
                raise QuotaExceededError()
            state = AnalysisState.QUOTA_CHECKED

            text = (content_text or "").strip()
            if not text:
                raise InvalidInputError()

            if not await self._ledger.increment(user_id):
                logger.info(f"Quota exhausted concurrently for user {user_id}")
                raise QuotaExceededError()

            try:
                raw = await self._backend.complete(text)
                state = AnalysisState.MODEL_INVOKED
                result = parse_model_completion(raw)
                state = AnalysisState.RESULT_VALIDATED
            except BaseException:
                await self._refund(user_id)
                raise

        except AnalysisError as e:
            logger.warning(
                f"Analysis failed for user {user_id} in state {state.value}: "
                f"{e.kind.value} - {e.message}"
            )
            raise

        state = AnalysisState.COMPLETED
        logger.info(
            f"Analysis {state.value} for user {user_id}: "
            f"tier1={result.tier1.hasSignals} tier2={result.tier2.hasSignals} "
            f"insight={result.insight.hasSignals}"
        )
        return result

    async def _refund(self, user_id: str) -> None:
        """Return the unit charged for a failed request. Errors are logged, never raised."""
        try:
            await asyncio.shield(self._ledger.release(user_id))
        except Exception:
            logger.error(f"Failed to refund quota unit for user {user_id}", exc_info=True)
