"""
Caller-side adapter for the analysis service.

AnalysisClient is the single entry point consuming code uses. Each call to
`analyze` produces exactly one of:
- a validated AnalysisResult
- an AnalysisClientError carrying one flat, human-readable message and the
  machine-readable ErrorKind

Error normalization, in priority order:
1. Transport failure (cannot reach the backend) -> connectivity message that
   points at the health check
2. HTTP 402 -> fixed quota message, whatever the body says
3. Structured error body {"error": ...}, possibly nested or JSON-stringified
   -> the unwrapped string
4. Anything else -> the raw status line, or a generic default

No httpx exception ever escapes this module.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Tuple

import httpx
from pydantic import ValidationError

from leadintel.models.enums import ErrorKind
from leadintel.models.schemas import AnalysisResult


logger = logging.getLogger(__name__)

ANALYZE_PATH = "/analyze"

AUTH_REQUIRED_MESSAGE = "Authentication required. Please login to use this tool."
UNREACHABLE_MESSAGE = (
    "Could not reach the analysis service. The backend may be down or not deployed; "
    "run the health check to diagnose the connection."
)
TIMEOUT_MESSAGE = (
    "The analysis service did not respond in time. Please try again, or run the "
    "health check if the problem persists."
)
QUOTA_EXCEEDED_MESSAGE = (
    "Quota Exceeded. You have reached your analysis limit. Please contact the administrator."
)
DEFAULT_ERROR_MESSAGE = "Failed to analyze content."

# Guards against pathological self-nesting in error bodies
MAX_UNWRAP_DEPTH = 5


class AnalysisClientError(Exception):
    """The only exception type raised by AnalysisClient.analyze."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.INTERNAL, status_code: Optional[int] = None):
        self.message = message
        self.kind = kind
        self.status_code = status_code
        super().__init__(message)


@dataclass(frozen=True)
class HealthStatus:
    ok: bool
    message: str


def _parse_kind(value: Any) -> ErrorKind:
    try:
        return ErrorKind(value)
    except ValueError:
        return ErrorKind.INTERNAL


def unwrap_error_message(payload: Any, depth: int = 0) -> Optional[str]:
    """
    Dig the human-readable message out of an error body.

    Accepts {"error": "msg"}, {"error": {"error": "msg"}},
    {"error": "{\\"error\\": \\"msg\\"}"} and JSON-encoded strings of those.
    Returns None if no message can be found.
    """
    if depth > MAX_UNWRAP_DEPTH:
        return None
    if isinstance(payload, dict):
        if "error" in payload:
            return unwrap_error_message(payload["error"], depth + 1)
        message = payload.get("message")
        return message if isinstance(message, str) and message else None
    if isinstance(payload, str):
        text = payload.strip()
        if text.startswith("{") or text.startswith('"'):
            try:
                inner = json.loads(text)
            except ValueError:
                return text or None
            unwrapped = unwrap_error_message(inner, depth + 1)
            return unwrapped or text
        return text or None
    return None


def normalize_error_response(response: httpx.Response) -> AnalysisClientError:
    """Turn a non-2xx response into a single AnalysisClientError."""
    status = response.status_code

    if status == 402:
        return AnalysisClientError(QUOTA_EXCEEDED_MESSAGE, ErrorKind.QUOTA_EXCEEDED, status)

    body: Any = None
    try:
        body = response.json()
    except ValueError:
        body = None

    if isinstance(body, (dict, str)):
        message = unwrap_error_message(body)
        if message:
            kind = _parse_kind(body.get("kind")) if isinstance(body, dict) else ErrorKind.INTERNAL
            return AnalysisClientError(message, kind, status)

    fallback = f"{status} {response.reason_phrase}".strip() if response.reason_phrase else None
    return AnalysisClientError(fallback or DEFAULT_ERROR_MESSAGE, ErrorKind.INTERNAL, status)


class AnalysisClient:
    """
    Async client for POST/GET /analyze.

    Args:
        http_client: httpx.AsyncClient owned by the caller.
        base_url: Base URL of the analysis service.
        access_token: Bearer token of the signed-in principal, if any.
    """

    def __init__(self, http_client: httpx.AsyncClient, base_url: str, access_token: Optional[str] = None):
        self._http = http_client
        self._url = base_url.rstrip("/") + ANALYZE_PATH
        self.access_token = access_token

    async def analyze(self, text: str) -> AnalysisResult:
        """
        Analyze `text` and return the validated report.

        Raises:
            AnalysisClientError: For every failure, with a flat message.
        """
        if not self.access_token:
            logger.error("No active session found.")
            raise AnalysisClientError(AUTH_REQUIRED_MESSAGE, ErrorKind.UNAUTHENTICATED)

        try:
            response = await self._http.post(
                self._url,
                json={"text": text},
                headers={"Authorization": f"Bearer {self.access_token}"},
            )
        except httpx.TimeoutException as e:
            logger.error(f"Analysis request timed out: {e}")
            raise AnalysisClientError(TIMEOUT_MESSAGE, ErrorKind.BACKEND_TIMEOUT)
        except httpx.TransportError as e:
            logger.error(f"Analysis service unreachable: {e}")
            raise AnalysisClientError(UNREACHABLE_MESSAGE, ErrorKind.BACKEND_UNREACHABLE)
        except httpx.RequestError as e:
            # Redirect loops, undecodable bodies and other request failures
            logger.error(f"Analysis request failed: {type(e).__name__}: {e}")
            raise AnalysisClientError(DEFAULT_ERROR_MESSAGE, ErrorKind.INTERNAL)

        if not response.is_success:
            error = normalize_error_response(response)
            logger.error(f"Analysis failed ({response.status_code}): {error.message}")
            raise error

        try:
            return AnalysisResult.model_validate(response.json())
        except (ValueError, ValidationError, httpx.HTTPError) as e:
            logger.error(f"Analysis service returned an invalid report: {e}")
            raise AnalysisClientError(DEFAULT_ERROR_MESSAGE, ErrorKind.SCHEMA_VIOLATION, response.status_code)

    async def check_health(self) -> HealthStatus:
        """
        Call GET /analyze. Never raises.
        """
        try:
            response = await self._http.get(self._url)
            ok, message = self._describe_health(response)
        except Exception as e:
            logger.error(f"Health check failed: {e}")
            return HealthStatus(ok=False, message=f"Connection failed: {str(e) or type(e).__name__}")
        return HealthStatus(ok=ok, message=message)

    @staticmethod
    def _describe_health(response: httpx.Response) -> Tuple[bool, str]:
        if not response.is_success:
            error = normalize_error_response(response)
            return False, f"Backend error: {error.message}"
        body = response.json()
        if not isinstance(body, dict) or body.get("status") != "online":
            return False, "Backend answered but did not report status 'online'"
        return True, f"Backend online (model: {body.get('model', 'unknown')})"
