"""
Bearer-token verification against the identity provider.

The service never issues or decodes tokens itself. It forwards the caller's
bearer token to the provider's user endpoint (Supabase Auth
`GET /auth/v1/user`) and trusts the user id it gets back.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from leadintel.core.exceptions import (
    AnalysisError,
    BackendTimeoutError,
    UnauthenticatedError,
)


logger = logging.getLogger(__name__)

USER_ENDPOINT = "/auth/v1/user"

MISSING_HEADER_MESSAGE = "Missing Authorization Header"
BEARER_SCHEME_MESSAGE = "Authorization header must use the Bearer scheme"
IDENTITY_UNAVAILABLE_MESSAGE = "Authentication service unavailable. Please try again later."


@dataclass(frozen=True)
class Principal:
    """The authenticated identity making a request."""
    user_id: str
    email: Optional[str] = None
    access_token: str = ""


def extract_bearer_token(authorization: Optional[str]) -> str:
    """
    Pull the token out of an `Authorization: Bearer <token>` header value.

    Raises:
        UnauthenticatedError: Header missing, wrong scheme, or empty token.
    """
    if not authorization or not authorization.strip():
        raise UnauthenticatedError(public_message=MISSING_HEADER_MESSAGE)
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthenticatedError(
            f"Unsupported authorization scheme '{scheme}'",
            public_message=BEARER_SCHEME_MESSAGE,
        )
    return token.strip()


class IdentityVerifier:
    """
    Resolves bearer tokens to principals.

    Args:
        http_client: Shared httpx.AsyncClient owned by the application lifespan.
        base_url: Identity provider base URL (SUPABASE_URL).
        api_key: Public API key sent in the `apikey` header (SUPABASE_ANON_KEY).
        timeout_seconds: Upper bound for one verification round trip.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str,
        api_key: str,
        timeout_seconds: float = 10.0,
    ):
        self._http = http_client
        self._user_url = base_url.rstrip("/") + USER_ENDPOINT
        self._api_key = api_key
        self._timeout = timeout_seconds

    async def verify(self, authorization: Optional[str]) -> Principal:
        """
        Verify the Authorization header value and return the principal.

        Raises:
            UnauthenticatedError: Missing/invalid token or rejected by the provider.
            BackendTimeoutError: The provider did not answer in time.
            AnalysisError: The provider is unreachable or answered with a server error.
        """
        token = extract_bearer_token(authorization)
        try:
            response = await asyncio.wait_for(
                self._http.get(
                    self._user_url,
                    headers={"Authorization": f"Bearer {token}", "apikey": self._api_key},
                ),
                timeout=self._timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException):
            logger.error("Identity provider timed out")
            raise BackendTimeoutError("Identity provider timed out")
        except httpx.HTTPError as e:
            logger.error(f"Identity provider unreachable: {e}")
            raise AnalysisError(
                f"Identity provider unreachable: {e}",
                public_message=IDENTITY_UNAVAILABLE_MESSAGE,
            )

        if response.status_code in (400, 401, 403, 404):
            logger.info(f"Identity provider rejected token (status={response.status_code})")
            raise UnauthenticatedError()
        if response.status_code >= 400:
            logger.error(f"Identity provider error: {response.status_code} - {response.text}")
            raise AnalysisError(
                f"Identity provider error: {response.status_code}",
                public_message=IDENTITY_UNAVAILABLE_MESSAGE,
            )

        try:
            user = response.json()
        except ValueError:
            logger.error("Identity provider returned a non-JSON body")
            raise UnauthenticatedError()
        user_id = user.get("id") if isinstance(user, dict) else None
        if not user_id:
            raise UnauthenticatedError()

        return Principal(user_id=str(user_id), email=user.get("email"), access_token=token)
