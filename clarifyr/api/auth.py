"""Bearer-token identity resolution.

Issuing and managing users is someone else's job: this module only asks the
Supabase auth REST endpoint (``GET /auth/v1/user``) who a token belongs to
and hands the answer to the endpoints as an :class:`Identity`.
"""

from __future__ import annotations

import logging

import httpx
from fastapi import HTTPException, Request

from clarifyr.explain.pipeline import Identity

logger = logging.getLogger(__name__)


class AuthUnavailable(Exception):
    """The identity provider could not be asked (network error, bad status)."""


class SupabaseAuthenticator:
    """Verify access tokens against a Supabase project."""

    def __init__(
        self,
        base_url: str,
        service_key: str,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        self._user_url = f"{base_url.rstrip('/')}/auth/v1/user"
        self._service_key = service_key
        self._client = client or httpx.Client(timeout=timeout)

    def verify(self, token: str) -> Identity | None:
        """Return the :class:`Identity` owning *token*, or ``None`` if rejected.

        Raises:
            AuthUnavailable: If Supabase could not be reached or answered
                with something other than success or a rejection.
        """
        try:
            response = self._client.get(
                self._user_url,
                headers={
                    "Authorization": f"Bearer {token}",
                    "apikey": self._service_key,
                },
            )
        except httpx.HTTPError as exc:
            raise AuthUnavailable(str(exc)) from exc

        if response.status_code in (401, 403):
            return None
        if response.status_code != 200:
            raise AuthUnavailable(f"HTTP {response.status_code} from auth provider")

        try:
            user = response.json()
        except ValueError as exc:
            raise AuthUnavailable("auth provider returned a non-JSON body") from exc
        if not isinstance(user, dict):
            raise AuthUnavailable("auth provider returned an unexpected payload")
        if not user.get("id"):
            return None
        return Identity(id=str(user["id"]), email=user.get("email"))

    def close(self) -> None:
        self._client.close()


def get_identity(request: Request) -> Identity:
    """FastAPI dependency: resolve the caller from ``Authorization: Bearer``."""
    header = request.headers.get("authorization", "")
    if not header.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Unauthorized: No token provided")
    token = header[len("Bearer "):].strip()
    if not token:
        raise HTTPException(status_code=401, detail="Unauthorized: No token provided")

    authenticator = getattr(request.app.state, "authenticator", None)
    if authenticator is None:
        logger.error("Auth is not configured: set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY")
        raise HTTPException(status_code=500, detail="Internal Server Error")

    try:
        identity = authenticator.verify(token)
    except AuthUnavailable as exc:
        logger.error("Auth provider unavailable: %s", exc)
        raise HTTPException(status_code=500, detail="Internal Server Error") from exc

    if identity is None:
        raise HTTPException(status_code=401, detail="Unauthorized: Invalid token")
    return identity
