"""
Auth Gateway for College Quest

Thin wrapper over the Supabase Auth client for the two calls the backend
makes itself: the PKCE code exchange at the end of the OAuth flow and
revoking a session. Token verification for API requests does not go
through here; see api/dependencies.py.

The supabase client is synchronous, so calls run in a worker thread.
"""

import asyncio
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from supabase import create_client, Client
from supabase.lib.client_options import ClientOptions

from college_quest.config.settings import settings
from college_quest.infrastructure.exceptions import AuthProviderError


logger = logging.getLogger(__name__)


@dataclass
class AuthSession:
    """Result of a successful code exchange."""
    user_id: str
    email: Optional[str]
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    token_type: str = "bearer"


class AuthGateway:
    """Supabase Auth operations used by the OAuth callback and sign-out."""

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            options = ClientOptions(
                postgrest_client_timeout=30,
                auto_refresh_token=False,
                persist_session=False,
            )
            self._client = create_client(
                settings.supabase_url,
                settings.supabase_service_role_key,
                options,
            )
            logger.info("Supabase auth client initialized")
        return self._client

    async def exchange_code(
        self,
        code: str,
        code_verifier: Optional[str] = None
    ) -> AuthSession:
        """
        Exchange an OAuth authorization code for a session.

        Raises:
            AuthProviderError: the provider rejected the code
        """
        params = {"auth_code": code}
        if code_verifier:
            params["code_verifier"] = code_verifier

        try:
            response = await asyncio.to_thread(
                lambda: self.client.auth.exchange_code_for_session(params)
            )
        except Exception as e:
            logger.warning(f"Code exchange failed: {e}")
            raise AuthProviderError(
                "Failed to exchange authorization code",
                operation="exchange_code",
                original_error=e,
            ) from e

        if response is None or response.user is None or response.session is None:
            raise AuthProviderError(
                "Code exchange returned no session",
                operation="exchange_code",
            )

        return AuthSession(
            user_id=str(response.user.id),
            email=response.user.email,
            access_token=response.session.access_token,
            refresh_token=response.session.refresh_token,
            expires_in=response.session.expires_in,
            token_type=response.session.token_type or "bearer",
        )

    async def sign_out(self, access_token: str) -> None:
        """Revoke the session behind an access token."""
        try:
            await asyncio.to_thread(
                lambda: self.client.auth.admin.sign_out(access_token)
            )
        except Exception as e:
            logger.warning(f"Sign-out failed: {e}")
            raise AuthProviderError(
                "Failed to sign out",
                operation="sign_out",
                original_error=e,
            ) from e


@lru_cache
def get_auth_gateway() -> AuthGateway:
    """Process-wide gateway, overridable in tests via dependency_overrides."""
    return AuthGateway()
