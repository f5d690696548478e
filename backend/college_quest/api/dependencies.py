"""
API Dependencies

FastAPI dependency injection for authentication and common services.

Security: JWT tokens are verified cryptographically using Supabase JWKS (ES256)
with HS256 fallback via the JWT secret. Never decode without verification.
"""

import logging
import secrets
from dataclasses import dataclass
from typing import Annotated, Optional
from uuid import UUID

import jwt
from jwt import PyJWKClient
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from college_quest.config.settings import get_settings
from college_quest.infrastructure.db.dependencies import AllowedEmailRepoDep, ProfileRepoDep


logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

# PyJWKClient caches keys internally and refreshes them periodically.
_jwks_client: Optional[PyJWKClient] = None


def _get_jwks_client() -> PyJWKClient:
    """Return a singleton PyJWKClient for the Supabase JWKS endpoint."""
    global _jwks_client
    if _jwks_client is None:
        settings = get_settings()
        jwks_url = f"{settings.supabase_url}/auth/v1/.well-known/jwks.json"
        _jwks_client = PyJWKClient(jwks_url, cache_keys=True)
    return _jwks_client


def _decode_with_jwks(token: str, issuer: str) -> dict:
    """Verify JWT using Supabase JWKS endpoint (ES256 asymmetric keys)."""
    client = _get_jwks_client()
    signing_key = client.get_signing_key_from_jwt(token)
    return jwt.decode(
        token,
        signing_key.key,
        algorithms=["ES256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


def _decode_with_secret(token: str, secret: str, issuer: str) -> dict:
    """Verify JWT using HS256 symmetric secret (legacy Supabase signing)."""
    return jwt.decode(
        token,
        secret,
        algorithms=["HS256"],
        issuer=issuer,
        audience="authenticated",
        options={"require": ["exp", "sub", "iss"]},
    )


def verify_token(token: str) -> dict:
    """
    Verify a Supabase access token and return its claims.

    Verification strategy (in order):
      1. JWKS (ES256), which follows key rotation.
      2. HS256 with ``SUPABASE_JWT_SECRET`` for legacy signing.

    Raises:
        HTTPException 401: token expired, invalid, or without a user id.
    """
    settings = get_settings()
    issuer = f"{settings.supabase_url}/auth/v1"

    payload: Optional[dict] = None

    try:
        payload = _decode_with_jwks(token, issuer)
    except (jwt.exceptions.PyJWKClientError, jwt.InvalidTokenError) as jwks_err:
        logger.debug("JWKS verification failed, trying HS256 fallback: %s", jwks_err)

    if payload is None and settings.supabase_jwt_secret:
        try:
            payload = _decode_with_secret(
                token, settings.supabase_jwt_secret, issuer
            )
        except jwt.ExpiredSignatureError:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token has expired",
            )
        except jwt.InvalidTokenError as e:
            logger.warning("HS256 JWT verification also failed: %s", e)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or unverifiable token",
        )

    sub = payload.get("sub")
    try:
        UUID(str(sub))
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token: missing user ID",
        )

    return payload


@dataclass
class AuthenticatedUser:
    """Identity taken from verified token claims."""
    id: UUID
    email: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None

    @classmethod
    def from_claims(cls, claims: dict) -> "AuthenticatedUser":
        metadata = claims.get("user_metadata") or {}
        return cls(
            id=UUID(str(claims["sub"])),
            email=claims.get("email"),
            display_name=metadata.get("full_name") or metadata.get("name"),
            avatar_url=metadata.get("avatar_url"),
        )


def _require_credentials(
    credentials: Optional[HTTPAuthorizationCredentials],
) -> str:
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return credentials.credentials


async def get_token_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AuthenticatedUser:
    """
    Identity from a verified token, before the allow-list check.

    Raises:
        HTTPException 401: token missing, expired, or invalid.
    """
    token = _require_credentials(credentials)
    return AuthenticatedUser.from_claims(verify_token(token))


async def get_current_user(
    allowed_emails: AllowedEmailRepoDep,
    user: AuthenticatedUser = Depends(get_token_user),
) -> AuthenticatedUser:
    """
    Verified caller whose email is on the allowed list.

    Checked on every request, not only at sign-in.

    Raises:
        HTTPException 401: token missing, expired, or invalid.
        HTTPException 403: email missing or not allowed.
    """
    if not user.email or not await allowed_emails.is_allowed(user.email):
        logger.warning(f"User {user.id} is not on the allowed email list")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is not allowed",
        )
    return user


async def get_current_user_id(
    user: AuthenticatedUser = Depends(get_current_user),
) -> UUID:
    """Authenticated user ID (``sub`` claim)."""
    return user.id


async def verify_admin(
    profiles: ProfileRepoDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> bool:
    """
    Gate for /api/admin routes.

    Accepts either the ADMIN_PASSWORD as bearer credential or a user token
    whose profile carries role "admin".
    """
    token = _require_credentials(credentials)
    settings = get_settings()

    # Use secrets.compare_digest for timing-attack resistance
    if settings.admin_password and secrets.compare_digest(
        token.encode(), settings.admin_password.encode()
    ):
        return True

    try:
        claims = verify_token(token)
    except HTTPException:
        logger.warning("Rejected admin request with invalid credentials")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )

    user = AuthenticatedUser.from_claims(claims)
    profile = await profiles.get(user.id)
    if profile is None or not profile.is_admin:
        logger.warning(f"User {user.id} attempted admin access without admin role")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )

    return True


CurrentUserDep = Annotated[AuthenticatedUser, Depends(get_current_user)]
CurrentUserIdDep = Annotated[UUID, Depends(get_current_user_id)]


# =============================================================================
# Re-export DB dependencies for a single import source
# Routers should import from api.dependencies, not db.dependencies directly.
# =============================================================================
from college_quest.infrastructure.db.dependencies import (  # noqa: E402, F401
    SessionDep,
    CollegeRepoDep,
    SchoolRepoDep,
    FavoriteRepoDep,
    FolderRepoDep,
)
