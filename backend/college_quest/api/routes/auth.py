"""
OAuth Callback and Sign-out Routes

The browser lands on /auth/callback after the provider's consent screen.
The code is exchanged for a session and the account is checked against the
allowed-email list before the user is sent back to the frontend with the
session tokens in the URL fragment.
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from fastapi.security import HTTPAuthorizationCredentials

from college_quest.api.dependencies import AllowedEmailRepoDep, security
from college_quest.config.settings import settings
from college_quest.infrastructure.exceptions import AuthProviderError
from college_quest.infrastructure.services.auth_gateway import (
    AuthGateway,
    AuthSession,
    get_auth_gateway,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def frontend_redirect(path: str) -> RedirectResponse:
    base = settings.frontend_url.rstrip("/")
    return RedirectResponse(f"{base}{path}", status_code=302)


def safe_next_path(next_path: Optional[str]) -> str:
    """Only same-site absolute paths; anything else goes home."""
    if not next_path or not next_path.startswith("/") or next_path.startswith("//"):
        return "/"
    return next_path.split("#", 1)[0]


def session_redirect(path: str, session: AuthSession) -> RedirectResponse:
    """
    Hand the new session to the frontend in the URL fragment.

    Keys match the implicit-flow fragment the Supabase JS client reads on
    load.
    """
    tokens = {
        "access_token": session.access_token,
        "token_type": session.token_type,
    }
    if session.refresh_token:
        tokens["refresh_token"] = session.refresh_token
    if session.expires_in is not None:
        tokens["expires_in"] = session.expires_in

    response = frontend_redirect(f"{path}#{urlencode(tokens)}")
    response.headers["Cache-Control"] = "no-store"
    return response


@router.get("/callback")
async def oauth_callback(
    allowed_emails: AllowedEmailRepoDep,
    code: Optional[str] = Query(None),
    next_path: Optional[str] = Query("/", alias="next"),
    code_verifier: Optional[str] = Query(None),
    gateway: AuthGateway = Depends(get_auth_gateway),
):
    if not code:
        return frontend_redirect("/login?error=auth")

    try:
        session = await gateway.exchange_code(code, code_verifier)
    except AuthProviderError:
        return frontend_redirect("/login?error=auth")

    if not session.email or not await allowed_emails.is_allowed(session.email):
        logger.warning(f"Sign-in refused for {session.email or session.user_id}")
        try:
            await gateway.sign_out(session.access_token)
        except AuthProviderError as e:
            logger.error(f"Could not revoke refused session {session.user_id}: {e.message}")
        return frontend_redirect("/login?error=unauthorized")

    logger.info(f"User {session.user_id} signed in")
    return session_redirect(safe_next_path(next_path), session)


@router.api_route("/signout", methods=["GET", "POST"])
async def sign_out(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    gateway: AuthGateway = Depends(get_auth_gateway),
):
    """Revoke the bearer's session, then return to the login page."""
    if credentials:
        try:
            await gateway.sign_out(credentials.credentials)
        except AuthProviderError as e:
            logger.warning(f"Sign-out not confirmed by provider: {e.message}")
    return frontend_redirect("/login")
