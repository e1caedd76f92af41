"""OAuth2 / OpenID Connect authentication module.

This module handles the sign-in flow with the identity provider and keeps the
signed-in user's email in a signed session cookie. Hazard reports are
attributed to that email.
Uses Authlib for OAuth2 integration and itsdangerous for secure session management.
"""

import logging
import secrets
from typing import Optional
from datetime import datetime

from fastapi import APIRouter, Request, HTTPException, Cookie
from fastapi.responses import RedirectResponse, JSONResponse
from authlib.integrations.starlette_client import OAuth, OAuthError
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from logic.config import (
    OAUTH_CLIENT_ID,
    OAUTH_CLIENT_SECRET,
    OAUTH_METADATA_URL,
    OAUTH_REDIRECT_URI,
    SESSION_SECRET_KEY as CONFIGURED_SECRET_KEY,
)

log = logging.getLogger(__name__)

router = APIRouter()

SESSION_SECRET_KEY = CONFIGURED_SECRET_KEY
if not SESSION_SECRET_KEY:
    SESSION_SECRET_KEY = secrets.token_urlsafe(32)
    log.warning("SESSION_SECRET_KEY not set. Using temporary key. Set this in .env for production.")

# Session serializer for secure cookie signing
serializer = URLSafeTimedSerializer(SESSION_SECRET_KEY)

# Session configuration
SESSION_MAX_AGE = 60 * 60 * 24 * 7  # 7 days in seconds
COOKIE_NAME = "session"

oauth = OAuth()

if OAUTH_CLIENT_ID and OAUTH_CLIENT_SECRET:
    oauth.register(
        name="provider",
        client_id=OAUTH_CLIENT_ID,
        client_secret=OAUTH_CLIENT_SECRET,
        server_metadata_url=OAUTH_METADATA_URL,
        client_kwargs={"scope": "openid email profile"},
    )
else:
    log.warning("OAuth sign-in not configured. Set OAUTH_CLIENT_ID and OAUTH_CLIENT_SECRET in .env")


# In-memory user storage
user_sessions: dict[str, dict] = {}


def create_session(user_data: dict) -> str:
    """Create a secure session token for the user.

    Args:
        user_data: Dictionary containing user information (email, name, picture).

    Returns:
        Signed session token string.
    """
    session_id = secrets.token_urlsafe(32)
    user_sessions[session_id] = {
        "user": user_data,
        "created_at": datetime.now().isoformat(),
    }
    return serializer.dumps(session_id)


def get_session_from_cookie(session_cookie: Optional[str]) -> Optional[dict]:
    """Validate and retrieve session data from signed cookie.

    Args:
        session_cookie: Signed session cookie value.

    Returns:
        User session data if valid, None otherwise.
    """
    if not session_cookie:
        return None

    try:
        session_id = serializer.loads(session_cookie, max_age=SESSION_MAX_AGE)
        return user_sessions.get(session_id)
    except (BadSignature, SignatureExpired):
        return None


def delete_session(session_cookie: Optional[str]) -> None:
    if not session_cookie:
        return

    try:
        session_id = serializer.loads(session_cookie, max_age=SESSION_MAX_AGE)
        user_sessions.pop(session_id, None)
    except (BadSignature, SignatureExpired):
        pass


def get_current_user_email(session: Optional[str] = Cookie(None, alias=COOKIE_NAME)) -> Optional[str]:
    """Dependency returning the signed-in user's email.

    Returns:
        Email address, or None when nobody is signed in.
    """
    session_data = get_session_from_cookie(session)
    if not session_data:
        return None
    return session_data["user"].get("email")


@router.get("/login")
async def login(request: Request):
    """Start the sign-in flow.

    Returns:
        RedirectResponse to the identity provider's authorization page.

    Raises:
        HTTPException: If sign-in is not configured.
    """
    if not OAUTH_CLIENT_ID or not OAUTH_CLIENT_SECRET:
        raise HTTPException(
            status_code=500,
            detail="Sign-in not configured. Please set OAUTH_CLIENT_ID and OAUTH_CLIENT_SECRET.",
        )

    return await oauth.provider.authorize_redirect(request, OAUTH_REDIRECT_URI)


@router.get("/callback")
async def auth_callback(request: Request):
    """Handle the provider callback.

    Exchanges the authorization code for tokens, reads the user's claims and
    sets a signed session cookie.

    Returns:
        RedirectResponse to the map page with session cookie set.

    Raises:
        HTTPException: If the exchange fails or the provider returns no email.
    """
    try:
        token = await oauth.provider.authorize_access_token(request)
    except OAuthError as e:
        log.warning("OAuth callback error: %s", e)
        raise HTTPException(status_code=400, detail="Authentication failed")

    user_info = token.get("userinfo") or {}
    if not user_info.get("email"):
        raise HTTPException(status_code=400, detail="Authentication failed")

    user_data = {
        "id": user_info.get("sub"),
        "email": user_info["email"],
        "name": user_info.get("name"),
        "picture": user_info.get("picture"),
    }
    session_token = create_session(user_data)
    log.info("User signed in: %s", user_data["email"])

    response = RedirectResponse(url="/", status_code=303)
    response.set_cookie(
        key=COOKIE_NAME,
        value=session_token,
        max_age=SESSION_MAX_AGE,
        httponly=True,
        secure=False,  # Set to True in production with HTTPS
        samesite="lax",
    )
    return response


@router.post("/logout")
async def logout(session: Optional[str] = Cookie(None, alias=COOKIE_NAME)):
    """Log out the current user.

    Deletes the user session and clears the session cookie.
    """
    delete_session(session)

    response = JSONResponse({"success": True, "message": "Logged out successfully"})
    response.delete_cookie(key=COOKIE_NAME)

    return response


@router.get("/me")
async def get_current_user(session: Optional[str] = Cookie(None, alias=COOKIE_NAME)):
    """Get current authenticated user information.

    Returns:
        JSON with user data if authenticated, or null user if not.
    """
    session_data = get_session_from_cookie(session)

    if session_data:
        return {"authenticated": True, "user": session_data["user"]}

    return {"authenticated": False, "user": None}
