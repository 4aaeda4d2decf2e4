"""
Anonymous session endpoints.

Every visitor gets an anonymous identity on first load. The session id is
kept in an httpOnly cookie for the page lifetime; there is no login,
logout or password.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Request, Response

from jobboard.api.deps import get_identity_provider
from jobboard.config import settings
from jobboard.models.session import AnonymousSession
from jobboard.schemas.auth import SessionResponse
from jobboard.services.identity import IdentityError, IdentityProvider

logger = logging.getLogger(__name__)
router = APIRouter()


def get_client_ip(request: Request) -> str:
    """
    Extract client IP address from request.
    
    Checks X-Forwarded-For header (for proxies/load balancers) first,
    falls back to direct client IP.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can be comma-separated list, take first IP
        return forwarded.split(",")[0].strip()
    
    return request.client.host if request.client else "unknown"


def _session_response(session: AnonymousSession) -> SessionResponse:
    return SessionResponse(session_id=str(session.id), created_at=session.created_at)


# Authentication Dependencies
async def get_current_session(
    auth_token: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
    identity: IdentityProvider = Depends(get_identity_provider)
) -> AnonymousSession:
    """
    Dependency to get the caller's anonymous session from the httpOnly cookie.
    
    Raises:
        HTTPException 401: If there is no cookie or the session is unknown
    """
    if not auth_token:
        raise HTTPException(
            status_code=401,
            detail="No session. Start one with POST /api/auth/anonymous."
        )
    
    try:
        session = await identity.resolve(auth_token)
    except IdentityError as e:
        logger.error(f"Error validating session: {str(e)}", exc_info=True)
        raise HTTPException(status_code=401, detail="Invalid session.")
    
    if not session:
        raise HTTPException(status_code=401, detail="Invalid session. Session not found.")
    
    return session


# Endpoints
@router.post("/anonymous", response_model=SessionResponse)
async def begin_anonymous_session(
    request: Request,
    response: Response,
    auth_token: Optional[str] = Cookie(None, alias=settings.session_cookie_name),
    identity: IdentityProvider = Depends(get_identity_provider)
):
    """
    Start (or resume) an anonymous session.
    
    A valid existing cookie is returned unchanged; otherwise a new session
    is issued and set as an httpOnly cookie.
    
    Returns:
        200: Session established
        500: Session could not be issued (not retried)
    """
    try:
        existing = await identity.resolve(auth_token) if auth_token else None
        if existing:
            return _session_response(existing)
        
        session_id = await identity.create_session(get_client_ip(request))
        session = await identity.resolve(session_id)
    except IdentityError as e:
        logger.error(f"Auth error: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=500,
            detail="Failed to start a session. Please reload the page."
        )
    
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        httponly=True,  # Prevents JavaScript access (XSS protection)
        samesite="lax",  # CSRF protection
        max_age=86400 * settings.session_cookie_max_age_days,
        secure=settings.session_cookie_secure,
    )
    
    return _session_response(session)


@router.get("/session", response_model=SessionResponse)
async def read_session(current_session: AnonymousSession = Depends(get_current_session)):
    """Return the caller's session identity."""
    return _session_response(current_session)
