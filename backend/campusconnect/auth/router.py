import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse

from campusconnect.auth.dependencies import get_session_token
from campusconnect.auth.schemas import AccessRequest, AccessResponse, AccessGateResponse, SessionResponse
from campusconnect.auth.service import auth_service
from campusconnect.auth.session import DASHBOARD_PATHS, Role, SessionStore, get_session_store

logger = logging.getLogger(__name__)

INVALID_CODE_MESSAGE = "Invalid access code. Please try again."

router = APIRouter(
    tags=["access"]
)


@router.get("/", response_model=AccessGateResponse)
def access_gate(
    token: Optional[str] = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
):
    """
    The access gate. A caller that already holds a valid session is sent
    straight to the dashboard for its role.
    """
    session = store.read(token)
    if session is not None and session.is_valid() and session.role is not None:
        return RedirectResponse(url=DASHBOARD_PATHS[session.role], status_code=303)

    return {
        "page": "access",
        "message": "Enter your access code to continue.",
        "roles": [role.value for role in Role],
    }


@router.post("/api/access", response_model=AccessResponse)
def enter_access_code(request: AccessRequest, store: SessionStore = Depends(get_session_store)):
    """Exchange an access code for a session token scoped to the code's role."""
    result = auth_service.enter(store, request.access_code)
    if result is None:
        raise HTTPException(status_code=401, detail=INVALID_CODE_MESSAGE)

    token, session = result
    return {
        'success': True,
        'message': 'Access granted',
        'role': session.user_role,
        'token': token,
        'redirect': DASHBOARD_PATHS[session.role],
        'session': SessionResponse(**vars(session)),
    }


@router.get("/api/access/session", response_model=SessionResponse)
def read_session(
    token: Optional[str] = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
):
    """Return the caller's session as held in storage."""
    session = store.read(token)
    if session is None:
        raise HTTPException(status_code=401, detail="No active session")
    return SessionResponse(**vars(session))


@router.post("/api/access/logout", response_model=AccessResponse)
def logout(
    token: Optional[str] = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
):
    """Destroy the caller's session."""
    auth_service.leave(store, token)
    return {
        'success': True,
        'message': 'Logged out',
        'redirect': '/',
    }
