import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from fastapi import Depends, Header, HTTPException

from campusconnect.auth.service import has_permission
from campusconnect.auth.session import (
    ACCESS_GATE_PATH, Role, SessionContext, SessionStore, get_session_store
)

logger = logging.getLogger(__name__)


class GuardRedirect(Exception):
    """Raised when a request must be sent back to the access gate."""

    def __init__(self, location: str = ACCESS_GATE_PATH):
        self.location = location
        super().__init__(location)


class GuardState(Enum):
    CHECKING = "checking"
    RESOLVED = "resolved"


@dataclass
class GuardOutcome:
    state: GuardState
    session: Optional[SessionContext] = None
    redirect_to: Optional[str] = None

    @property
    def authorized(self) -> bool:
        return self.state is GuardState.RESOLVED and self.redirect_to is None


class RouteGuard:
    """Role check run before any protected view is produced."""

    def __init__(self, allowed_roles: Iterable[Role]):
        self.allowed_roles = {Role(role) for role in allowed_roles}
        self.state = GuardState.CHECKING

    def check(self, store: SessionStore, token: Optional[str]) -> GuardOutcome:
        self.state = GuardState.CHECKING
        session = store.read(token)

        if session is None or not session.is_valid():
            store.destroy(token)
            return GuardOutcome(state=self.state, redirect_to=ACCESS_GATE_PATH)

        if session.role is None or session.role not in self.allowed_roles:
            store.destroy(token)
            return GuardOutcome(state=self.state, redirect_to=ACCESS_GATE_PATH)

        self.state = GuardState.RESOLVED
        return GuardOutcome(state=self.state, session=session)


def get_session_token(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """Extract the session token from a 'Bearer <token>' authorization header."""
    if not authorization:
        return None
    parts = authorization.split(' ')
    if len(parts) != 2 or parts[0] != 'Bearer' or not parts[1]:
        return None
    return parts[1]


def get_current_session(
    token: Optional[str] = Depends(get_session_token),
    store: SessionStore = Depends(get_session_store),
) -> Optional[SessionContext]:
    """The caller's session, or None. Never redirects."""
    return store.read(token)


def require_roles(*roles: Role):
    """
    Build a dependency that only lets sessions with one of ``roles`` through.

    Anything else clears the caller's session and redirects to the access gate.
    """
    def dependency(
        token: Optional[str] = Depends(get_session_token),
        store: SessionStore = Depends(get_session_store),
    ) -> SessionContext:
        outcome = RouteGuard(roles).check(store, token)
        if not outcome.authorized:
            logger.info(f"Route guard redirecting to {outcome.redirect_to} (allowed roles: {[r.value for r in roles]})")
            raise GuardRedirect(outcome.redirect_to)
        return outcome.session

    return dependency


def require_permission(permission: str, *roles: Role):
    """Guard for ``roles`` plus an action-level permission check."""
    guard = require_roles(*roles) if roles else require_roles(*Role)

    def dependency(session: SessionContext = Depends(guard)) -> SessionContext:
        if not has_permission(session.user_role, permission):
            raise HTTPException(status_code=403, detail=f"You do not have permission to {permission} records.")
        return session

    return dependency
