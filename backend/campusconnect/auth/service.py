import logging
from typing import Dict, Optional, Tuple

from campusconnect.auth.session import Role, SessionContext, SessionStore
from campusconnect.config.settings import settings

logger = logging.getLogger(__name__)

PERMISSIONS = {
    "read": {Role.ADMIN, Role.OFFICE, Role.STUDENT},
    "insert": {Role.ADMIN},
    "update": {Role.ADMIN},
    "delete": {Role.ADMIN},
}


def access_codes() -> Dict[str, Role]:
    return {
        settings.ACCESS_CODE_ADMIN: Role.ADMIN,
        settings.ACCESS_CODE_OFFICE: Role.OFFICE,
        settings.ACCESS_CODE_STUDENT: Role.STUDENT,
    }


def validate_code(code: Optional[str]) -> Optional[Role]:
    """Map an access code to its role, or None when it matches none of them."""
    if not code:
        return None
    return access_codes().get(code)


def has_permission(role: Optional[str], permission: str) -> bool:
    try:
        return Role(role) in PERMISSIONS.get(permission, set())
    except ValueError:
        return False


class AuthService:
    """Service for the access gate and session lifecycle."""

    @staticmethod
    def enter(store: SessionStore, access_code: str) -> Optional[Tuple[str, SessionContext]]:
        """
        Validate an access code and open a session for its role.

        Returns:
            Optional[Tuple[str, SessionContext]]: session token and context, or None
            when the code is not recognised.
        """
        role = validate_code(access_code)
        if role is None:
            return None
        context = SessionContext.create(access_code, role)
        token = store.create(context)
        logger.info(f"Session created successfully for role: {role.value}")
        return token, context

    @staticmethod
    def leave(store: SessionStore, token: Optional[str]) -> None:
        store.destroy(token)

auth_service = AuthService()
