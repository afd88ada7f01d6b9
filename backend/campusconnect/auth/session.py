import secrets
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

# Keys of the per-client storage mapping
ACCESS_CODE_KEY = "accessCode"
USER_ROLE_KEY = "userRole"
IS_AUTHENTICATED_KEY = "isAuthenticated"
SESSION_TIMESTAMP_KEY = "sessionTimestamp"

STORAGE_KEYS = (ACCESS_CODE_KEY, USER_ROLE_KEY, IS_AUTHENTICATED_KEY, SESSION_TIMESTAMP_KEY)


class Role(str, Enum):
    ADMIN = "admin"
    OFFICE = "office"
    STUDENT = "student"


DASHBOARD_PATHS = {
    Role.ADMIN: "/admin",
    Role.OFFICE: "/office",
    Role.STUDENT: "/student",
}

ACCESS_GATE_PATH = "/"


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class SessionContext:
    """Who is using the app, as established at the access gate."""
    access_code: str
    user_role: str
    is_authenticated: bool
    session_timestamp: int

    @classmethod
    def create(cls, access_code: str, role: Role) -> "SessionContext":
        return cls(
            access_code=access_code,
            user_role=role.value,
            is_authenticated=True,
            session_timestamp=_now_ms(),
        )

    def to_storage(self) -> Dict[str, str]:
        return {
            ACCESS_CODE_KEY: self.access_code,
            USER_ROLE_KEY: self.user_role,
            IS_AUTHENTICATED_KEY: "true" if self.is_authenticated else "false",
            SESSION_TIMESTAMP_KEY: str(self.session_timestamp),
        }

    @classmethod
    def from_storage(cls, storage: Optional[Dict[str, str]]) -> Optional["SessionContext"]:
        """Rebuild a session; any missing key means there is no session."""
        if not storage or not all(storage.get(key) for key in STORAGE_KEYS):
            return None
        try:
            timestamp = int(storage[SESSION_TIMESTAMP_KEY])
        except ValueError:
            return None
        return cls(
            access_code=storage[ACCESS_CODE_KEY],
            user_role=storage[USER_ROLE_KEY],
            is_authenticated=storage[IS_AUTHENTICATED_KEY] == "true",
            session_timestamp=timestamp,
        )

    def is_valid(self) -> bool:
        # No expiry: an authenticated session stays valid until destroyed
        return self.is_authenticated

    @property
    def role(self) -> Optional[Role]:
        try:
            return Role(self.user_role)
        except ValueError:
            return None


class SessionStore:
    """Holds one storage mapping per session token."""

    def __init__(self):
        self._storage: Dict[str, Dict[str, str]] = {}
        self._lock = threading.Lock()

    def create(self, context: SessionContext) -> str:
        token = secrets.token_urlsafe(32)
        with self._lock:
            self._storage[token] = context.to_storage()
        return token

    def read(self, token: Optional[str]) -> Optional[SessionContext]:
        if not token:
            return None
        with self._lock:
            storage = self._storage.get(token)
            storage = dict(storage) if storage is not None else None
        return SessionContext.from_storage(storage)

    def refresh(self, token: str) -> Optional[SessionContext]:
        with self._lock:
            storage = self._storage.get(token)
            if storage is None:
                return None
            storage[SESSION_TIMESTAMP_KEY] = str(_now_ms())
            storage = dict(storage)
        return SessionContext.from_storage(storage)

    def destroy(self, token: Optional[str]) -> None:
        if not token:
            return
        with self._lock:
            self._storage.pop(token, None)

    def raw(self, token: str) -> Optional[Dict[str, str]]:
        with self._lock:
            storage = self._storage.get(token)
            return dict(storage) if storage is not None else None


session_store = SessionStore()

def get_session_store() -> SessionStore:
    """FastAPI dependency provider for the session store."""
    return session_store
