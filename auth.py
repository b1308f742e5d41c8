import hmac
from typing import Optional, Protocol

from config import settings


class Authenticator(Protocol):
    def authenticate(self, username: str, password: str) -> bool:
        ...


class SettingsAuthenticator:
    """Checks admin credentials against the configured username/password."""

    def __init__(self, username: Optional[str] = None, password: Optional[str] = None) -> None:
        self.username = settings.admin_username if username is None else username
        self.password = settings.admin_password if password is None else password

    def authenticate(self, username: str, password: str) -> bool:
        user_ok = hmac.compare_digest((username or "").encode(), self.username.encode())
        pass_ok = hmac.compare_digest((password or "").encode(), self.password.encode())
        return user_ok and pass_ok


class AllowAll:
    """Authenticator for trusted callers (tests, scripts)."""

    def authenticate(self, username: str, password: str) -> bool:
        return True
