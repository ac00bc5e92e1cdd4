"""
Login, logout and the session guards around the dashboard.
"""

from typing import Optional

from dashboard.errors import AuthenticationFailed
from dashboard.gateway import RemoteGateway
from dashboard.logging_config import logger
from dashboard.session import SessionCredentials, SessionStore
from dashboard.view import Redirector


LOGIN_PAGE = "index.html"


class AuthService:
    """Owns every write to the session store"""

    def __init__(
        self,
        gateway: RemoteGateway,
        store: SessionStore,
        redirector: Redirector,
        notifier=None,
        login_page: str = LOGIN_PAGE,
    ):
        self.gateway = gateway
        self.store = store
        self.redirector = redirector
        self.notifier = notifier
        self.login_page = login_page

    async def login(self, username: str, password: str) -> SessionCredentials:
        """Authenticate and persist role, username and token"""
        data = await self.gateway.login(username, password)

        if not isinstance(data, dict) or not data.get("success"):
            message = (data or {}).get("message") if isinstance(data, dict) else None
            logger.warning(f"Login refused for {username}", extra={"event_type": "auth", "auth_success": False})
            raise AuthenticationFailed(message or "Invalid username or password")

        credentials = SessionCredentials(
            role=data.get("role") or "",
            username=data.get("username") or username,
            token=data.get("token") or "",
        )
        self.store.save(credentials)
        logger.info(f"Logged in as {credentials.username} ({credentials.role})",
                    extra={"event_type": "auth", "auth_success": True})
        return credentials

    def logout(self) -> None:
        self.store.clear()
        logger.info("Logged out", extra={"event_type": "auth"})
        self.redirector.redirect(self.login_page)

    def handle_unauthorized(self) -> None:
        """Server rejected the token: purge it and send the user to log in"""
        logger.warning("Server reported 401, clearing session", extra={"event_type": "auth"})
        self.store.clear()
        self.redirector.redirect(self.login_page)

    def require_session(self) -> bool:
        """Startup guard: redirect before anything loads when token or role is missing"""
        if self.store.has_session():
            return True
        logger.info("No stored session, redirecting to login")
        self.redirector.redirect(self.login_page)
        return False

    def require_admin(self) -> bool:
        """Admin dashboard guard: students are turned away"""
        if not self.require_session():
            return False
        if self.store.role != "admin":
            if self.notifier is not None:
                self.notifier.notify("error", "Access denied. Admin privileges required.")
            self.redirector.redirect(self.login_page)
            return False
        return True

    @property
    def current_user(self) -> Optional[SessionCredentials]:
        return self.store.credentials
