"""
Session credentials persisted between runs.

Only login and logout write here; every authenticated request reads the
token through SessionStore.token.
"""

import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from dashboard.logging_config import logger


@dataclass
class SessionCredentials:
    role: str
    username: str
    token: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


class SessionStore:
    """JSON-file backed credentials with an in-memory copy"""

    def __init__(self, path):
        self.path = Path(path)
        self._credentials: Optional[SessionCredentials] = None
        self._loaded = False

    def load(self) -> Optional[SessionCredentials]:
        """Read credentials from disk (once), returning None when absent or unreadable"""
        if not self._loaded:
            self._loaded = True
            self._credentials = self._read()
        return self._credentials

    def _read(self) -> Optional[SessionCredentials]:
        if not self.path.exists():
            return None
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
            return SessionCredentials(
                role=data.get("role") or "",
                username=data.get("username") or "",
                token=data.get("token") or "",
            )
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Could not load credentials from {self.path}: {e}")
            return None

    def save(self, credentials: SessionCredentials) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(asdict(credentials), f, indent=2)
        try:
            os.chmod(self.path, 0o600)
        except OSError:
            pass  # not supported on every platform
        self._credentials = credentials
        self._loaded = True

    def clear(self) -> None:
        self._credentials = None
        self._loaded = True
        if self.path.exists():
            self.path.unlink()

    @property
    def credentials(self) -> Optional[SessionCredentials]:
        return self.load()

    @property
    def token(self) -> Optional[str]:
        credentials = self.load()
        return credentials.token if credentials and credentials.token else None

    @property
    def role(self) -> Optional[str]:
        credentials = self.load()
        return credentials.role if credentials and credentials.role else None

    @property
    def username(self) -> Optional[str]:
        credentials = self.load()
        return credentials.username if credentials and credentials.username else None

    def has_session(self) -> bool:
        return bool(self.token and self.role)
