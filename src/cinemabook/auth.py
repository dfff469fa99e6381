"""Logged-in session: bearer token and user, kept in a JSON file."""

import json
import logging
import os
from pathlib import Path
from typing import Optional

from cinemabook.config import AUTH_PATH
from cinemabook.errors import AuthRequired, PermissionDenied
from cinemabook.messages import PERMISSION_DENIED
from cinemabook.models import User

logger = logging.getLogger(__name__)


class AuthStore:
    def __init__(self, path: Path = AUTH_PATH):
        self.path = Path(path)
        self._token: Optional[str] = None
        self._user: Optional[User] = None
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            return
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {e}")
            return
        self._token = data.get("token") or None
        if data.get("user"):
            self._user = User.model_validate(data["user"])

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "token": self._token,
            "user": self._user.to_api() if self._user else None,
        }
        # owner-only: the file holds a bearer token
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.chmod(self.path, 0o600)

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def user(self) -> Optional[User]:
        return self._user

    def set_token(self, token: str) -> None:
        self._token = token
        self._save()

    def set_user(self, user: User) -> None:
        self._user = user
        self._save()

    def logout(self) -> None:
        self._token = None
        self._user = None
        if self.path.exists():
            self.path.unlink()
        logger.info("Logged out")

    def is_authenticated(self) -> bool:
        return bool(self._token)

    def has_role(self, *roles: str) -> bool:
        return self._user is not None and self._user.role in roles

    def require_login(self) -> User | None:
        if not self.is_authenticated():
            raise AuthRequired()
        return self._user

    def require_role(self, *roles: str) -> User:
        """Logged in and holding one of ``roles``."""
        self.require_login()
        if not self.has_role(*roles):
            raise PermissionDenied("role not allowed", PERMISSION_DENIED)
        return self._user
