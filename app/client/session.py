"""Client-side login state for the finance API.

``SessionManager`` keeps the token and user profile in an explicit
``SessionState`` value. Persistence goes through a ``SessionStorage`` passed in
by the caller, so nothing is read from or written to ambient global storage.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

import requests

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10


class AuthError(Exception):
    pass


@dataclass(slots=True, frozen=True)
class SessionUser:
    id: int
    email: str
    name: str
    role: str
    permission: str

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "SessionUser":
        return cls(
            id=payload["id"],
            email=payload.get("email") or "",
            name=payload.get("name") or "",
            role=str(payload.get("role", "user")).lower(),
            permission=str(payload.get("permission", "read")).lower(),
        )


@dataclass(slots=True, frozen=True)
class SessionState:
    token: str | None = None
    user: SessionUser | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token) and self.user is not None


ANONYMOUS = SessionState()


class SessionStorage(ABC):
    @abstractmethod
    def load(self) -> SessionState:
        ...

    @abstractmethod
    def save(self, state: SessionState) -> None:
        ...

    @abstractmethod
    def clear(self) -> None:
        ...


class FileSessionStorage(SessionStorage):
    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> SessionState:
        if not self.path.exists():
            return ANONYMOUS
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            return ANONYMOUS

        token = payload.get("token")
        user_data = payload.get("user")
        if not token or not isinstance(user_data, dict):
            return ANONYMOUS
        try:
            return SessionState(token=token, user=SessionUser.from_payload(user_data))
        except KeyError:
            return ANONYMOUS

    def save(self, state: SessionState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"token": state.token, "user": asdict(state.user) if state.user else None}
        self.path.write_text(json.dumps(payload), encoding="utf-8")

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class FinanceApiClient:
    def __init__(self, base_url: str, http: requests.Session | None = None, timeout: int = DEFAULT_TIMEOUT) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout

    @staticmethod
    def _error_message(response: requests.Response, fallback: str) -> str:
        try:
            detail = response.json().get("detail")
        except ValueError:
            return fallback
        return detail if isinstance(detail, str) and detail else fallback

    def login(self, email: str, password: str) -> dict[str, Any]:
        response = self.http.post(
            f"{self.base_url}/api/auth/login",
            json={"email": email, "password": password},
            timeout=self.timeout,
        )
        if response.status_code != 200:
            raise AuthError(self._error_message(response, "Login failed"))
        return response.json()

    def verify_session(self, token: str) -> dict[str, Any]:
        response = self.http.get(
            f"{self.base_url}/api/auth/verify",
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
        )
        if response.status_code != 200:
            raise AuthError(self._error_message(response, "Session verification failed"))
        return response.json()

    def logout(self, token: str) -> None:
        response = self.http.post(
            f"{self.base_url}/api/auth/logout",
            headers={"Authorization": f"Bearer {token}"},
            timeout=self.timeout,
        )
        if response.status_code not in (200, 401):
            raise AuthError(self._error_message(response, "Logout failed"))


class SessionManager:
    def __init__(self, api: FinanceApiClient, storage: SessionStorage) -> None:
        self.api = api
        self.storage = storage
        self.state = ANONYMOUS

    def restore(self) -> SessionState:
        stored = self.storage.load()
        if not stored.is_authenticated:
            self.state = ANONYMOUS
            return self.state

        try:
            payload = self.api.verify_session(stored.token)
        except (AuthError, requests.RequestException) as exc:
            logger.info("Stored session rejected: %s", exc)
            self.storage.clear()
            self.state = ANONYMOUS
            return self.state

        self.state = SessionState(token=stored.token, user=SessionUser.from_payload(payload["user"]))
        self.storage.save(self.state)
        return self.state

    def login(self, email: str, password: str) -> SessionState:
        try:
            payload = self.api.login(email, password)
        except requests.RequestException as exc:
            raise AuthError("Login failed") from exc

        self.state = SessionState(token=payload["token"], user=SessionUser.from_payload(payload["user"]))
        self.storage.save(self.state)
        return self.state

    def logout(self) -> SessionState:
        token = self.state.token or self.storage.load().token
        if token:
            try:
                self.api.logout(token)
            except (AuthError, requests.RequestException) as exc:
                logger.info("Server-side logout failed: %s", exc)

        self.storage.clear()
        self.state = ANONYMOUS
        return self.state
