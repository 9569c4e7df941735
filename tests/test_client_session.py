from types import SimpleNamespace

import pytest
import requests

from app.client.session import (
    AuthError,
    FileSessionStorage,
    FinanceApiClient,
    SessionManager,
    SessionState,
    SessionUser,
)

USER_PAYLOAD = {"id": 1, "email": "kofi@biz.gh", "name": "Kofi", "role": "ADMIN", "permission": "WRITE"}


class FakeApi:
    def __init__(
        self,
        verify_error: Exception | None = None,
        login_error: Exception | None = None,
        logout_error: Exception | None = None,
    ) -> None:
        self.verify_error = verify_error
        self.login_error = login_error
        self.logout_error = logout_error
        self.verified_tokens: list[str] = []
        self.revoked_tokens: list[str] = []

    def login(self, email: str, password: str) -> dict:
        if self.login_error is not None:
            raise self.login_error
        return {"token": "tok-1", "user": USER_PAYLOAD}

    def verify_session(self, token: str) -> dict:
        self.verified_tokens.append(token)
        if self.verify_error is not None:
            raise self.verify_error
        return {"user": {**USER_PAYLOAD, "name": "Kofi Mensah"}}

    def logout(self, token: str) -> None:
        self.revoked_tokens.append(token)
        if self.logout_error is not None:
            raise self.logout_error


@pytest.fixture
def storage(tmp_path) -> FileSessionStorage:
    return FileSessionStorage(tmp_path / "session.json")


def _stored_state() -> SessionState:
    return SessionState(token="tok-0", user=SessionUser.from_payload(USER_PAYLOAD))


def test_login_saves_state_with_lowercase_permission(storage) -> None:
    manager = SessionManager(FakeApi(), storage)

    state = manager.login("kofi@biz.gh", "secret")

    assert state.is_authenticated
    assert state.user.permission == "write"
    assert state.user.role == "admin"
    assert storage.load() == state


def test_restore_without_stored_session_is_anonymous(storage) -> None:
    api = FakeApi()
    manager = SessionManager(api, storage)

    state = manager.restore()

    assert not state.is_authenticated
    assert api.verified_tokens == []


def test_restore_refreshes_stored_user(storage) -> None:
    storage.save(_stored_state())
    api = FakeApi()

    state = SessionManager(api, storage).restore()

    assert api.verified_tokens == ["tok-0"]
    assert state.token == "tok-0"
    assert state.user.name == "Kofi Mensah"
    assert storage.load().user.name == "Kofi Mensah"


def test_restore_clears_rejected_session(storage) -> None:
    storage.save(_stored_state())

    state = SessionManager(FakeApi(verify_error=AuthError("Session expired")), storage).restore()

    assert not state.is_authenticated
    assert not storage.path.exists()


def test_restore_clears_session_when_server_unreachable(storage) -> None:
    storage.save(_stored_state())

    state = SessionManager(FakeApi(verify_error=requests.ConnectionError("down")), storage).restore()

    assert not state.is_authenticated


def test_login_network_failure_raises_auth_error(storage) -> None:
    manager = SessionManager(FakeApi(login_error=requests.ConnectionError("down")), storage)

    with pytest.raises(AuthError, match="Login failed"):
        manager.login("kofi@biz.gh", "secret")

    assert storage.load() == SessionState()


def test_logout_revokes_token_and_clears_storage(storage) -> None:
    api = FakeApi()
    manager = SessionManager(api, storage)
    manager.login("kofi@biz.gh", "secret")

    state = manager.logout()

    assert api.revoked_tokens == ["tok-1"]
    assert state == SessionState()
    assert not storage.path.exists()


def test_logout_revokes_restored_token(storage) -> None:
    storage.save(_stored_state())
    api = FakeApi()

    SessionManager(api, storage).logout()

    assert api.revoked_tokens == ["tok-0"]
    assert not storage.path.exists()


def test_logout_clears_storage_when_server_unreachable(storage) -> None:
    api = FakeApi(logout_error=requests.ConnectionError("down"))
    manager = SessionManager(api, storage)
    manager.login("kofi@biz.gh", "secret")

    state = manager.logout()

    assert state == SessionState()
    assert not storage.path.exists()


def test_logout_without_session_skips_server(storage) -> None:
    api = FakeApi()

    SessionManager(api, storage).logout()

    assert api.revoked_tokens == []


def test_corrupt_session_file_loads_as_anonymous(storage) -> None:
    storage.path.write_text("{not json", encoding="utf-8")

    assert storage.load() == SessionState()


class FakeHttp:
    def __init__(self, response) -> None:
        self.response = response
        self.calls: list[tuple[str, dict]] = []

    def post(self, url: str, **kwargs):
        self.calls.append((url, kwargs))
        return self.response

    def get(self, url: str, **kwargs):
        self.calls.append((url, kwargs))
        return self.response


def _response(status_code: int, payload=None):
    def json():
        if payload is None:
            raise ValueError("no body")
        return payload

    return SimpleNamespace(status_code=status_code, json=json)


def test_api_client_surfaces_server_error_message() -> None:
    http = FakeHttp(_response(401, {"detail": "Invalid email or password"}))
    api = FinanceApiClient("http://finance.local/", http=http)

    with pytest.raises(AuthError, match="Invalid email or password"):
        api.login("kofi@biz.gh", "wrong")

    assert http.calls[0][0] == "http://finance.local/api/auth/login"


def test_api_client_falls_back_to_generic_message() -> None:
    api = FinanceApiClient("http://finance.local", http=FakeHttp(_response(500)))

    with pytest.raises(AuthError, match="Login failed"):
        api.login("kofi@biz.gh", "secret")


def test_api_client_sends_bearer_token() -> None:
    http = FakeHttp(_response(200, {"user": USER_PAYLOAD}))
    api = FinanceApiClient("http://finance.local", http=http)

    assert api.verify_session("tok-9") == {"user": USER_PAYLOAD}
    assert http.calls[0][1]["headers"] == {"Authorization": "Bearer tok-9"}


def test_api_client_logout_posts_bearer_token() -> None:
    http = FakeHttp(_response(200, {"status": "ok"}))
    api = FinanceApiClient("http://finance.local", http=http)

    api.logout("tok-9")

    assert http.calls[0][0] == "http://finance.local/api/auth/logout"
    assert http.calls[0][1]["headers"] == {"Authorization": "Bearer tok-9"}
