"""Тесты для credential_store модуля."""

import time
from pathlib import Path

import pytest

from admingateway.credential_store import (
    ACCESS_TOKEN_KEY,
    COOKIE_MAX_AGE,
    REFRESH_TOKEN_KEY,
    CookieChannel,
    CredentialStore,
    FileStorage,
    MemoryStorage,
    SessionState,
)

pytestmark = pytest.mark.unit


class TestCredentialStore:
    """Тесты CredentialStore."""

    def test_empty_by_default(self) -> None:
        """Отсутствие токенов допустимо."""
        store = CredentialStore()

        assert store.get() is None
        assert store.get_refresh() is None
        assert store.state is SessionState.EMPTY

    def test_set_then_get(self) -> None:
        store = CredentialStore()

        store.set("access-1", "refresh-1")

        assert store.get() == "access-1"
        assert store.get_refresh() == "refresh-1"
        assert store.state is SessionState.AUTHENTICATED

    def test_set_without_refresh_keeps_refresh(self) -> None:
        """Обновление access-токена не трогает refresh-токен."""
        store = CredentialStore()
        store.set("access-1", "refresh-1")

        store.set("access-2")

        assert store.get() == "access-2"
        assert store.get_refresh() == "refresh-1"

    def test_clear_is_idempotent(self) -> None:
        """Двойная очистка даёт то же состояние, что и одна."""
        store = CredentialStore()
        store.set("access-1", "refresh-1")

        store.clear()
        first = (store.get(), store.get_refresh(), store.state)
        store.clear()

        assert (store.get(), store.get_refresh(), store.state) == first
        assert first == (None, None, SessionState.CLEARED)

    def test_clear_on_empty_store(self) -> None:
        store = CredentialStore()

        store.clear()

        assert store.state is SessionState.CLEARED

    def test_authenticated_when_storage_has_token(self) -> None:
        storage = MemoryStorage()
        storage.set(ACCESS_TOKEN_KEY, "persisted")

        store = CredentialStore(storage=storage)

        assert store.state is SessionState.AUTHENTICATED
        assert store.get() == "persisted"

    def test_mirrors_access_token_into_cookie(self) -> None:
        store = CredentialStore()

        store.set("access-1", "refresh-1")

        assert store.cookies.get(ACCESS_TOKEN_KEY) == "access-1"
        assert store.cookies.get(REFRESH_TOKEN_KEY) is None

    def test_clear_expires_both_cookies(self) -> None:
        store = CredentialStore()
        store.set("access-1", "refresh-1")

        store.clear()

        assert store.cookies.get(ACCESS_TOKEN_KEY) is None
        for name in (ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY):
            header = store.cookies.set_cookie_header(name)
            assert header is not None
            assert "expires=Thu, 01 Jan 1970 00:00:00 GMT" in header


class TestCookieChannel:
    """Тесты CookieChannel."""

    def test_development_attributes(self) -> None:
        cookies = CookieChannel(production=False)

        cookies.set(ACCESS_TOKEN_KEY, "abc")
        header = cookies.set_cookie_header(ACCESS_TOKEN_KEY)

        assert header is not None
        assert header.startswith("access_token=abc")
        assert "Path=/" in header
        assert "Max-Age=604800" in header
        assert "SameSite=Strict" in header
        assert "Secure" not in header

    def test_production_sets_secure(self) -> None:
        cookies = CookieChannel(production=True)

        cookies.set(ACCESS_TOKEN_KEY, "abc")

        assert "Secure" in cookies.set_cookie_header(ACCESS_TOKEN_KEY)

    def test_expire_unknown_cookie(self) -> None:
        """Просрочка отсутствующей cookie не выбрасывает исключений."""
        cookies = CookieChannel()

        cookies.expire("missing")

        assert cookies.get("missing") is None


class TestFileStorage:
    """Тесты FileStorage."""

    def test_persists_between_instances(self, tmp_path: Path) -> None:
        path = tmp_path / "session.json"
        CredentialStore(storage=FileStorage(path)).set("access-1", "refresh-1")

        store = CredentialStore(storage=FileStorage(path))

        assert store.get() == "access-1"
        assert store.get_refresh() == "refresh-1"

    def test_missing_file(self, tmp_path: Path) -> None:
        storage = FileStorage(tmp_path / "absent.json")

        assert storage.get(ACCESS_TOKEN_KEY) is None
        storage.delete(ACCESS_TOKEN_KEY)

    def test_invalid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "session.json"
        path.write_text("[]", encoding="utf-8")

        with pytest.raises(RuntimeError):
            FileStorage(path).get(ACCESS_TOKEN_KEY)

    def test_delete_removes_key(self, tmp_path: Path) -> None:
        storage = FileStorage(tmp_path / "session.json")
        storage.set(ACCESS_TOKEN_KEY, "a")
        storage.set(REFRESH_TOKEN_KEY, "r")

        storage.delete(ACCESS_TOKEN_KEY)

        assert storage.get(ACCESS_TOKEN_KEY) is None
        assert storage.get(REFRESH_TOKEN_KEY) == "r"


class TestCookieJar:
    """Тесты cookie, которая уходит вместе с запросами."""

    def _jar_cookie(self, cookies: CookieChannel, name: str):
        return next(cookie for cookie in cookies.jar.jar if cookie.name == name)

    def test_production_cookie_is_secure(self) -> None:
        """В продакшене cookie в jar отправляется только по https."""
        cookies = CookieChannel(production=True, domain="api.test")

        cookies.set(ACCESS_TOKEN_KEY, "abc")
        jar_cookie = self._jar_cookie(cookies, ACCESS_TOKEN_KEY)

        assert jar_cookie.secure is True
        assert jar_cookie.path == "/"

    def test_development_cookie_not_secure(self) -> None:
        cookies = CookieChannel(production=False, domain="api.test")

        cookies.set(ACCESS_TOKEN_KEY, "abc")

        assert self._jar_cookie(cookies, ACCESS_TOKEN_KEY).secure is False

    def test_cookie_lives_one_week(self) -> None:
        cookies = CookieChannel(domain="api.test")
        before = int(time.time())

        cookies.set(ACCESS_TOKEN_KEY, "abc")
        expires = self._jar_cookie(cookies, ACCESS_TOKEN_KEY).expires

        assert expires is not None
        assert before + COOKIE_MAX_AGE <= expires <= int(time.time()) + COOKIE_MAX_AGE

    def test_backend_cookie_with_same_name(self) -> None:
        """Cookie backend с тем же именем не мешает читать и просрочивать свою."""
        cookies = CookieChannel(domain="api.test")
        cookies.set(ACCESS_TOKEN_KEY, "ours")
        cookies.jar.set(ACCESS_TOKEN_KEY, "backend", domain="api.test", path="/admin")

        assert cookies.get(ACCESS_TOKEN_KEY) == "ours"

        cookies.expire(ACCESS_TOKEN_KEY)

        assert cookies.get(ACCESS_TOKEN_KEY) is None
        assert cookies.jar.get(ACCESS_TOKEN_KEY, path="/admin") == "backend"
