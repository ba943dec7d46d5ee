"""Хранилище учётных данных сессии.

Access- и refresh-токены хранятся в долговременном хранилище
«ключ-значение»; access-токен дублируется в cookie, чтобы его мог
прочитать серверный процесс-компаньон.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from abc import ABC, abstractmethod
from enum import Enum
from http.cookiejar import Cookie
from http.cookies import SimpleCookie
from pathlib import Path

import httpx

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"

COOKIE_MAX_AGE = 7 * 24 * 60 * 60
COOKIE_EXPIRED = "Thu, 01 Jan 1970 00:00:00 GMT"


class SessionState(str, Enum):
    """Жизненный цикл сессии."""

    EMPTY = "empty"
    AUTHENTICATED = "authenticated"
    CLEARED = "cleared"


class KeyValueStorage(ABC):
    """Долговременное хранилище строковых значений по ключу."""

    @abstractmethod
    def get(self, key: str) -> str | None:
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError


class MemoryStorage(KeyValueStorage):
    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)


class FileStorage(KeyValueStorage):
    """JSON-файл, перезаписываемый атомарно через временный файл."""

    def __init__(self, path: str | Path = ".session.json") -> None:
        self._path = Path(path)

    def get(self, key: str) -> str | None:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._read_all()
        values[key] = value
        self._write_all(values)

    def delete(self, key: str) -> None:
        values = self._read_all()
        if values.pop(key, None) is not None:
            self._write_all(values)

    def _read_all(self) -> dict[str, str]:
        if not self._path.exists():
            return {}

        raw = json.loads(self._path.read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise RuntimeError("Файл сессии повреждён: ожидался JSON-объект")
        return raw

    def _write_all(self, payload: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f"{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        tmp_path = Path(tmp_name)

        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2, sort_keys=True)
            os.replace(tmp_path, self._path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()


class CookieChannel:
    """Cookie-канал для access-токена.

    Хранит cookie в jar, который разделяется с HTTP-клиентом, и
    последний заголовок Set-Cookie для каждого имени.
    """

    def __init__(self, production: bool = False, domain: str = "") -> None:
        self._production = production
        self._domain = domain
        self.jar = httpx.Cookies()
        self._headers: dict[str, str] = {}

    def set(self, name: str, value: str) -> None:
        """Записать cookie с атрибутами path=/, max-age=неделя, samesite=strict."""
        # Cookie в jar несёт те же secure и срок жизни, что и заголовок
        self.jar.jar.set_cookie(
            Cookie(
                version=0,
                name=name,
                value=value,
                port=None,
                port_specified=False,
                domain=self._domain,
                domain_specified=bool(self._domain),
                domain_initial_dot=self._domain.startswith("."),
                path="/",
                path_specified=True,
                secure=self._production,
                expires=int(time.time()) + COOKIE_MAX_AGE,
                discard=False,
                comment=None,
                comment_url=None,
                rest={"SameSite": "Strict"},
            )
        )

        cookie: SimpleCookie = SimpleCookie()
        cookie[name] = value
        morsel = cookie[name]
        morsel["path"] = "/"
        morsel["max-age"] = COOKIE_MAX_AGE
        morsel["samesite"] = "Strict"
        if self._production:
            morsel["secure"] = True
        self._headers[name] = morsel.OutputString()

    def expire(self, name: str) -> None:
        """Немедленно просрочить cookie."""
        if self.get(name) is not None:
            self.jar.delete(name, domain=self._domain, path="/")

        cookie: SimpleCookie = SimpleCookie()
        cookie[name] = ""
        morsel = cookie[name]
        morsel["path"] = "/"
        morsel["expires"] = COOKIE_EXPIRED
        self._headers[name] = morsel.OutputString()

    def get(self, name: str) -> str | None:
        """Значение своей cookie; cookie backend с тем же именем не учитываются."""
        return self.jar.get(name, domain=self._domain, path="/")

    def set_cookie_header(self, name: str) -> str | None:
        """Последний заголовок Set-Cookie для cookie с этим именем."""
        return self._headers.get(name)


class CredentialStore:
    """Пара access/refresh токенов процесса.

    Отсутствие токена является нормальным состоянием, поэтому ни одна
    операция не выбрасывает исключений из-за отсутствующего ключа.
    """

    def __init__(
        self,
        storage: KeyValueStorage | None = None,
        cookies: CookieChannel | None = None,
    ) -> None:
        self._storage = storage or MemoryStorage()
        self._cookies = cookies or CookieChannel()
        self._state = (
            SessionState.AUTHENTICATED
            if self._storage.get(ACCESS_TOKEN_KEY) is not None
            else SessionState.EMPTY
        )

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def cookies(self) -> CookieChannel:
        return self._cookies

    def get(self) -> str | None:
        """Текущий access-токен или None."""
        return self._storage.get(ACCESS_TOKEN_KEY)

    def get_refresh(self) -> str | None:
        """Текущий refresh-токен или None."""
        return self._storage.get(REFRESH_TOKEN_KEY)

    def set(self, access: str, refresh: str | None = None) -> None:
        """Сохранить токены.

        Args:
            access: Новый access-токен
            refresh: Новый refresh-токен; если не передан, прежний сохраняется
        """
        self._storage.set(ACCESS_TOKEN_KEY, access)
        if refresh is not None:
            self._storage.set(REFRESH_TOKEN_KEY, refresh)
        self._cookies.set(ACCESS_TOKEN_KEY, access)
        self._state = SessionState.AUTHENTICATED
        logger.debug("Токены сохранены (refresh обновлён: %s)", refresh is not None)

    def clear(self) -> None:
        """Удалить оба токена и просрочить cookie."""
        self._storage.delete(ACCESS_TOKEN_KEY)
        self._storage.delete(REFRESH_TOKEN_KEY)
        self._cookies.expire(ACCESS_TOKEN_KEY)
        self._cookies.expire(REFRESH_TOKEN_KEY)
        self._state = SessionState.CLEARED
        logger.debug("Учётные данные очищены")


class SessionInvalidationReason(str, Enum):
    """Причина сброса сессии."""

    LOGOUT = "logout"
    PERMISSION_DENIED = "permission_denied"
    REFRESH_FAILED = "refresh_failed"
