"""Неизменяемое описание запроса, проходящего через шлюз."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any

import httpx


@dataclass(frozen=True)
class RequestContext:
    """Запрос с маркером повтора.

    Маркер и токен не меняются на месте: with_* возвращают копию,
    поэтому токен уже отправленного запроса остаётся прежним.

    Attributes:
        method: HTTP-метод
        url: Путь относительно base_url или абсолютный URL
        headers: Дополнительные заголовки
        params: Параметры строки запроса
        json: Тело запроса в JSON
        content: Сырое тело запроса
        access_token: Access-токен, с которым запрос отправляется
        retried: Был ли уже цикл обновления токена и повтора
    """

    method: str
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    params: dict[str, Any] | None = None
    json: Any = None
    content: bytes | None = None
    access_token: str | None = None
    retried: bool = False

    def with_retry_marker(self) -> RequestContext:
        return replace(self, retried=True)

    def with_access_token(self, token: str | None) -> RequestContext:
        return replace(self, access_token=token)

    def targets(self, *paths: str) -> bool:
        """Содержит ли URL один из путей (login/refresh)."""
        return any(path and path in self.url for path in paths)

    def build_request(self, client: httpx.AsyncClient) -> httpx.Request:
        headers = dict(self.headers)
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return client.build_request(
            self.method,
            self.url,
            headers=headers,
            params=self.params,
            json=self.json,
            content=self.content,
        )
