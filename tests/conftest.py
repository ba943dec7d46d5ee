"""Общие фикстуры для тестов шлюза.

Содержит поддельный backend на httpx.MockTransport и собранный
поверх него GatewayClient.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from typing import Any
from unittest.mock import MagicMock

import httpx
import pytest

from admingateway import CredentialStore, GatewayClient, GatewayConfig

Reply = tuple[int, Any] | Exception | Callable[[httpx.Request], Awaitable[httpx.Response]]


class FakeBackend:
    """Поддельный backend: очередь ответов на каждый путь.

    Последний ответ в очереди повторяется для всех следующих запросов.
    """

    def __init__(self) -> None:
        self._replies: dict[str, list[Reply]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, *replies: Reply) -> None:
        self._replies.setdefault(path, []).extend(replies)

    def calls(self, path: str) -> list[httpx.Request]:
        return [request for request in self.requests if request.url.path == path]

    async def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        queue = self._replies.get(request.url.path)
        if not queue:
            return httpx.Response(404, json={"detail": "Not found."})

        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return await reply(request)

        status, body = reply
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)


@pytest.fixture
def config() -> GatewayConfig:
    return GatewayConfig(base_url="https://api.test/", locale="en-US")


@pytest.fixture
def store() -> CredentialStore:
    return CredentialStore()


@pytest.fixture
def notifier() -> MagicMock:
    return MagicMock()


@pytest.fixture
def on_invalidated() -> MagicMock:
    return MagicMock()


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
async def gateway(
    config: GatewayConfig,
    store: CredentialStore,
    notifier: MagicMock,
    on_invalidated: MagicMock,
    backend: FakeBackend,
) -> AsyncGenerator[GatewayClient, None]:
    """Шлюз поверх поддельного backend."""
    client = GatewayClient(
        config,
        store=store,
        notifier=notifier,
        on_session_invalidated=on_invalidated,
        transport=httpx.MockTransport(backend.handle),
    )
    yield client
    await client.aclose()
