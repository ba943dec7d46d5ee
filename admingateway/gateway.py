"""Шлюз API админ-консоли.

Единая точка, через которую проходят все запросы к backend:
подстановка bearer-токена, обновление токена при 401 с одним
повтором, классификация ошибок и сброс сессии при отказе в доступе.

Реализует Multitone паттерн: один экземпляр на base_url.
"""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import httpx

from admingateway.classifier import (
    ClassifiedError,
    ErrorKind,
    classify_error,
)
from admingateway.config_reader import GatewayConfig, get_gateway_config
from admingateway.credential_store import (
    CookieChannel,
    CredentialStore,
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
    SessionInvalidationReason,
)
from admingateway.exceptions import (
    GatewayAuthException,
    GatewayRequestError,
    GatewaySessionError,
)
from admingateway.notifications import ERROR_STYLE, LoggingNotifier, Notifier
from admingateway.refresh_coordinator import RefreshCoordinator
from admingateway.request_context import RequestContext

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

SessionInvalidatedCallback = Callable[[SessionInvalidationReason, str], None]


def response_body(response: httpx.Response) -> Any:
    """Тело ответа: JSON, если он разбирается, иначе текст."""
    try:
        return response.json()
    except ValueError:
        return response.text


class GatewayClient:
    """Multitone-шлюз для запросов к backend админ-консоли.

    Содержит: httpx.AsyncClient, CredentialStore, RefreshCoordinator.

    Использование:
        gateway = await GatewayClient.from_config(config)
        response = await gateway.get("mobcash/caisses")
    """

    _instances: dict[str, "GatewayClient"] = {}
    _lock: asyncio.Lock | None = None

    def __init__(
        self,
        config: GatewayConfig,
        store: CredentialStore | None = None,
        notifier: Notifier | None = None,
        on_session_invalidated: SessionInvalidatedCallback | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Инициализация шлюза.

        Args:
            config: Конфигурация шлюза
            store: Хранилище учётных данных (по умолчанию из конфигурации)
            notifier: Канал уведомлений (по умолчанию в лог)
            on_session_invalidated: Колбэк сброса сессии, получает причину
                и путь страницы входа
            transport: Транспорт httpx (для тестов)
        """
        self._config = config
        self._store = store or self._build_store(config)
        self._notifier = notifier or LoggingNotifier()
        self._on_session_invalidated = on_session_invalidated

        client_kwargs: dict[str, Any] = {}
        if config.timeout is not None:
            client_kwargs["timeout"] = config.timeout
        # Общий CookieJar: cookie из хранилища уходят вместе с запросами
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            cookies=self._store.cookies.jar.jar,
            transport=transport,
            **client_kwargs,
        )

        self._refresh_coordinator = RefreshCoordinator(
            client=self._client,
            store=self._store,
            invalidate_session=self._invalidate_session,
            login_path=config.login_path,
            refresh_path=config.refresh_path,
            locale=config.locale,
        )
        logger.debug("Создан экземпляр GatewayClient для %s", config.base_url)

    @staticmethod
    def _build_store(config: GatewayConfig) -> CredentialStore:
        storage: KeyValueStorage = (
            FileStorage(config.storage_path) if config.storage_path else MemoryStorage()
        )
        cookies = CookieChannel(
            production=config.production,
            domain=httpx.URL(config.base_url).host,
        )
        return CredentialStore(storage=storage, cookies=cookies)

    @classmethod
    async def get_instance(
        cls,
        config: GatewayConfig,
        **kwargs: Any,
    ) -> "GatewayClient":
        """Получить или создать экземпляр шлюза для base_url.

        Args:
            config: Конфигурация шлюза
            **kwargs: Аргументы конструктора для нового экземпляра

        Returns:
            Экземпляр GatewayClient
        """
        if cls._lock is None:
            cls._lock = asyncio.Lock()

        async with cls._lock:
            key = config.base_url
            if key not in cls._instances:
                cls._instances[key] = cls(config, **kwargs)
            return cls._instances[key]

    @classmethod
    async def from_config(
        cls, config: GatewayConfig | None = None, **kwargs: Any
    ) -> "GatewayClient":
        """Создать экземпляр из конфигурации (по умолчанию из YAML-файла)."""
        if config is None:
            config = get_gateway_config()
        return await cls.get_instance(config, **kwargs)

    @classmethod
    async def close_all(cls) -> None:
        """Закрыть все HTTP-сессии и сбросить экземпляры."""
        instance_count = len(cls._instances)
        for gateway in cls._instances.values():
            await gateway.aclose()

        cls._instances.clear()
        cls._lock = None
        logger.debug("Закрыты все соединения (%d экземпляров)", instance_count)

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def store(self) -> CredentialStore:
        return self._store

    @property
    def config(self) -> GatewayConfig:
        return self._config

    # ========== Сессия ==========

    async def login(self, username: str, password: str) -> None:
        """Войти и сохранить пару токенов.

        Args:
            username: Имя пользователя
            password: Пароль

        Raises:
            GatewayRequestError: Backend отклонил вход
            GatewayAuthException: В ответе нет пары токенов
        """
        response = await self.post(
            self._config.login_path,
            json={"username": username, "password": password},
        )
        payload = response_body(response)
        access = payload.get("access") if isinstance(payload, dict) else None
        refresh = payload.get("refresh") if isinstance(payload, dict) else None
        if not isinstance(access, str) or not isinstance(refresh, str):
            logger.error("Ответ на вход не содержит access/refresh токенов")
            raise GatewayAuthException("Ответ на вход не содержит access/refresh токенов")

        self._store.set(access, refresh)
        logger.info("Вход выполнен для %s", username)

    def logout(self) -> None:
        """Выйти: очистить токены и сообщить хосту."""
        self._invalidate_session(SessionInvalidationReason.LOGOUT)

    def _invalidate_session(self, reason: SessionInvalidationReason) -> None:
        self._store.clear()
        logger.warning("Сессия сброшена: %s", reason.value)
        if self._on_session_invalidated is not None:
            self._on_session_invalidated(reason, self._config.login_redirect)

    # ========== Конвейер запроса ==========

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Выполнить запрос через шлюз.

        Args:
            method: HTTP-метод
            url: Путь относительно base_url
            params: Параметры строки запроса
            json: Тело запроса в JSON
            content: Сырое тело запроса
            headers: Дополнительные заголовки

        Returns:
            Успешный ответ без изменений

        Raises:
            GatewaySessionError: Сессия сброшена (уведомление не показано)
            GatewayRequestError: Любая другая ошибка (уведомление показано)
        """
        context = RequestContext(
            method=method.upper(),
            url=url,
            headers=dict(headers or {}),
            params=params,
            json=json,
            content=content,
        )
        return await self._dispatch(context)

    def _attach_credentials(self, context: RequestContext) -> RequestContext:
        if context.targets(self._config.login_path, self._config.refresh_path):
            return context.with_access_token(None)
        if context.access_token is not None:
            # Повтор после обновления уже несёт новый токен
            return context
        return context.with_access_token(self._store.get())

    async def _dispatch(self, context: RequestContext) -> httpx.Response:
        context = self._attach_credentials(context)
        logger.debug(
            "%s %s (повтор: %s)", context.method, context.url, context.retried
        )

        try:
            response = await self._client.send(context.build_request(self._client))
        except httpx.RequestError as exc:
            logger.error("Ошибка соединения %s %s: %s", context.method, context.url, exc)
            raise self._reject(classify_error(None, None, self._config.locale), exc)

        if not response.is_error:
            return response

        outcome = classify_error(
            response.status_code, response_body(response), self._config.locale
        )

        if outcome.kind is ErrorKind.PERMISSION_DENIED:
            self._invalidate_session(SessionInvalidationReason.PERMISSION_DENIED)
            raise GatewaySessionError(outcome)

        if self._refresh_coordinator.should_refresh(context, response.status_code):
            logger.debug("Токен истёк, обновляем")
            return await self._refresh_coordinator.refresh_and_replay(
                context, self._dispatch
            )

        logger.error(
            "Ошибка API %s %s: %s (%s)",
            context.method,
            context.url,
            outcome.kind.value,
            response.status_code,
        )
        raise self._reject(outcome)

    def _reject(
        self, outcome: ClassifiedError, original_error: Exception | None = None
    ) -> GatewayRequestError:
        self._notifier.notify_error(outcome.message, ERROR_STYLE)
        return GatewayRequestError(outcome, original_error=original_error)

    # ========== Короткие методы ==========

    async def get(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def patch(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", url, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)
