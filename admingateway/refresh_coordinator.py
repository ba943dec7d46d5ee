"""Координатор обновления access-токена.

Обменивает refresh-токен на новый access-токен при 401 и повторяет
исходный запрос ровно один раз. Повторный 401 на уже повторённом
запросе обновления не вызывает.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

import httpx

from admingateway.classifier import ClassifiedError, ErrorKind, fixed_message
from admingateway.credential_store import CredentialStore, SessionInvalidationReason
from admingateway.exceptions import GatewayAuthException, GatewaySessionError
from admingateway.request_context import RequestContext

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)

Replay = Callable[[RequestContext], Awaitable[httpx.Response]]


class RefreshCoordinator:
    """Обновление токена с повтором запроса.

    Обновления сериализуются через Lock: если пока корутина ждала
    блокировку токен уже заменили, новый запрос обновления не
    отправляется и используется текущий токен.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: CredentialStore,
        invalidate_session: Callable[[SessionInvalidationReason], None],
        login_path: str = "auth/login",
        refresh_path: str = "auth/refresh",
        locale: str = "en",
    ) -> None:
        """Инициализация координатора.

        Args:
            client: HTTP-клиент для запроса обновления
            store: Хранилище учётных данных
            invalidate_session: Сброс сессии и переход на страницу входа
            login_path: Путь входа (исключён из обновления)
            refresh_path: Путь обновления токена
            locale: Локаль клиента для сообщений
        """
        self._client = client
        self._store = store
        self._invalidate_session = invalidate_session
        self._login_path = login_path
        self._refresh_path = refresh_path
        self._locale = locale
        self._lock = asyncio.Lock()
        self._token_version = 0
        self._failure_count = 0
        self._last_failure: GatewaySessionError | None = None

    @property
    def token_version(self) -> int:
        return self._token_version

    def should_refresh(self, context: RequestContext, status_code: int | None) -> bool:
        """Нужно ли обновлять токен для этого ответа."""
        return (
            status_code == 401
            and not context.retried
            and not context.targets(self._login_path, self._refresh_path)
        )

    async def refresh_and_replay(
        self, context: RequestContext, replay: Replay
    ) -> httpx.Response:
        """Обновить токен и повторить запрос один раз.

        Args:
            context: Исходный запрос, получивший 401
            replay: Отправка запроса через конвейер шлюза

        Returns:
            Ответ на повторённый запрос

        Raises:
            GatewaySessionError: Если обновить токен не удалось
        """
        # Маркер ставится до запроса обновления
        retry_context = context.with_retry_marker()
        access = await self._obtain_access_token(sent_token=context.access_token)
        logger.debug("Повтор запроса %s %s с новым токеном", context.method, context.url)
        return await replay(retry_context.with_access_token(access))

    async def _obtain_access_token(self, sent_token: str | None) -> str:
        failures_before = self._failure_count
        async with self._lock:
            # Пока ждали блокировку, обновление уже завершилось ошибкой:
            # сессия сброшена, повторно её не сбрасываем
            if self._failure_count != failures_before and self._last_failure is not None:
                logger.debug("Обновление токена уже завершилось ошибкой, сессия сброшена")
                raise GatewaySessionError(
                    self._last_failure.outcome,
                    original_error=self._last_failure.original_error,
                )

            current = self._store.get()
            if current is not None and current != sent_token:
                logger.debug(
                    "Токен уже обновлён другой корутиной (версия: %d)",
                    self._token_version,
                )
                return current

            refresh = self._store.get_refresh()
            if refresh is None:
                logger.warning("Нет refresh-токена, сессия будет сброшена")
                raise self._session_failure(
                    GatewayAuthException("Нет refresh-токена")
                )

            try:
                access = await self._fetch_access_token(refresh)
            except GatewayAuthException as exc:
                logger.error("Ошибка при обновлении токена: %s", exc)
                raise self._session_failure(exc) from exc

            self._store.set(access)
            self._token_version += 1
            logger.info("Токен обновлён после 401 (версия: %d)", self._token_version)
            return access

    async def _fetch_access_token(self, refresh: str) -> str:
        """Получить новый access-токен от backend.

        Raises:
            GatewayAuthException: При любой ошибке запроса обновления
        """
        try:
            response = await self._client.post(
                self._refresh_path, json={"refresh": refresh}
            )
        except httpx.HTTPError as exc:
            raise GatewayAuthException(
                f"Ошибка запроса обновления токена: {exc}", original_error=exc
            ) from exc

        if response.is_error:
            raise GatewayAuthException(
                f"Обновление токена отклонено: получен {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise GatewayAuthException(
                "Ответ на обновление токена не является JSON", original_error=exc
            ) from exc

        access = payload.get("access") if isinstance(payload, dict) else None
        if not isinstance(access, str) or not access:
            raise GatewayAuthException("В ответе на обновление токена нет поля access")
        return access

    def _session_failure(self, error: GatewayAuthException) -> GatewaySessionError:
        self._invalidate_session(SessionInvalidationReason.REFRESH_FAILED)
        message, language = fixed_message(ErrorKind.NETWORK_ERROR, self._locale)
        outcome = ClassifiedError(
            kind=ErrorKind.NETWORK_ERROR,
            message=message,
            language=language,
            status_code=401,
        )
        failure = GatewaySessionError(outcome, original_error=error)
        self._failure_count += 1
        self._last_failure = failure
        return failure
