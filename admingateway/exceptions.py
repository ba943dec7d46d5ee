"""Исключения шлюза API админ-консоли.

Базовое исключение и его наследники для ошибок аутентификации
и классифицированных ошибок запросов.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from admingateway.classifier import ClassifiedError, ErrorKind


class GatewayException(Exception):
    """Базовое исключение для ошибок шлюза API."""

    def __init__(self, message: str, original_error: Exception | None = None) -> None:
        super().__init__(message)
        self.original_error = original_error


class GatewayAuthException(GatewayException):
    """Исключение при ошибках аутентификации.

    Выбрасывается при:
    - Неуспешном входе (ошибка на auth/login)
    - Ошибках обновления access-токена
    """


class GatewayRequestError(GatewayException):
    """Отклонённый результат запроса с готовым для показа сообщением.

    Вызывающему коду не нужно повторно классифицировать ошибку:
    kind и message уже определены классификатором.
    """

    def __init__(
        self,
        outcome: ClassifiedError,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(outcome.message, original_error=original_error)
        self.outcome = outcome

    @property
    def kind(self) -> ErrorKind:
        return self.outcome.kind

    @property
    def message(self) -> str:
        return self.outcome.message

    @property
    def language(self) -> str:
        return self.outcome.language

    @property
    def status_code(self) -> int | None:
        return self.outcome.status_code


class GatewaySessionError(GatewayRequestError):
    """Сессия сброшена: отказ в доступе или неудачное обновление токена.

    Уведомление пользователю не показывается, хост выполняет
    переход на страницу входа.
    """
