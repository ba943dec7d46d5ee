"""Классификатор ошибок ответов backend.

Превращает неуспешный ответ (код статуса и тело произвольной формы)
в один из шести видов ошибки с сообщением для пользователя.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from admingateway.language import Language, detect_language

PERMISSION_DENIED_SENTINEL = "You do not have permission to perform this action"

# Порядок важен: первое непустое поле побеждает
MESSAGE_FIELDS = ("details", "detail", "error", "message")


class ErrorKind(str, Enum):
    """Вид классифицированной ошибки."""

    PERMISSION_DENIED = "permission_denied"
    SERVER_ERROR = "server_error"
    NOT_FOUND = "not_found"
    CLIENT_ERROR = "client_error"
    CLIENT_ERROR_GENERIC = "client_error_generic"
    NETWORK_ERROR = "network_error"


FIXED_MESSAGES: dict[ErrorKind, dict[Language, str]] = {
    ErrorKind.SERVER_ERROR: {
        "fr": "Erreur interne du serveur. Veuillez réessayer plus tard.",
        "en": "Internal server error. Please try again later.",
    },
    ErrorKind.NOT_FOUND: {
        "fr": "Ressource introuvable. Veuillez vérifier vos données.",
        "en": "Resource not found. Please check your data.",
    },
    ErrorKind.CLIENT_ERROR_GENERIC: {
        "fr": "Erreur de requête. Veuillez vérifier vos données et réessayer.",
        "en": "Request error. Please check your data and try again.",
    },
    ErrorKind.NETWORK_ERROR: {
        "fr": (
            "Erreur de connexion. Veuillez vérifier votre connexion internet "
            "et réessayer."
        ),
        "en": "Connection error. Please check your internet connection and try again.",
    },
}


@dataclass(frozen=True)
class ClassifiedError:
    """Результат классификации неуспешного запроса.

    Attributes:
        kind: Вид ошибки
        message: Сообщение для пользователя
        language: Язык сообщения
        status_code: Код статуса HTTP (None, если ответа не было)
    """

    kind: ErrorKind
    message: str
    language: Language
    status_code: int | None = None


def fixed_message(kind: ErrorKind, locale: str) -> tuple[str, Language]:
    """Фиксированное сообщение для вида ошибки на языке локали."""
    language = detect_language(None, locale)
    return FIXED_MESSAGES[kind][language], language


def _body_text(body: Any) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    if isinstance(body, str):
        return body
    try:
        return json.dumps(body, ensure_ascii=False, default=str)
    except (TypeError, ValueError):
        return str(body)


def contains_permission_denied(body: Any) -> bool:
    """Есть ли в теле ответа фраза об отсутствии прав."""
    return PERMISSION_DENIED_SENTINEL in _body_text(body)


def extract_backend_message(body: Any) -> str | None:
    """Извлечь сообщение backend из тела ответа.

    Поля проверяются в порядке details, detail, error, message;
    затем само тело, если это строка.

    Args:
        body: Тело ответа (dict, str или что угодно)

    Returns:
        Непустое сообщение или None
    """
    if isinstance(body, dict):
        for field in MESSAGE_FIELDS:
            value = body.get(field)
            if isinstance(value, str) and value.strip():
                return value
        return None
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if isinstance(body, str) and body.strip():
        return body
    return None


def classify_error(status_code: int | None, body: Any, locale: str) -> ClassifiedError:
    """Классифицировать неуспешный ответ.

    Проверка на отказ в доступе выполняется до анализа кода статуса:
    backend может вернуть её и в 403, и в 400.

    Args:
        status_code: Код статуса или None, если ответ не получен
        body: Тело ответа
        locale: Локаль клиента для фиксированных сообщений

    Returns:
        Классифицированная ошибка; функция никогда не выбрасывает исключений
    """
    if contains_permission_denied(body):
        return ClassifiedError(
            kind=ErrorKind.PERMISSION_DENIED,
            message=PERMISSION_DENIED_SENTINEL,
            language="en",
            status_code=status_code,
        )

    if status_code is not None and status_code >= 500:
        kind = ErrorKind.SERVER_ERROR
    elif status_code == 404:
        kind = ErrorKind.NOT_FOUND
    else:
        backend_message = extract_backend_message(body)
        if backend_message is not None:
            return ClassifiedError(
                kind=ErrorKind.CLIENT_ERROR,
                message=backend_message,
                language=detect_language(backend_message, locale),
                status_code=status_code,
            )
        if status_code is not None and 400 <= status_code < 500:
            kind = ErrorKind.CLIENT_ERROR_GENERIC
        else:
            kind = ErrorKind.NETWORK_ERROR

    message, language = fixed_message(kind, locale)
    return ClassifiedError(
        kind=kind, message=message, language=language, status_code=status_code
    )
