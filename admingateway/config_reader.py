"""Конфигурация шлюза API админ-консоли.

Читает настройки из YAML-файла, путь к которому указывается
в переменной окружения ADMIN_GATEWAY_CONFIG.

Переменные окружения автоматически загружаются из .env файла.
"""

from functools import lru_cache
from os import getenv
from typing import Any, TypeVar, cast

from dotenv import load_dotenv
from pydantic import BaseModel, SecretStr
from yaml import CSafeLoader as SafeLoader
from yaml import load

# Автоматически загружаем переменные из .env файла
load_dotenv()

CONFIG_ENV_VAR = "ADMIN_GATEWAY_CONFIG"

ConfigType = TypeVar("ConfigType", bound=BaseModel)


class GatewayConfig(BaseModel):
    """Конфигурация подключения к backend админ-консоли."""

    # Базовый URL API (например: https://api.example.com/)
    base_url: str

    # Локаль клиента; fr* включает французские сообщения
    locale: str = "en"

    # Продакшн-окружение: cookie получает флаг secure
    production: bool = False

    login_path: str = "auth/login"
    refresh_path: str = "auth/refresh"

    # Куда направлять пользователя после сброса сессии
    login_redirect: str = "/login"

    # Таймаут запросов в секундах; None: значение транспорта по умолчанию
    timeout: float | None = None

    # Файл для хранения токенов; None: хранение в памяти
    storage_path: str | None = None

    username: SecretStr | None = None
    password: SecretStr | None = None


@lru_cache
def parse_config_file() -> dict[str, Any]:
    """Прочитать и распарсить YAML-файл конфигурации.

    Путь к файлу берётся из переменной окружения ADMIN_GATEWAY_CONFIG.

    Returns:
        Словарь с конфигурацией

    Raises:
        ValueError: Если переменная окружения не задана
        FileNotFoundError: Если файл не найден
    """
    file_path = getenv(CONFIG_ENV_VAR)
    if file_path is None:
        raise ValueError(
            f"Переменная окружения {CONFIG_ENV_VAR} не задана. "
            "Укажите путь к файлу конфигурации."
        )

    with open(file_path, "rb") as file:
        config_data = load(file, Loader=SafeLoader)

    if not isinstance(config_data, dict):
        raise ValueError("Конфигурация должна быть словарём")
    return config_data


@lru_cache
def get_config(model: type[ConfigType], root_key: str) -> ConfigType:  # noqa: UP047
    """Получить конфигурацию определённого типа из файла.

    Args:
        model: Pydantic-модель для валидации
        root_key: Корневой ключ в YAML-файле

    Returns:
        Экземпляр модели с заполненными значениями

    Raises:
        ValueError: Если ключ не найден в конфигурации
    """
    config_dict = parse_config_file()
    if root_key not in config_dict:
        raise ValueError(f"Ключ '{root_key}' не найден в конфигурации")
    return model.model_validate(config_dict[root_key])


def get_gateway_config() -> GatewayConfig:
    """Получить конфигурацию шлюза."""
    return cast(GatewayConfig, get_config(GatewayConfig, "gateway"))
