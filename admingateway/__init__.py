"""Модуль шлюза API админ-консоли.

Предоставляет клиента с подстановкой bearer-токена, обновлением
токена при 401 и классификацией ошибок для показа пользователю.

Пример использования:
    from admingateway import GatewayClient, ResourceClient, get_gateway_config

    config = get_gateway_config()
    gateway = await GatewayClient.from_config(config)
    await gateway.login("admin", "secret")

    resources = ResourceClient(gateway)
    deposits = await resources.get_deposits(page=1)
"""

from admingateway.classifier import (
    PERMISSION_DENIED_SENTINEL,
    ClassifiedError,
    ErrorKind,
    classify_error,
    extract_backend_message,
)
from admingateway.config_reader import (
    GatewayConfig,
    get_config,
    get_gateway_config,
    parse_config_file,
)
from admingateway.credential_store import (
    CookieChannel,
    CredentialStore,
    FileStorage,
    KeyValueStorage,
    MemoryStorage,
    SessionInvalidationReason,
    SessionState,
)
from admingateway.exceptions import (
    GatewayAuthException,
    GatewayException,
    GatewayRequestError,
    GatewaySessionError,
)
from admingateway.gateway import GatewayClient
from admingateway.language import detect_language
from admingateway.notifications import LoggingNotifier, NotificationStyle, Notifier
from admingateway.refresh_coordinator import RefreshCoordinator
from admingateway.request_context import RequestContext
from admingateway.resources import PaginatedResponse, ResourceClient

__all__ = [
    # Gateway
    "GatewayClient",
    "RefreshCoordinator",
    "RequestContext",
    "ResourceClient",
    "PaginatedResponse",
    # Classification
    "PERMISSION_DENIED_SENTINEL",
    "ClassifiedError",
    "ErrorKind",
    "classify_error",
    "extract_backend_message",
    "detect_language",
    # Configuration
    "GatewayConfig",
    "get_config",
    "get_gateway_config",
    "parse_config_file",
    # Credentials
    "CookieChannel",
    "CredentialStore",
    "FileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "SessionInvalidationReason",
    "SessionState",
    # Notifications
    "LoggingNotifier",
    "NotificationStyle",
    "Notifier",
    # Exceptions
    "GatewayAuthException",
    "GatewayException",
    "GatewayRequestError",
    "GatewaySessionError",
]
