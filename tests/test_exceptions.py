"""Тесты для exceptions модуля."""

import pytest

from admingateway.classifier import ClassifiedError, ErrorKind
from admingateway.exceptions import (
    GatewayAuthException,
    GatewayException,
    GatewayRequestError,
    GatewaySessionError,
)

# Маркируем все тесты в этом модуле как unit-тесты
pytestmark = pytest.mark.unit


class TestGatewayException:
    """Тесты для базового исключения."""

    def test_message(self) -> None:
        """Сообщение сохраняется корректно."""
        exc = GatewayException("Test error")

        assert str(exc) == "Test error"

    def test_original_error(self) -> None:
        """Оригинальная ошибка сохраняется."""
        original = ValueError("Original error")
        exc = GatewayException("Wrapped error", original_error=original)

        assert exc.original_error is original

    def test_original_error_default_none(self) -> None:
        """По умолчанию original_error = None."""
        exc = GatewayException("Error")

        assert exc.original_error is None


class TestGatewayAuthException:
    """Тесты для исключения аутентификации."""

    def test_inherits_from_base(self) -> None:
        """GatewayAuthException наследуется от GatewayException."""
        exc = GatewayAuthException("Auth failed")

        assert isinstance(exc, GatewayException)

    def test_catch_by_base_class(self) -> None:
        """GatewayAuthException ловится базовым классом."""
        with pytest.raises(GatewayException):
            raise GatewayAuthException("Auth failed")


class TestGatewayRequestError:
    """Тесты для отклонённого результата запроса."""

    def test_exposes_outcome_fields(self) -> None:
        """kind, message, language и status_code берутся из outcome."""
        outcome = ClassifiedError(
            kind=ErrorKind.CLIENT_ERROR,
            message="Invalid phone number",
            language="en",
            status_code=400,
        )
        exc = GatewayRequestError(outcome)

        assert str(exc) == "Invalid phone number"
        assert exc.kind is ErrorKind.CLIENT_ERROR
        assert exc.message == "Invalid phone number"
        assert exc.language == "en"
        assert exc.status_code == 400
        assert exc.outcome is outcome

    def test_session_error_is_request_error(self) -> None:
        """GatewaySessionError ловится как GatewayRequestError."""
        outcome = ClassifiedError(ErrorKind.NETWORK_ERROR, "offline", "en")

        with pytest.raises(GatewayRequestError):
            raise GatewaySessionError(outcome)
