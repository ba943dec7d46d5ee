"""Уведомления пользователя об ошибках запросов."""

import logging
from dataclasses import dataclass
from typing import Protocol

logger = logging.getLogger(__name__)
logger.setLevel(level=logging.DEBUG)


@dataclass(frozen=True)
class NotificationStyle:
    """Оформление всплывающего сообщения.

    Сообщение об ошибке всегда выводится слева направо шрифтом
    sans-serif, независимо от языка.
    """

    direction: str = "ltr"
    font_family: str = "sans-serif"
    duration: float = 4.0


ERROR_STYLE = NotificationStyle()


class Notifier(Protocol):
    def notify_error(self, message: str, style: NotificationStyle) -> None: ...


class LoggingNotifier:
    """Уведомления через logging, используется по умолчанию."""

    def notify_error(self, message: str, style: NotificationStyle) -> None:
        logger.warning("Уведомление (%s, %.1f с): %s", style.direction, style.duration, message)
