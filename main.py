"""Пример использования шлюза API админ-консоли."""

import asyncio
import logging

from admingateway import (
    GatewayClient,
    GatewayRequestError,
    ResourceClient,
    SessionInvalidationReason,
    get_gateway_config,
)

# Настраиваем логирование
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)


def on_session_invalidated(reason: SessionInvalidationReason, redirect: str) -> None:
    print(f"Сессия сброшена ({reason.value}), переход на {redirect}")


async def main() -> None:
    """Основная функция."""
    # Загружаем конфигурацию из config.yml
    config = get_gateway_config()
    print(f"Подключение к серверу: {config.base_url}")

    gateway = await GatewayClient.from_config(
        config, on_session_invalidated=on_session_invalidated
    )

    try:
        if config.username is not None and config.password is not None:
            await gateway.login(
                config.username.get_secret_value(),
                config.password.get_secret_value(),
            )

        resources = ResourceClient(gateway)
        deposits = await resources.get_deposits(page=1, page_size=5)
        print(f"\nДепозиты ({deposits.count} шт.):")
        for deposit in deposits.results:
            print(f"  - {deposit.get('amount')} (id: {deposit.get('id')})")
    except GatewayRequestError as exc:
        print(f"\nОшибка ({exc.kind.value}): {exc.message}")
    finally:
        # Закрываем все соединения
        await GatewayClient.close_all()
        print("\nСоединения закрыты.")


if __name__ == "__main__":
    asyncio.run(main())
