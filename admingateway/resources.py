"""Типовые операции над ресурсами backend поверх шлюза.

Списки с пагинацией, чтение, создание, изменение и удаление записей.
Ошибки не перехватываются: их уже классифицировал шлюз.
"""

from typing import Any

from pydantic import BaseModel

from admingateway.gateway import GatewayClient, response_body


class PaginatedResponse(BaseModel):
    """Страница списка в формате backend."""

    count: int
    next: str | None = None
    previous: str | None = None
    results: list[dict[str, Any]]


def clean_filters(filters: dict[str, Any] | None) -> dict[str, Any]:
    """Убрать незаданные фильтры (None и пустые строки); False и 0 остаются."""
    return {
        key: value
        for key, value in (filters or {}).items()
        if value is not None and value != ""
    }


def _item_path(path: str, item_id: str | int) -> str:
    return f"{path.rstrip('/')}/{item_id}/"


class ResourceClient:
    """Операции над ресурсами через GatewayClient.

    Использование:
        resources = ResourceClient(gateway)
        page = await resources.list_page("advertisements/", {"page": 2})
    """

    def __init__(self, gateway: GatewayClient) -> None:
        self._gateway = gateway

    async def list_page(
        self, path: str, filters: dict[str, Any] | None = None
    ) -> PaginatedResponse:
        """Получить страницу списка.

        Args:
            path: Путь ресурса
            filters: page, page_size, search и фильтры ресурса

        Returns:
            Страница с count, next, previous и results
        """
        response = await self._gateway.get(path, params=clean_filters(filters))
        return PaginatedResponse.model_validate(response_body(response))

    async def list_all(
        self, path: str, filters: dict[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        """Получить список без пагинации."""
        response = await self._gateway.get(path, params=clean_filters(filters))
        return list(response_body(response))

    async def retrieve(self, path: str, item_id: str | int) -> dict[str, Any]:
        response = await self._gateway.get(_item_path(path, item_id))
        return dict(response_body(response))

    async def create(self, path: str, data: dict[str, Any]) -> Any:
        response = await self._gateway.post(path, json=data)
        return response_body(response)

    async def update(self, path: str, item_id: str | int, data: dict[str, Any]) -> Any:
        """Частично изменить запись (PATCH)."""
        response = await self._gateway.patch(_item_path(path, item_id), json=data)
        return response_body(response)

    async def delete(self, path: str, item_id: str | int) -> None:
        await self._gateway.delete(_item_path(path, item_id))

    # ========== Депозиты ==========

    async def get_deposits(
        self,
        page: int | None = None,
        page_size: int | None = None,
        bet_app: str | None = None,
        search: str | None = None,
    ) -> PaginatedResponse:
        """Получить страницу депозитов.

        Args:
            page: Номер страницы
            page_size: Размер страницы
            bet_app: UUID приложения ставок
            search: Строка поиска

        Returns:
            Страница депозитов
        """
        # Номер и размер страницы 0 означают «не задано»
        return await self.list_page(
            "mobcash/list-deposit",
            {
                "page": page or None,
                "page_size": page_size or None,
                "bet_app": bet_app,
                "search": search,
            },
        )

    async def get_caisses(self) -> list[dict[str, Any]]:
        """Получить кассы с балансами."""
        return await self.list_all("mobcash/caisses")

    async def create_deposit(self, amount: float, bet_app: str) -> Any:
        """Создать депозит.

        Args:
            amount: Сумма
            bet_app: UUID приложения ставок
        """
        return await self.create("mobcash/deposit", {"amount": amount, "bet_app": bet_app})
