"""USDA FoodData Central API client."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import httpx

# Generic ingredient data; branded products skew towards packaged goods.
DEFAULT_DATA_TYPES = ("Foundation", "SR Legacy", "Survey (FNDDS)")
ENERGY_NUTRIENT_NUMBER = "208"
# Atwater general and specific factor energy, reported by many Foundation foods.
ATWATER_ENERGY_NUMBERS = ("957", "958")


class FdcClient(Protocol):
    """Interface for FoodData Central lookups."""

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        """Search foods and return the raw result page, best match first."""

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        """Fetch one food with its energy nutrients."""


@dataclass
class HttpxFdcClient(FdcClient):
    """FoodData Central client on a shared httpx session."""

    api_key: str
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0
    data_types: Sequence[str] = DEFAULT_DATA_TYPES

    @classmethod
    def create(
        cls, api_key: str, base_url: str, timeout_seconds: float = 10.0
    ) -> "HttpxFdcClient":
        return cls(
            api_key=api_key,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def search_foods(self, query: str, page_size: int = 10) -> dict[str, object]:
        body: dict[str, object] = {"query": query, "pageSize": page_size}
        if self.data_types:
            body["dataType"] = list(self.data_types)
        return await self._request("POST", "/foods/search", json=body)

    async def get_food(self, fdc_id: int) -> dict[str, object]:
        return await self._request(
            "GET",
            f"/food/{fdc_id}",
            params={
                "format": "abridged",
                "nutrients": [ENERGY_NUTRIENT_NUMBER, *ATWATER_ENERGY_NUMBERS],
            },
        )

    async def close(self) -> None:
        await self.http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str | list[str]] | None = None,
        json: dict[str, object] | None = None,
    ) -> dict[str, object]:
        response = await self.http_client.request(
            method,
            f"{self.base_url}{path}",
            params={"api_key": self.api_key, **(params or {})},
            json=json,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()
