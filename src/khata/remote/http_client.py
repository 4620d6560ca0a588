"""
HTTP implementation of the remote resource contract.

Talks to the business backend with httpx. The bearer token is read from the
durable store on every request; a 401 clears the stored session.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from khata.errors import RemoteRequestError
from khata.remote.base import RemoteResourceClient
from khata.schema.cache import AUTH_TOKEN_KEY, CACHE_KEYS, ResourceKey
from khata.storage.base import BaseKeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://ekthaabusiness-955272392528.europe-west1.run.app"

ENDPOINTS = {
    ResourceKey.DASHBOARD: "/api/dashboard",
    ResourceKey.TRANSACTIONS: "/api/transactions",
    ResourceKey.CUSTOMERS: "/api/customers",
    ResourceKey.PROFILE: "/api/profile",
    ResourceKey.PRODUCTS: "/api/products",
}


class KhataAPIClient(RemoteResourceClient):
    """
    Client for the business backend REST API.

    List resources arrive wrapped in an envelope (``{"customers": [...]}``);
    the client unwraps them so callers and the cache only see the list.
    """

    def __init__(
        self,
        store: BaseKeyValueStore,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.store = store
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            transport=transport,
        )

    async def __aenter__(self) -> KhataAPIClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def _auth_headers(self) -> dict[str, str]:
        token = await self.store.get(AUTH_TOKEN_KEY)
        if token:
            return {"Authorization": f"Bearer {token}"}
        return {}

    async def _clear_session(self) -> None:
        """Drop the stored token and profile after the server rejected them."""
        await self.store.remove(AUTH_TOKEN_KEY)
        await self.store.remove(CACHE_KEYS[ResourceKey.PROFILE])

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        try:
            response = await self._client.get(path, params=params, headers=await self._auth_headers())
        except httpx.HTTPError as e:
            raise RemoteRequestError(f"GET {path} failed: {e}") from e

        if response.status_code == 401:
            logger.warning("Session rejected by %s, clearing stored credentials", path)
            await self._clear_session()

        if response.status_code >= 400:
            raise RemoteRequestError(
                f"GET {path} returned {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise RemoteRequestError(f"GET {path} returned invalid JSON") from e

    async def _get_list(self, resource_key: ResourceKey, envelope: str) -> list[dict[str, Any]]:
        data = await self._get(ENDPOINTS[resource_key])
        if isinstance(data, dict):
            return list(data.get(envelope) or [])
        if isinstance(data, list):
            return data
        return []

    async def get_dashboard(self) -> dict[str, Any]:
        return await self._get(ENDPOINTS[ResourceKey.DASHBOARD])

    async def get_transactions(self, customer_id: str | None = None) -> list[dict[str, Any]]:
        if customer_id:
            data = await self._get(
                ENDPOINTS[ResourceKey.TRANSACTIONS], params={"customer_id": customer_id}
            )
            return list(data.get("transactions") or []) if isinstance(data, dict) else []
        return await self._get_list(ResourceKey.TRANSACTIONS, "transactions")

    async def get_customers(self) -> list[dict[str, Any]]:
        return await self._get_list(ResourceKey.CUSTOMERS, "customers")

    async def get_profile(self) -> dict[str, Any]:
        return await self._get(ENDPOINTS[ResourceKey.PROFILE])

    async def get_products(self) -> list[dict[str, Any]]:
        return await self._get_list(ResourceKey.PRODUCTS, "products")
