"""
Async client for the quotation, accessory and option stores.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from .catalog import build_index
from .config import Settings
from .models import CatalogSet, QuotationFilter

logger = logging.getLogger(__name__)

CATALOG_PATHS = {
    "accessories": "/api/accessories",
    "options": "/api/options",
}


class QuotationClient:
    """
    Thin wrapper over ``httpx.AsyncClient`` for the endpoints the engine uses.

    Every call raises ``httpx.HTTPStatusError`` or ``httpx.RequestError`` on
    failure; nothing is retried here.
    """

    def __init__(self, settings: Optional[Settings] = None, http: Optional[httpx.AsyncClient] = None):
        self.settings = settings or Settings.from_env()
        self._owns_http = http is None
        if http is None:
            headers = {"Accept": "application/json"}
            if self.settings.token:
                headers["Authorization"] = f"Bearer {self.settings.token}"
            http = httpx.AsyncClient(
                base_url=self.settings.base_url,
                headers=headers,
                timeout=self.settings.timeout,
            )
        self.http = http

    async def __aenter__(self) -> "QuotationClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def _request(self, method: str, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        logger.debug(f"{method} {path} params={params}")
        response = await self.http.request(method, path, params=params)
        response.raise_for_status()
        if not response.content:
            return None
        return response.json()

    async def fetch_quotations(self, filter: Optional[QuotationFilter] = None) -> Any:
        filter = filter or QuotationFilter(limit=self.settings.page_size)
        return await self._request("GET", "/api/quotes", params=filter.to_params())

    async def fetch_quotation_by_id(self, quotation_id: str) -> Any:
        return await self._request("GET", f"/api/quotes/{quotation_id}")

    async def fetch_catalog(self, kind: str) -> Any:
        if kind not in CATALOG_PATHS:
            raise ValueError(f"Unknown catalog kind: {kind!r}")
        return await self._request("GET", CATALOG_PATHS[kind])

    async def cancel_quotation(self, quotation_id: str) -> Any:
        # The backend soft-deletes, which marks the quotation canceled
        return await self._request("DELETE", f"/api/quotes/{quotation_id}")

    async def load_catalogs(self) -> CatalogSet:
        """
        Fetch both catalogs concurrently and index them.

        A failed fetch degrades to an empty index for that catalog only.
        """
        kinds = list(CATALOG_PATHS)
        results = await asyncio.gather(
            *(self.fetch_catalog(kind) for kind in kinds),
            return_exceptions=True,
        )
        indexes = {}
        for kind, result in zip(kinds, results):
            if isinstance(result, BaseException):
                logger.error(f"Failed to load {kind} catalog: {result}")
                indexes[kind] = {}
            else:
                indexes[kind] = build_index(result)
                logger.info(f"Loaded {len(indexes[kind])} {kind}")
        return CatalogSet(accessories=indexes["accessories"], options=indexes["options"])
