"""HTTP client for creating orders through the Shopify Admin REST API."""

import logging
from typing import Any, Optional

import httpx

from cashea_relay.common.exceptions import UpstreamUnavailableError
from cashea_relay.common.http import read_json_body
from cashea_relay.confirmation.schemas import PlatformResult

logger = logging.getLogger(__name__)


class ShopifyClient:
    """Calls /admin/api/{version}/orders.json on a single store."""

    upstream = "shopify"

    def __init__(
        self,
        store: str,
        access_token: str,
        api_version: str = "2024-01",
        host: str = "myshopify.com",
        timeout: float = 8.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.store = store
        self.access_token = access_token
        self.api_version = api_version
        self.host = host
        self.timeout = timeout
        self.transport = transport

    @property
    def orders_url(self) -> str:
        return f"https://{self.store}.{self.host}/admin/api/{self.api_version}/orders.json"

    async def create_order(self, order: dict[str, Any]) -> PlatformResult:
        """POST an order document (``{"order": {...}}``).

        Raises:
            UpstreamUnavailableError: on connection errors or timeouts.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self.transport,
            ) as client:
                resp = await client.post(
                    self.orders_url,
                    json=order,
                    headers={"X-Shopify-Access-Token": self.access_token},
                )
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableError(
                self.upstream, f"Shopify did not answer within {self.timeout}s",
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(self.upstream, f"Shopify request failed: {e}") from e

        return PlatformResult(
            status_code=resp.status_code,
            body=read_json_body(resp, self.upstream),
        )
