"""HTTP client for confirming down payments with Cashea."""

import logging
from decimal import Decimal
from typing import Optional
from urllib.parse import quote

import httpx

from cashea_relay.common.exceptions import UpstreamUnavailableError
from cashea_relay.common.http import read_json_body
from cashea_relay.confirmation.schemas import ProviderConfirmation

logger = logging.getLogger(__name__)


class CasheaClient:
    """Calls Cashea's /orders/{id}/down-payment endpoint.

    Each call opens its own ``httpx.AsyncClient`` so the TLS setting chosen
    here never leaks into other outbound clients.
    """

    upstream = "cashea"

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 8.0,
        verify_tls: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.verify_tls = verify_tls
        self.transport = transport

    def down_payment_url(self, id_number: str) -> str:
        return f"{self.base_url}/orders/{quote(id_number, safe='')}/down-payment"

    async def confirm_down_payment(
        self, id_number: str, amount: Decimal,
    ) -> ProviderConfirmation:
        """POST the confirmed amount for an order.

        Any HTTP status is returned to the caller; only network failures
        and timeouts raise.

        Raises:
            UpstreamUnavailableError: on connection errors or timeouts.
        """
        url = self.down_payment_url(id_number)
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                verify=self.verify_tls,
                transport=self.transport,
            ) as client:
                resp = await client.post(
                    url,
                    json={"amount": float(amount)},
                    headers={"Authorization": f"ApiKey {self.api_key}"},
                )
        except httpx.TimeoutException as e:
            raise UpstreamUnavailableError(
                self.upstream, f"Cashea did not answer within {self.timeout}s",
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(self.upstream, f"Cashea request failed: {e}") from e

        body = read_json_body(resp, self.upstream)
        logger.info(
            "Cashea responded %s",
            resp.status_code,
            extra={"id_number": id_number, "status_code": resp.status_code},
        )
        return ProviderConfirmation(status_code=resp.status_code, body=body)
