"""Client for the external pizza factory that fulfills orders."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from jwt_pizza_service.errors import FactoryFulfillmentFailed

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class FulfillmentResult:
    jwt: str
    report_url: str | None = None


class FactoryClient:
    """Sends placed orders to the factory.

    One attempt per order, bounded by *timeout*. Any non-2xx answer, transport
    error, timeout or unreadable body raises :class:`FactoryFulfillmentFailed`.
    *transport* lets tests plug in an ``httpx.MockTransport``.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        if self._api_key:
            return {"Authorization": f"Bearer {self._api_key}"}
        return {}

    async def fulfill(self, diner: dict[str, Any], order: dict[str, Any]) -> FulfillmentResult:
        url = f"{self._base_url}/api/order"
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(
                    url, json={"diner": diner, "order": order}, headers=self._headers()
                )
        except httpx.HTTPError as exc:
            log.warning("factory_unreachable", url=url, order_id=order.get("id"), error=str(exc))
            raise FactoryFulfillmentFailed(reason=str(exc)) from exc

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        report_url = body.get("reportUrl")

        if not resp.is_success:
            log.warning(
                "factory_rejected_order",
                order_id=order.get("id"),
                status=resp.status_code,
                report_url=report_url,
            )
            raise FactoryFulfillmentFailed(
                report_url=report_url, reason=body.get("message")
            )

        token = body.get("jwt")
        if not token:
            log.warning("factory_response_missing_jwt", order_id=order.get("id"))
            raise FactoryFulfillmentFailed(report_url=report_url, reason="missing jwt")

        log.info("order_fulfilled", order_id=order.get("id"), report_url=report_url)
        return FulfillmentResult(jwt=token, report_url=report_url)
