"""FactoryClient tests over httpx.MockTransport."""

from __future__ import annotations

import json

import httpx
import pytest

from jwt_pizza_service.errors import FactoryFulfillmentFailed
from jwt_pizza_service.factory import FactoryClient, FulfillmentResult

DINER = {"id": 3, "name": "pizza diner", "email": "d@jwt.com"}
ORDER = {"id": 12, "franchiseId": 1, "storeId": 1, "items": [{"menuId": 1, "price": 0.05}]}


def _client(handler, api_key: str = "secret-key") -> FactoryClient:
    return FactoryClient(
        "http://factory.test/", api_key=api_key, transport=httpx.MockTransport(handler)
    )


@pytest.mark.asyncio
async def test_fulfill_success():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"jwt": "factory-jwt", "reportUrl": "http://r/1"})

    result = await _client(handler).fulfill(DINER, ORDER)

    assert result == FulfillmentResult(jwt="factory-jwt", report_url="http://r/1")
    request = seen[0]
    assert request.method == "POST"
    assert str(request.url) == "http://factory.test/api/order"
    assert request.headers["Authorization"] == "Bearer secret-key"
    assert json.loads(request.content) == {"diner": DINER, "order": ORDER}


@pytest.mark.asyncio
async def test_no_auth_header_without_api_key():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"jwt": "factory-jwt"})

    result = await _client(handler, api_key="").fulfill(DINER, ORDER)
    assert result.report_url is None
    assert "Authorization" not in seen[0].headers


@pytest.mark.asyncio
async def test_rejection_carries_report_url():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"message": "oven on fire", "reportUrl": "http://r/fail"})

    with pytest.raises(FactoryFulfillmentFailed) as exc_info:
        await _client(handler).fulfill(DINER, ORDER)
    assert exc_info.value.report_url == "http://r/fail"
    assert exc_info.value.reason == "oven on fire"
    assert exc_info.value.to_body() == {
        "message": "Failed to fulfill order at factory",
        "reportUrl": "http://r/fail",
    }


@pytest.mark.asyncio
async def test_rejection_with_non_json_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    with pytest.raises(FactoryFulfillmentFailed) as exc_info:
        await _client(handler).fulfill(DINER, ORDER)
    assert exc_info.value.report_url is None
    assert exc_info.value.to_body() == {"message": "Failed to fulfill order at factory"}


@pytest.mark.asyncio
async def test_timeout_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(FactoryFulfillmentFailed):
        await _client(handler).fulfill(DINER, ORDER)


@pytest.mark.asyncio
async def test_connection_error_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(FactoryFulfillmentFailed):
        await _client(handler).fulfill(DINER, ORDER)


@pytest.mark.asyncio
async def test_success_without_jwt_is_a_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"reportUrl": "http://r/2"})

    with pytest.raises(FactoryFulfillmentFailed) as exc_info:
        await _client(handler).fulfill(DINER, ORDER)
    assert exc_info.value.report_url == "http://r/2"
