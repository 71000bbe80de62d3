"""Shared test fixtures for Cashea-Relay."""

import copy
from typing import Any, Callable, Union

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from cashea_relay.common.config import RelaySettings
from cashea_relay.confirmation.cashea_client import CasheaClient
from cashea_relay.confirmation.service import ConfirmationService
from cashea_relay.confirmation.shopify_client import ShopifyClient

CASHEA_API_KEY = "test-cashea-api-key"
SHOPIFY_STORE = "relojteca-test"
SHOPIFY_TOKEN = "shpat_test_token"

SHOPIFY_ORDER = {
    "order": {
        "id": 5550001,
        "order_number": 1042,
        "total_price": "150.00",
        "admin_graphql_api_id": "gid://shopify/Order/5550001",
    }
}

_BASE_PAYLOAD = {
    "idNumber": "CSH-10001",
    "amount": "150.00",
    "customer": {
        "first_name": "María",
        "last_name": "González",
        "email": "maria@example.com",
        "phone": "+584121234567",
        "address1": "Av. Francisco de Miranda",
        "city": "Caracas",
        "province": "Distrito Capital",
        "zip": "1060",
    },
    "lineItems": [
        {
            "title": "Reloj Casio MTP-1302",
            "price": "150.00",
            "quantity": 1,
            "sku": "MTP-1302",
            "variant_id": 44556677,
        },
    ],
}


def valid_payload(**overrides: Any) -> dict[str, Any]:
    payload = copy.deepcopy(_BASE_PAYLOAD)
    payload.update(overrides)
    return payload


def make_settings(**overrides: Any) -> RelaySettings:
    defaults = {
        "cashea_api_key": CASHEA_API_KEY,
        "shopify_store": SHOPIFY_STORE,
        "shopify_access_token": SHOPIFY_TOKEN,
    }
    defaults.update(overrides)
    return RelaySettings(**defaults)


def respond(status_code: int, json: Any = None, content: bytes | None = None):
    """Build a fresh httpx.Response for every call."""

    def build(request: httpx.Request) -> httpx.Response:
        if content is not None:
            return httpx.Response(status_code, content=content)
        return httpx.Response(status_code, json=json if json is not None else {})

    return build


Reply = Union[Exception, Callable[[httpx.Request], httpx.Response]]


class FakeUpstream:
    """Scripted upstream for httpx.MockTransport that records every request.

    Outcomes are consumed in order; the last one repeats.
    """

    def __init__(self, *outcomes: Reply):
        self.outcomes = list(outcomes)
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        return outcome(request)

    @property
    def calls(self) -> int:
        return len(self.requests)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


def build_service(
    cashea: FakeUpstream,
    shopify: FakeUpstream,
    **overrides: Any,
) -> ConfirmationService:
    settings = make_settings(**overrides)
    return ConfirmationService(
        settings,
        cashea_client=CasheaClient(
            base_url=settings.cashea_base_url,
            api_key=settings.cashea_api_key,
            timeout=settings.http_timeout,
            transport=cashea.transport,
        ),
        shopify_client=ShopifyClient(
            store=settings.shopify_store,
            access_token=settings.shopify_access_token,
            timeout=settings.http_timeout,
            transport=shopify.transport,
        ),
    )


@pytest.fixture
def payload():
    return valid_payload()


@pytest.fixture
def cashea_ok():
    return FakeUpstream(respond(201, {"id": "CSH-10001", "status": "PAID"}))


@pytest.fixture
def shopify_ok():
    return FakeUpstream(respond(201, SHOPIFY_ORDER))


@pytest.fixture
def app(monkeypatch):
    """Create a test app with credentials set through the environment."""
    monkeypatch.setenv("RELAY_CASHEA_API_KEY", CASHEA_API_KEY)
    monkeypatch.setenv("RELAY_SHOPIFY_STORE", SHOPIFY_STORE)
    monkeypatch.setenv("RELAY_SHOPIFY_ACCESS_TOKEN", SHOPIFY_TOKEN)
    monkeypatch.setenv("RELAY_ENVIRONMENT", "development")

    # Clear caches and singletons so new env vars take effect
    from cashea_relay.common.config import get_settings
    get_settings.cache_clear()

    from cashea_relay.deps import reset_singletons
    reset_singletons()

    from cashea_relay.app import create_app
    yield create_app()

    get_settings.cache_clear()
    reset_singletons()


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def use_upstreams(app):
    """Point the app's confirmation service at fake upstreams."""
    from cashea_relay.deps import get_confirmation_service

    def _use(cashea: FakeUpstream, shopify: FakeUpstream, **overrides: Any) -> None:
        svc = build_service(cashea, shopify, **overrides)
        app.dependency_overrides[get_confirmation_service] = lambda: svc

    yield _use
    app.dependency_overrides.clear()
